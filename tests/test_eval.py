"""
Tests for the evaluation harness and the baseline agent.
"""

import json
from pathlib import Path

import pytest

from flap_arena.evaluation.run_eval import (
    evaluate_agent,
    evaluate_single_seed,
    format_summary,
    load_agent,
    load_seed_bank,
    main,
    save_results,
)

GAP_FOLLOWER = Path(__file__).resolve().parent.parent / "contestants" / "gap_follower"


@pytest.fixture
def agent_fn():
    return load_agent(str(GAP_FOLLOWER))


@pytest.fixture
def seed_file(tmp_path):
    path = tmp_path / "seeds.json"
    path.write_text(json.dumps({"seeds": [3, 4]}))
    return str(path)


class TestLoading:

    def test_seed_bank(self):
        seeds = load_seed_bank()
        assert len(seeds) == 20
        assert len(set(seeds)) == 20

    def test_custom_seed_bank(self, seed_file):
        assert load_seed_bank(seed_file) == [3, 4]

    def test_load_directory_agent(self, agent_fn):
        assert callable(agent_fn)

    def test_load_agent_file(self):
        assert callable(load_agent(str(GAP_FOLLOWER / "agent.py")))

    def test_missing_agent(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_agent(str(tmp_path / "ghost"))

    def test_function_agent(self, tmp_path):
        path = tmp_path / "agent.py"
        path.write_text("def act(observation):\n    return 0\n")
        assert load_agent(str(path))({}) == 0

    def test_agent_without_act(self, tmp_path):
        path = tmp_path / "agent.py"
        path.write_text("VALUE = 1\n")
        with pytest.raises(AttributeError):
            load_agent(str(path))


class TestEvaluation:

    def test_single_seed(self, agent_fn):
        result = evaluate_single_seed(agent_fn, seed=5, difficulty="classic",
                                      max_steps=50, record_actions=True)
        assert result.seed == 5
        assert 0 < result.steps <= 50
        assert len(result.actions) == result.steps
        # The agent leaves the idle state immediately
        assert result.actions[0] == 1

    def test_summary(self, agent_fn):
        summary = evaluate_agent(agent_fn, seeds=[1, 2], difficulty="classic",
                                 max_steps=50, verbose=False)
        assert summary.difficulty == "classic"
        assert len(summary.results) == 2
        assert summary.min_score <= summary.mean_score <= summary.max_score

    def test_empty_seed_list(self, agent_fn):
        with pytest.raises(ValueError):
            evaluate_agent(agent_fn, seeds=[], verbose=False)

    def test_baseline_scores_on_easy(self, agent_fn):
        summary = evaluate_agent(agent_fn, seeds=[1009], difficulty="easy",
                                 max_steps=1500, verbose=False)
        assert summary.max_score >= 1

    def test_save_results(self, agent_fn, tmp_path):
        summary = evaluate_agent(agent_fn, seeds=[1], difficulty="classic",
                                 max_steps=20, verbose=False)
        out = tmp_path / "results.json"
        save_results(summary, "gap_follower", str(out))
        data = json.loads(out.read_text())
        assert data["agent"] == "gap_follower"
        assert data["results"][0]["seed"] == 1
        assert "actions" not in data["results"][0]

    def test_format_summary(self, agent_fn):
        summary = evaluate_agent(agent_fn, seeds=[1, 2], difficulty="classic",
                                 max_steps=20, verbose=False)
        text = format_summary(summary)
        assert "classic" in text
        assert "Seeds" in text


class TestMain:

    def test_quiet_run(self, seed_file, tmp_path):
        out = tmp_path / "out.json"
        code = main([
            "--agent", str(GAP_FOLLOWER),
            "--difficulty", "classic",
            "--seeds", seed_file,
            "--max-steps", "20",
            "--output", str(out),
            "--quiet",
        ])
        assert code == 0
        assert out.exists()

    def test_bad_agent(self, tmp_path):
        assert main(["--agent", str(tmp_path / "missing"), "--quiet"]) == 1
