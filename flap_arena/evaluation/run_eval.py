"""
Evaluation Harness
==================

Runs an agent against the fixed seed bank and summarises its scores.

Agents are loaded from a directory holding agent.py or from the file itself.
The module must define either a FlapAgent class with an act(observation)
method, or a module-level act(observation) function.

Usage:
    python -m flap_arena.evaluation.run_eval --agent contestants/gap_follower --difficulty hard
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import logging
import sys
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np

from flap_arena.arena_core.env_gym import FlapArenaEnv

logger = logging.getLogger(__name__)

DEFAULT_SEED_BANK = Path(__file__).with_name("seed_bank.json")
AGENT_MODULE_NAME = "flap_agent_under_test"

AgentFn = Callable[[dict], int]


@dataclass
class EvalResult:
    """Outcome of one seeded episode."""
    seed: int
    final_score: int
    coins: int
    kills: int
    steps: int
    elapsed_time: float
    actions: Optional[List[int]] = None


@dataclass
class EvalSummary:
    """Aggregate statistics over every evaluated seed."""
    difficulty: str
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    mean_coins: float
    mean_kills: float
    total_time: float
    results: List[EvalResult]


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    """
    Read the seed list from a JSON file of the form {"seeds": [...]}.

    Args:
        path: Seed bank file. The bundled seed_bank.json if None.
    """
    bank = Path(path) if path is not None else DEFAULT_SEED_BANK
    with open(bank, "r") as f:
        return [int(s) for s in json.load(f)["seeds"]]


def _import_agent_module(agent_file: Path):
    spec = importlib.util.spec_from_file_location(AGENT_MODULE_NAME, agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import agent from {agent_file}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[AGENT_MODULE_NAME] = module
    spec.loader.exec_module(module)
    return module


def load_agent(agent_path: str) -> AgentFn:
    """
    Resolve an agent's act callable.

    Args:
        agent_path: Agent directory (containing agent.py) or a .py file.

    Raises:
        FileNotFoundError: No agent file at the path.
        ImportError: The file could not be imported.
        AttributeError: Neither FlapAgent.act nor a module act exists.
    """
    path = Path(agent_path)
    agent_file = path / "agent.py" if path.is_dir() else path
    if not agent_file.is_file():
        raise FileNotFoundError(f"No agent at {agent_file}")

    module = _import_agent_module(agent_file)

    agent_cls = getattr(module, "FlapAgent", None)
    if agent_cls is not None:
        act = getattr(agent_cls(), "act", None)
        if act is None:
            raise AttributeError(f"{agent_file}: FlapAgent has no 'act' method")
        return act

    act = getattr(module, "act", None)
    if act is None:
        raise AttributeError(
            f"{agent_file}: define a FlapAgent class with 'act' or a module-level 'act' function"
        )
    return act


def evaluate_single_seed(
    agent_fn: AgentFn,
    seed: int,
    difficulty: str = "easy",
    max_steps: Optional[int] = 5000,
    record_actions: bool = False,
    frame_skip: int = 2
) -> EvalResult:
    """
    Play one episode to termination or truncation.

    Args:
        agent_fn: Observation dict -> 0 (no-op) or 1 (jump).
        seed: Episode seed.
        difficulty: Profile name.
        max_steps: Truncation limit in env steps.
        record_actions: Keep every chosen action in the result.
        frame_skip: Engine frames per env step.
    """
    env = FlapArenaEnv(difficulty=difficulty, max_steps=max_steps, frame_skip=frame_skip)
    actions: Optional[List[int]] = [] if record_actions else None

    started = time.perf_counter()
    try:
        obs, info = env.reset(seed=seed)
        steps = 0
        while True:
            action = int(agent_fn(obs))
            if actions is not None:
                actions.append(action)
            obs, _, terminated, truncated, info = env.step(action)
            steps += 1
            if terminated or truncated:
                break
    finally:
        env.close()
    elapsed = time.perf_counter() - started

    logger.info(
        "seed=%d score=%d coins=%d kills=%d steps=%d (%.2fs)",
        seed, info["score"], info["coins"], info["kills"], steps, elapsed,
    )
    return EvalResult(
        seed=seed,
        final_score=info["score"],
        coins=info["coins"],
        kills=info["kills"],
        steps=steps,
        elapsed_time=elapsed,
        actions=actions,
    )


def summarize(difficulty: str, results: List[EvalResult], total_time: float) -> EvalSummary:
    """Fold per-seed results into an EvalSummary."""
    scores = np.array([r.final_score for r in results], dtype=np.float64)
    return EvalSummary(
        difficulty=difficulty,
        mean_score=float(scores.mean()),
        std_score=float(scores.std()),
        min_score=int(scores.min()),
        max_score=int(scores.max()),
        median_score=float(np.median(scores)),
        mean_coins=float(np.mean([r.coins for r in results])),
        mean_kills=float(np.mean([r.kills for r in results])),
        total_time=total_time,
        results=results,
    )


def format_summary(summary: EvalSummary) -> str:
    """Human-readable summary table."""
    rule = "-" * 44
    rows = [
        ("Difficulty", summary.difficulty),
        ("Seeds", str(len(summary.results))),
        ("Score mean", f"{summary.mean_score:.2f} (std {summary.std_score:.2f})"),
        ("Score median", f"{summary.median_score:.2f}"),
        ("Score range", f"{summary.min_score} .. {summary.max_score}"),
        ("Coins mean", f"{summary.mean_coins:.2f}"),
        ("Kills mean", f"{summary.mean_kills:.2f}"),
        ("Wall time", f"{summary.total_time:.2f}s"),
    ]
    lines = [rule, "FLAP ARENA EVALUATION", rule]
    lines.extend(f"{label:<14}{value}" for label, value in rows)
    lines.append(rule)
    return "\n".join(lines)


def evaluate_agent(
    agent_fn: AgentFn,
    seeds: Optional[List[int]] = None,
    difficulty: str = "easy",
    max_steps: Optional[int] = 5000,
    record_actions: bool = False,
    verbose: bool = True,
    frame_skip: int = 2
) -> EvalSummary:
    """
    Evaluate an agent over a list of seeds.

    Args:
        agent_fn: Observation dict -> action.
        seeds: Seeds to play. The bundled seed bank if None.
        difficulty: Profile name.
        max_steps: Truncation limit per episode.
        record_actions: Keep per-step actions in each result.
        verbose: Print the summary table when done.
        frame_skip: Engine frames per env step.

    Raises:
        ValueError: The seed list is empty.
    """
    if seeds is None:
        seeds = load_seed_bank()
    if not seeds:
        raise ValueError("Seed list is empty")

    logger.info("Evaluating %d seeds on %s", len(seeds), difficulty)
    started = time.perf_counter()

    results = []
    for index, seed in enumerate(seeds, start=1):
        logger.debug("Seed %d/%d: %d", index, len(seeds), seed)
        results.append(evaluate_single_seed(
            agent_fn,
            seed,
            difficulty=difficulty,
            max_steps=max_steps,
            record_actions=record_actions,
            frame_skip=frame_skip,
        ))

    summary = summarize(difficulty, results, time.perf_counter() - started)
    if verbose:
        print(format_summary(summary))
    return summary


def save_results(summary: EvalSummary, agent_name: str, output_path: str) -> None:
    """Write the summary and per-seed results (without action traces) as JSON."""
    payload = asdict(summary)
    for result in payload["results"]:
        result.pop("actions", None)
    payload["agent"] = agent_name
    payload["timestamp"] = time.strftime("%Y-%m-%dT%H:%M:%S")

    with open(output_path, "w") as f:
        json.dump(payload, f, indent=2)
    logger.info("Wrote %s", output_path)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Evaluate a flap arena agent")
    parser.add_argument("--agent", required=True,
                        help="Agent directory or agent.py file")
    parser.add_argument("--difficulty", default="easy",
                        help="Difficulty profile name")
    parser.add_argument("--seeds", default=None,
                        help="Seed bank JSON (bundled bank if omitted)")
    parser.add_argument("--max-steps", type=int, default=5000,
                        help="Env steps before truncation")
    parser.add_argument("--frame-skip", type=int, default=2,
                        help="Engine frames per env step")
    parser.add_argument("--output", default=None,
                        help="Write results JSON here")
    parser.add_argument("--record", action="store_true",
                        help="Keep per-step actions")
    parser.add_argument("--quiet", action="store_true",
                        help="Warnings only, no summary table")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        agent_fn = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        logger.error("Could not load agent: %s", e)
        return 1

    summary = evaluate_agent(
        agent_fn,
        seeds=load_seed_bank(args.seeds) if args.seeds else None,
        difficulty=args.difficulty,
        max_steps=args.max_steps,
        record_actions=args.record,
        verbose=not args.quiet,
        frame_skip=args.frame_skip,
    )

    if args.output:
        save_results(summary, Path(args.agent).resolve().name, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
