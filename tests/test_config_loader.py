"""
Tests for difficulty profile loading, validation and clamping.
"""

import logging

import pytest
import yaml

from flap_arena.arena_core.config_loader import (
    MIN_OBSTACLE_GAP,
    MIN_SPAWN_INTERVAL,
    _default_path,
    get_profile,
    load_profile,
    load_profiles,
)


@pytest.fixture
def raw_config():
    with open(_default_path(), "r") as f:
        return yaml.safe_load(f)


def write_config(tmp_path, data):
    path = tmp_path / "profiles.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(data, f)
    return str(path)


class TestLoadProfiles:
    """Test loading the shipped profile file."""

    def test_all_profiles_present(self):
        profiles = load_profiles()
        assert {"classic", "easy", "hard", "crazy"} <= set(profiles)

    def test_easy_values(self):
        easy = load_profile("easy")
        assert easy.physics.gravity == 1400
        assert easy.physics.jump_impulse == -420
        assert easy.physics.max_fall_speed == 500
        assert easy.obstacles.scroll_speed == 150
        assert easy.obstacles.gap == 200
        assert easy.pickups.has_coins
        assert easy.hazards.has_hazards

    def test_classic_has_no_extras(self):
        classic = load_profile("classic")
        assert not classic.pickups.has_coins
        assert not classic.hazards.has_hazards
        assert not classic.obstacles.has_moving

    def test_only_crazy_moves_obstacles(self):
        profiles = load_profiles()
        assert profiles["crazy"].obstacles.has_moving
        assert not profiles["hard"].obstacles.has_moving

    def test_defaults_fill_missing_sections(self):
        hard = load_profile("hard")
        assert hard.collision.hitbox_padding == 5
        assert hard.scoring.kill_bonus == 3
        assert hard.engine.max_frame_dt == pytest.approx(0.033)

    def test_derived_geometry(self):
        easy = load_profile("easy")
        assert easy.ground_y == 600 - 80
        assert easy.avatar_start == (80.0, 300.0)
        # 600 - 80 - 200 - 70 - 30
        assert easy.top_height_range == (70.0, 220.0)
        assert easy.oscillation_range == (70.0, 250.0)

    def test_coin_values(self):
        scoring = load_profile("easy").scoring
        assert scoring.coin_value("silver") == 1
        assert scoring.coin_value("gold") == 3
        assert scoring.coin_value("diamond") == 5
        with pytest.raises(ValueError):
            scoring.coin_value("platinum")

    def test_fire_interval_by_level(self):
        weapon = load_profile("easy").weapon
        assert weapon.max_level == 3
        assert weapon.fire_interval(1) == pytest.approx(0.4)
        assert weapon.fire_interval(3) == pytest.approx(0.2)
        assert weapon.fire_interval(7) == pytest.approx(0.2)

    def test_get_profile_is_cached(self):
        assert get_profile("hard") is get_profile("hard")


class TestProfileErrors:
    """Structural problems raise; degenerate numbers are clamped."""

    def test_unknown_profile(self):
        with pytest.raises(ValueError):
            load_profile("impossible")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_profiles(str(tmp_path / "nope.yaml"))

    def test_ammo_range_inverted(self, tmp_path, raw_config):
        raw_config["defaults"]["pickups"]["weapon_ammo_min"] = 20
        raw_config["defaults"]["pickups"]["weapon_ammo_max"] = 5
        with pytest.raises(ValueError):
            load_profiles(write_config(tmp_path, raw_config))

    def test_coin_tier_mismatch(self, tmp_path, raw_config):
        raw_config["defaults"]["pickups"]["coin_weights"]["ruby"] = 5
        with pytest.raises(ValueError):
            load_profiles(write_config(tmp_path, raw_config))

    def test_fire_intervals_length(self, tmp_path, raw_config):
        raw_config["defaults"]["weapon"]["fire_intervals"] = [0.4, 0.3]
        with pytest.raises(ValueError):
            load_profiles(write_config(tmp_path, raw_config))

    def test_missing_hazard_field(self, tmp_path, raw_config):
        del raw_config["defaults"]["hazards"]["bomb_gravity"]
        with pytest.raises(ValueError):
            load_profiles(write_config(tmp_path, raw_config))

    def test_small_gap_clamped_with_warning(self, tmp_path, raw_config, caplog):
        raw_config["profiles"]["easy"]["obstacles"]["gap"] = 10
        with caplog.at_level(logging.WARNING, logger="flap_arena.arena_core.config_loader"):
            easy = load_profiles(write_config(tmp_path, raw_config))["easy"]
        assert easy.obstacles.gap == MIN_OBSTACLE_GAP
        assert "obstacles.gap" in caplog.text

    def test_zero_spawn_interval_clamped(self, tmp_path, raw_config):
        raw_config["profiles"]["hard"]["obstacles"]["spawn_interval"] = 0
        hard = load_profiles(write_config(tmp_path, raw_config))["hard"]
        assert hard.obstacles.spawn_interval == MIN_SPAWN_INTERVAL


class TestReplace:
    """Test deriving tuned profiles."""

    def test_replace_overrides_fields(self):
        easy = load_profile("easy")
        tuned = easy.replace(physics={"gravity": 1200, "jump_impulse": -380})
        assert tuned.physics.gravity == 1200
        assert tuned.physics.jump_impulse == -380
        assert tuned.physics.max_fall_speed == easy.physics.max_fall_speed
        assert easy.physics.gravity == 1400

    def test_replace_reclamps(self):
        tuned = load_profile("easy").replace(pickups={"coin_spawn_chance": 3.0})
        assert tuned.pickups.coin_spawn_chance == 1.0

    def test_replace_unknown_section(self):
        with pytest.raises(ValueError):
            load_profile("easy").replace(turbo={"boost": 1})

    def test_replace_name(self):
        assert load_profile("easy").replace(name="custom").name == "custom"
