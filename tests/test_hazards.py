"""
Tests for hazard behaviors, spawn escalation and projectiles.
"""

import pytest

from flap_arena.arena_core.avatar import AvatarController
from flap_arena.arena_core.config_loader import load_profile
from flap_arena.arena_core.entities import Bomber, BulletTier, Hunter
from flap_arena.arena_core.events import EventKind, EventLog
from flap_arena.arena_core.hazards import HazardSystem, ProjectileSystem
from flap_arena.arena_core.rng import SpawnRoller
from flap_arena.arena_core.scoring import ScoreTracker


def make_rig(profile, seed=3):
    events = EventLog()
    projectiles = ProjectileSystem(profile, events)
    hazards = HazardSystem(profile, SpawnRoller(seed), projectiles, events)
    return hazards, projectiles, events


@pytest.fixture
def profile():
    # No automatic spawns; tests place hazards explicitly
    return load_profile("classic")


@pytest.fixture
def avatar(profile):
    return AvatarController(profile).avatar


class TestBehaviors:
    """Per-kind motion."""

    def test_drifter_moves_left_and_wobbles(self, profile, avatar):
        hazards, _, _ = make_rig(profile)
        drifter = hazards.spawn_drifter(y=200.0)
        x0 = drifter.x
        cfg = profile.hazards
        for _ in range(30):
            hazards.update(0.02, avatar, 0)
            assert abs(drifter.y - 200.0) <= cfg.drifter_amplitude + 1e-9
        expected_speed = profile.obstacles.scroll_speed * cfg.drifter_speed_factor
        assert drifter.x == pytest.approx(x0 - expected_speed * 0.6)

    def test_missile_homes_vertically(self, profile, avatar):
        hazards, _, _ = make_rig(profile)
        missile = hazards.spawn_missile(y=100.0)
        avatar.y = 400.0
        hazards.update(0.02, avatar, 0)
        assert 0 < missile.vy <= profile.hazards.missile_max_vertical_speed
        assert missile.y > 100.0
        assert missile.vx == -profile.hazards.missile_speed

    def test_hunter_holds_fires_then_retreats(self, profile, avatar):
        hazards, projectiles, _ = make_rig(profile)
        hunter = hazards.spawn_hunter(y=200.0)
        hold_x = profile.board.width * profile.hazards.hunter_hold_ratio

        for _ in range(100):  # 5 seconds
            hazards.update(0.05, avatar, 0)
        assert hunter.x == pytest.approx(hold_x)
        assert not hunter.retreating
        assert projectiles.hazard_bullets
        assert all(b.vx < 0 for b in projectiles.hazard_bullets)

        for _ in range(60):  # past the hold time
            hazards.update(0.05, avatar, 0)
        assert hunter.retreating
        assert hunter.x < hold_x

    def test_hunter_aims_at_avatar(self, profile, avatar):
        hazards, projectiles, _ = make_rig(profile)
        hunter = hazards.spawn_hunter(y=200.0)
        hunter.x = 300.0
        avatar.x, avatar.y = 300.0, 500.0
        bullet = hazards.fire_at(hunter, avatar)
        assert bullet.vx == pytest.approx(0.0)
        assert bullet.vy > 0

    def test_coincident_aim_uses_neutral_direction(self, profile, avatar):
        hazards, _, _ = make_rig(profile)
        hunter = hazards.spawn_hunter(y=avatar.y)
        hunter.x = avatar.x
        hunter.y = avatar.y
        bullet = hazards.fire_at(hunter, avatar)
        assert bullet.vx < 0
        assert bullet.vy == 0.0

    def test_bomber_drops_falling_bombs(self, profile, avatar):
        hazards, projectiles, _ = make_rig(profile)
        hazards.spawn_bomber(y=80.0)
        for _ in range(40):  # 2 seconds
            hazards.update(0.05, avatar, 0)
            projectiles.advance(0.05)
        assert projectiles.bombs
        bomb = projectiles.bombs[0]
        assert bomb.vy > profile.hazards.bomb_initial_vy

    def test_offscreen_hazards_removed(self, profile, avatar):
        hazards, _, _ = make_rig(profile)
        drifter = hazards.spawn_drifter(y=200.0)
        drifter.x = -120.0
        hazards.update(0.01, avatar, 0)
        assert hazards.hazards == []


class TestSpawnSchedule:
    """Basic timer plus score-gated advanced timer."""

    @pytest.fixture
    def armed_profile(self):
        return load_profile("hard").replace(
            hazards={"spawn_interval": 1000.0, "bomber_share": 0.0}
        )

    def test_advanced_interval_shrinks_with_score(self, armed_profile):
        hazards, _, _ = make_rig(armed_profile)
        cfg = armed_profile.hazards
        assert hazards.advanced_interval(cfg.advanced_score) == cfg.advanced_spawn_interval
        assert hazards.advanced_interval(cfg.advanced_score + 8) == pytest.approx(
            cfg.advanced_spawn_interval - 8 * cfg.advanced_interval_decay
        )
        assert hazards.advanced_interval(10_000) == cfg.advanced_min_interval

    def test_no_advanced_below_threshold(self, armed_profile, avatar):
        hazards, _, _ = make_rig(armed_profile)
        hazards.update(armed_profile.hazards.advanced_spawn_interval, avatar, 0)
        assert hazards.hazards == []

    def test_advanced_spawn_at_threshold(self, armed_profile, avatar):
        hazards, _, _ = make_rig(armed_profile)
        cfg = armed_profile.hazards
        hazards.update(cfg.advanced_spawn_interval, avatar, cfg.advanced_score)
        assert any(isinstance(h, Hunter) for h in hazards.hazards)

    def test_basic_spawn_on_timer(self, avatar):
        profile = load_profile("crazy")
        hazards, _, _ = make_rig(profile)
        hazards.update(profile.hazards.spawn_interval - 0.01, avatar, 0)
        assert hazards.hazards == []
        hazards.update(0.02, avatar, 0)
        assert len(hazards.hazards) == 1
        assert hazards.hazards[0].kind.value in ("drifter", "missile")

    def test_flag_disables_spawns(self, profile, avatar):
        hazards, _, _ = make_rig(profile)
        for _ in range(100):
            hazards.update(1.0, avatar, 100)
        assert hazards.hazards == []


class TestPlayerBullets:
    """Bullet damage tiers against hazards."""

    @pytest.fixture
    def scorer(self, profile):
        return ScoreTracker(profile)

    def test_lethal_bullet_kills_full_health_hunter(self, profile, scorer):
        hazards, projectiles, events = make_rig(profile)
        hunter = hazards.spawn_hunter(y=200.0)
        assert hunter.health == 3
        projectiles.spawn_player_bullet(hunter.x, hunter.y, BulletTier.LETHAL)

        killed = hazards.resolve_player_bullets(scorer)

        assert killed == [hunter]
        assert hazards.hazards == []
        assert scorer.kills == 1
        assert scorer.score == profile.scoring.kill_bonus
        assert projectiles.bullets == []
        assert events.drain()[-1].kind == EventKind.KILL

    def test_normal_bullet_chips_health(self, profile, scorer):
        hazards, projectiles, events = make_rig(profile)
        hunter = hazards.spawn_hunter(y=200.0)
        projectiles.spawn_player_bullet(hunter.x, hunter.y, BulletTier.NORMAL)

        assert hazards.resolve_player_bullets(scorer) == []
        assert hunter.health == 2
        assert scorer.kills == 0
        assert projectiles.bullets == []
        assert events.drain()[-1].kind == EventKind.HAZARD_HIT

    def test_elevated_bullet_damage(self, profile, scorer):
        hazards, projectiles, _ = make_rig(profile)
        bomber = hazards.spawn_bomber(y=100.0)
        assert isinstance(bomber, Bomber)
        projectiles.spawn_player_bullet(bomber.x, bomber.y, BulletTier.ELEVATED)
        assert hazards.resolve_player_bullets(scorer) == [bomber]

    def test_drifter_dies_to_any_hit(self, profile, scorer):
        hazards, projectiles, _ = make_rig(profile)
        drifter = hazards.spawn_drifter(y=200.0)
        projectiles.spawn_player_bullet(drifter.x, drifter.y, BulletTier.NORMAL)
        assert hazards.resolve_player_bullets(scorer) == [drifter]

    def test_one_bullet_one_target(self, profile, scorer):
        hazards, projectiles, _ = make_rig(profile)
        a = hazards.spawn_drifter(y=200.0)
        b = hazards.spawn_drifter(y=200.0)
        b.x = a.x
        projectiles.spawn_player_bullet(a.x, a.y, BulletTier.NORMAL)
        assert len(hazards.resolve_player_bullets(scorer)) == 1
        assert len(hazards.hazards) == 1

    def test_bullets_leave_screen(self, profile):
        _, projectiles, _ = make_rig(profile)
        projectiles.spawn_player_bullet(profile.board.width - 1.0, 100.0, BulletTier.NORMAL)
        projectiles.advance(0.5)
        assert projectiles.bullets == []

    def test_bombs_burst_on_ground(self, profile):
        _, projectiles, _ = make_rig(profile)
        projectiles.spawn_bomb(100.0, profile.ground_y - 10.0, 0.0, 100.0)
        projectiles.advance(0.1)
        assert projectiles.bombs == []
