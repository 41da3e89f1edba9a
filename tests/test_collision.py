"""
Tests for collision detection order and shield resolution.
"""

import pytest

from flap_arena.arena_core.entities import ObstaclePair, SessionStatus, ShieldLevel
from flap_arena.arena_core.events import EventKind
from flap_arena.arena_core.game import CoreGame
from flap_arena.arena_core.pickups import apply_shield


@pytest.fixture
def game():
    """Classic session already in PLAYING, nothing on screen."""
    g = CoreGame("classic", seed=11)
    g.reset()
    g.arbiter.start()
    return g


def place_pair(game, top_height, x=None, gap=170.0):
    avatar = game.avatar
    pair = ObstaclePair(
        x=avatar.x - 10.0 if x is None else x,
        top_height=top_height,
        gap=gap,
        width=70.0,
    )
    game.obstacles.pairs.append(pair)
    return pair


def place_bullet(game):
    avatar = game.avatar
    return game.projectiles.spawn_hazard_bullet(avatar.x, avatar.y, -1.0, 0.0, 0.0)


class TestObstacleContact:
    """Padded box against the pair's barriers."""

    def test_barrier_ends_session(self, game):
        place_pair(game, top_height=game.avatar.y - 5.0)
        contacts = game.collision.resolve()
        assert [c.source for c in contacts] == ["obstacle"]
        assert not contacts[0].absorbed
        assert game.status == SessionStatus.GAME_OVER
        [event] = game.events.drain()
        assert event.kind == EventKind.GAME_OVER
        assert event.data["cause"] == "obstacle"

    def test_inside_gap_is_safe(self, game):
        place_pair(game, top_height=game.avatar.y - 100.0)
        assert game.collision.resolve() == []
        assert game.status == SessionStatus.PLAYING

    def test_padding_forgives_grazes(self, game):
        avatar = game.avatar
        padding = game.profile.collision.hitbox_padding
        # Overlaps the raw box but not the padded one
        place_pair(game, top_height=avatar.top + padding - 1.0)
        assert game.collision.detect() == []

    def test_lower_barrier(self, game):
        avatar = game.avatar
        # Bottom barrier starts above the padded box bottom
        place_pair(game, top_height=avatar.bottom - 170.0 - 8.0)
        assert [c.source for c in game.collision.detect()] == ["obstacle"]

    def test_ground_contact(self, game):
        game.avatar.y = game.profile.ground_y - 10.0
        contacts = game.collision.resolve()
        assert [c.source for c in contacts] == ["ground"]
        assert game.is_over

    def test_padding_forgives_ground_graze(self, game):
        avatar = game.avatar
        padding = game.profile.collision.hitbox_padding
        # Raw box dips below the ground line, padded box does not
        avatar.y = game.profile.ground_y - avatar.height / 2 + padding - 2.0
        assert avatar.bottom > game.profile.ground_y
        assert game.collision.detect() == []


class TestShieldAbsorption:
    """Shields turn lethal contacts into absorbed hits."""

    def test_basic_shield_breaches_pair(self, game):
        apply_shield(game.avatar)
        pair = place_pair(game, top_height=game.avatar.y - 5.0)

        [contact] = game.collision.resolve()
        assert contact.absorbed
        assert pair.breached
        assert game.status == SessionStatus.PLAYING
        assert game.avatar.shield_level == ShieldLevel.NONE

        # Breached pairs no longer collide
        assert game.collision.resolve() == []
        assert game.status == SessionStatus.PLAYING

    def test_absorb_event(self, game):
        apply_shield(game.avatar)
        place_bullet(game)
        game.collision.resolve()
        [event] = game.events.drain()
        assert event.kind == EventKind.SHIELD_ABSORB
        assert event.data["cause"] == "bullet"
        assert event.data["hits"] == 0

    def test_enhanced_shield_takes_three(self, game):
        apply_shield(game.avatar)
        apply_shield(game.avatar)
        for _ in range(4):
            place_bullet(game)

        contacts = game.collision.resolve()
        assert [c.absorbed for c in contacts] == [True, True, True, False]
        assert game.is_over
        # The absorbed bullets were despawned
        assert len(game.projectiles.hazard_bullets) == 1

    def test_enhanced_shield_across_frames(self, game):
        apply_shield(game.avatar)
        apply_shield(game.avatar)

        for remaining in (2, 1, 0):
            place_bullet(game)
            result = game.update(1 / 60)
            [contact] = result.contacts
            assert contact.source == "bullet"
            assert contact.absorbed
            assert not result.terminated
            assert game.avatar.shield_hits == remaining

        assert game.avatar.shield_level == ShieldLevel.NONE
        place_bullet(game)
        result = game.update(1 / 60)
        assert result.terminated
        assert not result.contacts[-1].absorbed
        assert result.summary is not None

    def test_ground_absorb_bounces(self, game):
        apply_shield(game.avatar)
        game.avatar.y = game.profile.ground_y
        [contact] = game.collision.resolve()
        assert contact.absorbed
        assert game.avatar.bottom < game.profile.ground_y
        assert game.avatar.velocity == game.profile.physics.jump_impulse

    def test_hazard_despawned_on_absorb(self, game):
        apply_shield(game.avatar)
        drifter = game.hazards.spawn_drifter(y=game.avatar.y)
        drifter.x = game.avatar.x
        game.collision.resolve()
        assert game.hazards.hazards == []

    def test_bomb_despawned_on_absorb(self, game):
        apply_shield(game.avatar)
        avatar = game.avatar
        game.projectiles.spawn_bomb(avatar.x, avatar.y, 0.0, 0.0)
        game.collision.resolve()
        assert game.projectiles.bombs == []


class TestHazardReach:
    """Hazard bodies use a fixed contact radius."""

    @pytest.mark.parametrize("offset,hit", [(20.0, True), (27.0, True), (40.0, False)])
    def test_contact_radius(self, game, offset, hit):
        drifter = game.hazards.spawn_drifter(y=game.avatar.y)
        drifter.x = game.avatar.x + offset
        sources = [c.source for c in game.collision.detect()]
        assert (sources == ["hazard"]) is hit


class TestOrdering:
    """Evaluation order and idle behavior."""

    def test_obstacle_before_bullet(self, game):
        bullet = place_bullet(game)
        place_pair(game, top_height=game.avatar.y - 5.0)
        contacts = game.collision.resolve()
        assert [c.source for c in contacts] == ["obstacle"]
        assert bullet in game.projectiles.bullets

    def test_detect_lists_everything_in_order(self, game):
        place_bullet(game)
        place_pair(game, top_height=game.avatar.y - 5.0)
        sources = [c.source for c in game.collision.detect()]
        assert sources == ["obstacle", "bullet"]

    def test_idle_never_resolves(self):
        game = CoreGame("classic", seed=11)
        game.reset()
        place_pair(game, top_height=game.avatar.y - 5.0)
        assert game.collision.resolve() == []
        assert game.status == SessionStatus.IDLE

    def test_listener_fires_once(self):
        summaries = []
        game = CoreGame("classic", seed=11, listeners=[summaries.append])
        game.reset()
        game.arbiter.start()
        place_pair(game, top_height=game.avatar.y - 5.0)
        game.collision.resolve()
        game.collision.resolve()
        game.update(1 / 60)
        assert len(summaries) == 1
        assert summaries[0].difficulty == "classic"
