"""
Tests for pickups, shield/weapon upgrades and weapon auto-fire.
"""

import pytest

from flap_arena.arena_core.avatar import AvatarController
from flap_arena.arena_core.config_loader import load_profile
from flap_arena.arena_core.entities import (
    BulletTier,
    Coin,
    CoinTier,
    ShieldLevel,
    ShieldPickup,
    WeaponPickup,
)
from flap_arena.arena_core.events import EventKind, EventLog
from flap_arena.arena_core.hazards import ProjectileSystem
from flap_arena.arena_core.pickups import (
    PickupSystem,
    WeaponSystem,
    apply_shield,
    apply_weapon,
    bullet_tier_for_level,
    consume_shield_hit,
)
from flap_arena.arena_core.scoring import ScoreTracker


@pytest.fixture
def profile():
    return load_profile("easy")


@pytest.fixture
def avatar(profile):
    return AvatarController(profile).avatar


@pytest.fixture
def events():
    return EventLog()


@pytest.fixture
def scorer(profile):
    return ScoreTracker(profile)


@pytest.fixture
def pickups(profile, scorer, events):
    return PickupSystem(profile, scorer, events)


class TestShieldRules:
    """Shield leveling and consumption."""

    def test_first_shield_is_basic(self, avatar):
        assert apply_shield(avatar) == ShieldLevel.BASIC
        assert avatar.shield_hits == 1

    def test_second_shield_is_enhanced(self, avatar):
        apply_shield(avatar)
        assert apply_shield(avatar) == ShieldLevel.ENHANCED
        assert avatar.shield_hits == 3

    def test_enhanced_refills(self, avatar):
        apply_shield(avatar)
        apply_shield(avatar)
        consume_shield_hit(avatar)
        consume_shield_hit(avatar)
        apply_shield(avatar)
        assert avatar.shield_level == ShieldLevel.ENHANCED
        assert avatar.shield_hits == 3

    def test_basic_consumed_by_one_hit(self, avatar):
        apply_shield(avatar)
        consume_shield_hit(avatar)
        assert avatar.shield_level == ShieldLevel.NONE
        assert avatar.shield_hits == 0

    def test_enhanced_absorbs_three(self, avatar):
        apply_shield(avatar)
        apply_shield(avatar)
        for remaining in (2, 1):
            consume_shield_hit(avatar)
            assert avatar.shield_level == ShieldLevel.ENHANCED
            assert avatar.shield_hits == remaining
        consume_shield_hit(avatar)
        assert avatar.shield_level == ShieldLevel.NONE
        assert avatar.shield_hits == 0

    def test_hits_never_negative(self, avatar):
        consume_shield_hit(avatar)
        consume_shield_hit(avatar)
        assert avatar.shield_hits == 0


class TestWeaponRules:
    """Weapon leveling and ammo."""

    def test_pickup_sequence(self, avatar):
        assert apply_weapon(avatar, 10) == 1
        assert avatar.weapon_ammo == 10
        assert apply_weapon(avatar, 8) == 2
        assert avatar.weapon_ammo == 18

    def test_level_caps_at_three(self, avatar):
        for _ in range(5):
            apply_weapon(avatar, 5)
        assert avatar.weapon_level == 3
        assert avatar.weapon_ammo == 25

    def test_empty_weapon_restarts_at_level_one(self, avatar):
        apply_weapon(avatar, 5)
        apply_weapon(avatar, 5)
        avatar.weapon_ammo = 0
        assert apply_weapon(avatar, 7) == 1
        assert avatar.weapon_ammo == 7

    @pytest.mark.parametrize("level,tier", [
        (1, BulletTier.NORMAL),
        (2, BulletTier.ELEVATED),
        (3, BulletTier.LETHAL),
    ])
    def test_tier_by_level(self, level, tier):
        assert bullet_tier_for_level(level) == tier


class TestPickupSystem:
    """Collection against the avatar."""

    def test_coin_collection_scores(self, pickups, avatar, scorer, events):
        pickups.add(Coin(x=avatar.x, y=avatar.y, radius=12, tier=CoinTier.GOLD))
        collected = pickups.collect(avatar)
        assert len(collected) == 1
        assert scorer.score == 3
        assert scorer.coins == 3
        assert pickups.items == []
        [event] = events.drain()
        assert event.kind == EventKind.COIN
        assert event.data["value"] == 3

    def test_out_of_reach_ignored(self, pickups, avatar, scorer):
        pickups.add(Coin(x=avatar.x + 100, y=avatar.y, radius=12))
        assert pickups.collect(avatar) == []
        assert scorer.score == 0

    def test_weapon_pickups_end_to_end(self, pickups, avatar):
        pickups.add(WeaponPickup(x=avatar.x, y=avatar.y, radius=12, ammo=10))
        pickups.collect(avatar)
        assert (avatar.weapon_level, avatar.weapon_ammo) == (1, 10)

        pickups.add(WeaponPickup(x=avatar.x, y=avatar.y, radius=12, ammo=8))
        pickups.collect(avatar)
        assert (avatar.weapon_level, avatar.weapon_ammo) == (2, 18)

    def test_shield_pickup(self, pickups, avatar, events):
        pickups.add(ShieldPickup(x=avatar.x, y=avatar.y + 5, radius=12))
        pickups.collect(avatar)
        assert avatar.shield_level == ShieldLevel.BASIC
        assert events.drain()[0].kind == EventKind.SHIELD_PICKUP

    def test_collected_only_once(self, pickups, avatar, scorer):
        pickups.add(Coin(x=avatar.x, y=avatar.y, radius=12))
        pickups.collect(avatar)
        pickups.collect(avatar)
        assert scorer.score == 1

    def test_advance_scrolls_and_drops(self, pickups, profile):
        pickups.add(Coin(x=200.0, y=100.0, radius=12))
        pickups.add(Coin(x=-5.0, y=100.0, radius=12))
        pickups.advance(0.1)
        assert len(pickups.items) == 1
        assert pickups.items[0].x == pytest.approx(200.0 - profile.obstacles.scroll_speed * 0.1)


class TestAutoFire:
    """Weapon fires on its level's interval while ammo lasts."""

    @pytest.fixture
    def projectiles(self, profile, events):
        return ProjectileSystem(profile, events)

    @pytest.fixture
    def weapon(self, profile, events):
        return WeaponSystem(profile, events)

    def test_unarmed_never_fires(self, weapon, avatar, projectiles):
        assert weapon.update(5.0, avatar, projectiles) == 0
        assert projectiles.bullets == []

    def test_fires_on_interval(self, weapon, avatar, projectiles, profile):
        apply_weapon(avatar, 3)
        assert weapon.update(0.2, avatar, projectiles) == 0
        assert weapon.update(0.2, avatar, projectiles) == 1
        [bullet] = projectiles.bullets
        assert bullet.from_player
        assert bullet.tier == BulletTier.NORMAL
        assert bullet.vx == profile.weapon.bullet_speed
        assert bullet.x == pytest.approx(avatar.x + avatar.width / 2)
        assert avatar.weapon_ammo == 2

    def test_runs_dry_and_disarms(self, weapon, avatar, projectiles, events):
        apply_weapon(avatar, 2)
        fired = weapon.update(2.0, avatar, projectiles)
        assert fired == 2
        assert avatar.weapon_ammo == 0
        assert avatar.weapon_level == 0
        assert not avatar.has_weapon
        assert [e.kind for e in events.drain()] == [EventKind.SHOT, EventKind.SHOT]

    def test_level_three_fires_lethal(self, weapon, avatar, projectiles):
        for _ in range(3):
            apply_weapon(avatar, 10)
        weapon.update(0.2, avatar, projectiles)
        assert projectiles.bullets[0].tier == BulletTier.LETHAL
