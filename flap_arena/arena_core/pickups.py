"""
Pickup & Upgrade System
=======================

Scrolls and collects coins, shields and weapons, applies the shield/weapon
leveling rules to the avatar and runs weapon auto-fire.

Shield rules:
- none     -> BASIC (absorbs 1 hit)
- BASIC    -> ENHANCED (absorbs 3 hits)
- ENHANCED -> hits refilled; the tier never drops except by being used up

Weapon rules:
- unarmed -> level 1 with the pickup's ammo
- armed   -> level + 1 (max 3), ammo accumulates
- ammo reaching zero disarms the weapon
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from flap_arena.arena_core.config_loader import DifficultyProfile, get_profile
from flap_arena.arena_core.entities import (
    ENHANCED_SHIELD_HITS,
    MAX_WEAPON_LEVEL,
    Avatar,
    BulletTier,
    Coin,
    Pickup,
    ShieldLevel,
    ShieldPickup,
    WeaponPickup,
)
from flap_arena.arena_core.events import EventKind, EventLog
from flap_arena.arena_core.geometry import circle_collide
from flap_arena.arena_core.scoring import ScoreTracker

if TYPE_CHECKING:
    from flap_arena.arena_core.hazards import ProjectileSystem


def apply_shield(avatar: Avatar) -> ShieldLevel:
    """Grant or upgrade the avatar's shield. Returns the new level."""
    if avatar.shield_level == ShieldLevel.NONE:
        avatar.shield_level = ShieldLevel.BASIC
        avatar.shield_hits = 1
    else:
        avatar.shield_level = ShieldLevel.ENHANCED
        avatar.shield_hits = ENHANCED_SHIELD_HITS
    return avatar.shield_level


def apply_weapon(avatar: Avatar, ammo: int) -> int:
    """Grant or upgrade the avatar's weapon. Returns the new level."""
    ammo = max(0, int(ammo))
    if avatar.weapon_level <= 0 or avatar.weapon_ammo <= 0:
        avatar.weapon_level = 1
        avatar.weapon_ammo = ammo
        avatar.fire_timer = 0.0
    else:
        avatar.weapon_level = min(avatar.weapon_level + 1, MAX_WEAPON_LEVEL)
        avatar.weapon_ammo += ammo
    return avatar.weapon_level


def consume_shield_hit(avatar: Avatar) -> None:
    """Spend one absorbed hit; the shield disappears when none remain."""
    if avatar.shield_level == ShieldLevel.BASIC:
        avatar.shield_level = ShieldLevel.NONE
        avatar.shield_hits = 0
        return
    avatar.shield_hits = max(0, avatar.shield_hits - 1)
    if avatar.shield_hits == 0:
        avatar.shield_level = ShieldLevel.NONE


def bullet_tier_for_level(level: int) -> BulletTier:
    return BulletTier(max(1, min(level, MAX_WEAPON_LEVEL)))


class PickupSystem:
    """Owns live pickups and resolves collection against the avatar."""

    def __init__(
        self,
        profile: Optional[DifficultyProfile],
        scorer: ScoreTracker,
        events: Optional[EventLog] = None
    ):
        if profile is None:
            profile = get_profile()

        self._profile = profile
        self._scorer = scorer
        self._events = events if events is not None else EventLog()
        self.items: List[Pickup] = []

    def reset(self) -> None:
        self.items.clear()

    def add(self, pickup: Pickup) -> None:
        self.items.append(pickup)

    def advance(self, dt: float) -> None:
        """Scroll pickups with the obstacles and drop the off-screen ones."""
        speed = self._profile.obstacles.scroll_speed
        for item in self.items:
            item.x -= speed * dt
        self.items[:] = [p for p in self.items if p.x + p.radius > 0 and not p.collected]

    def collect(self, avatar: Avatar) -> List[Pickup]:
        """
        Collect every pickup within reach of the avatar.

        Returns:
            Pickups collected this frame, in list order.
        """
        reach = self._profile.pickups.collect_radius
        collected: List[Pickup] = []
        for item in self.items:
            if item.collected:
                continue
            if circle_collide(item.x, item.y, item.radius, avatar.x, avatar.y, reach):
                item.collected = True
                self._apply(item, avatar)
                collected.append(item)
        if collected:
            self.items[:] = [p for p in self.items if not p.collected]
        return collected

    def _apply(self, item: Pickup, avatar: Avatar) -> None:
        if isinstance(item, Coin):
            event = self._scorer.apply_coin(item.tier.value)
            self._events.emit(EventKind.COIN, item.x, item.y, tier=item.tier.value, value=event.points)
        elif isinstance(item, ShieldPickup):
            level = apply_shield(avatar)
            self._events.emit(EventKind.SHIELD_PICKUP, item.x, item.y, level=int(level))
        elif isinstance(item, WeaponPickup):
            level = apply_weapon(avatar, item.ammo)
            self._events.emit(EventKind.WEAPON_PICKUP, item.x, item.y, level=level, ammo=avatar.weapon_ammo)


class WeaponSystem:
    """
    Auto-fire for an armed avatar.

    Each level has its own fire interval; every shot costs one round and
    carries the level's damage tier.
    """

    def __init__(
        self,
        profile: Optional[DifficultyProfile],
        events: Optional[EventLog] = None
    ):
        if profile is None:
            profile = get_profile()

        self._profile = profile
        self._cfg = profile.weapon
        self._events = events if events is not None else EventLog()

    def update(self, dt: float, avatar: Avatar, projectiles: "ProjectileSystem") -> int:
        """
        Advance the fire timer and fire as many shots as are due.

        Returns:
            Number of bullets fired this frame.
        """
        if avatar.weapon_level <= 0:
            return 0
        if avatar.weapon_ammo <= 0:
            avatar.weapon_level = 0
            return 0

        interval = self._cfg.fire_interval(avatar.weapon_level)
        avatar.fire_timer += dt
        fired = 0
        while avatar.fire_timer >= interval and avatar.weapon_ammo > 0:
            avatar.fire_timer -= interval
            tier = bullet_tier_for_level(avatar.weapon_level)
            projectiles.spawn_player_bullet(
                x=avatar.x + avatar.width / 2,
                y=avatar.y,
                tier=tier,
            )
            avatar.weapon_ammo -= 1
            fired += 1
            self._events.emit(EventKind.SHOT, avatar.x, avatar.y, tier=int(tier))

        if avatar.weapon_ammo <= 0:
            avatar.weapon_ammo = 0
            avatar.weapon_level = 0
            avatar.fire_timer = 0.0
        return fired
