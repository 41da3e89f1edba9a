"""
Obstacle Generator
==================

Spawns obstacle pairs on a timer, scrolls and optionally oscillates them,
rolls the pickups embedded in each spawn and counts passes.
"""

from __future__ import annotations

from typing import List, Optional

from flap_arena.arena_core.config_loader import DifficultyProfile, get_profile
from flap_arena.arena_core.entities import (
    Avatar,
    Coin,
    CoinTier,
    ObstaclePair,
    ShieldPickup,
    WeaponPickup,
)
from flap_arena.arena_core.events import EventKind, EventLog
from flap_arena.arena_core.pickups import PickupSystem
from flap_arena.arena_core.rng import SpawnRoller
from flap_arena.arena_core.scoring import ScoreTracker


class ObstacleGenerator:
    """
    Owns the live obstacle pairs.

    Spawn order per pair (and therefore RNG draw order): top height, moving
    roll, coin roll + tier, shield roll, weapon roll + ammo.
    """

    def __init__(
        self,
        profile: Optional[DifficultyProfile],
        roller: SpawnRoller,
        pickups: PickupSystem,
        scorer: ScoreTracker,
        events: Optional[EventLog] = None
    ):
        if profile is None:
            profile = get_profile()

        self._profile = profile
        self._cfg = profile.obstacles
        self._roller = roller
        self._pickups = pickups
        self._scorer = scorer
        self._events = events if events is not None else EventLog()

        self.pairs: List[ObstaclePair] = []
        self._spawn_timer: float = 0.0

    @property
    def spawn_timer(self) -> float:
        return self._spawn_timer

    def reset(self) -> None:
        self.pairs.clear()
        self._spawn_timer = 0.0

    def update(self, dt: float, avatar: Avatar) -> int:
        """
        Advance the generator by one frame.

        Args:
            dt: Frame time in seconds.
            avatar: Current avatar (read for pass detection and pickup rolls).

        Returns:
            Number of pairs passed this frame.
        """
        self._spawn_timer += dt
        if self._spawn_timer >= self._cfg.spawn_interval:
            self.spawn_pair(avatar)
            self._spawn_timer = 0.0

        passed = 0
        for pair in self.pairs:
            pair.x -= self._cfg.scroll_speed * dt
            if pair.moving:
                self._oscillate(pair, dt)

            if not pair.passed and pair.right < avatar.x:
                pair.passed = True
                self._scorer.apply_pass()
                self._events.emit(EventKind.PASS, pair.center_x, pair.gap_center_y)
                passed += 1

        self.pairs[:] = [p for p in self.pairs if p.right > -self._cfg.despawn_margin]
        return passed

    def spawn_pair(self, avatar: Avatar) -> ObstaclePair:
        """Create one pair at the right edge and roll its pickups."""
        low, high = self._profile.top_height_range
        top_height = self._roller.uniform(low, high)

        pair = ObstaclePair(
            x=float(self._profile.board.width),
            top_height=top_height,
            gap=self._cfg.gap,
            width=self._cfg.width,
        )

        if self._cfg.has_moving and self._roller.chance(self._cfg.moving_chance):
            pair.moving = True
            pair.move_speed = self._cfg.move_speed
            pair.direction = 1.0 if self._roller.chance(0.5) else -1.0
            pair.original_top_height = top_height

        self.pairs.append(pair)
        self._roll_pickups(pair, avatar)
        return pair

    def _oscillate(self, pair: ObstaclePair, dt: float) -> None:
        low, high = self._profile.oscillation_range
        before = pair.top_height
        pair.top_height += pair.move_speed * dt * pair.direction
        if pair.top_height <= low:
            pair.top_height = low
            pair.direction = 1.0
        elif pair.top_height >= high:
            pair.top_height = high
            pair.direction = -1.0

        shift = pair.top_height - before
        for item in self._pickups.items:
            if item.anchor is pair:
                item.y += shift

    def _roll_pickups(self, pair: ObstaclePair, avatar: Avatar) -> None:
        cfg = self._profile.pickups
        if not cfg.has_coins:
            return

        radius = cfg.pickup_radius
        x = pair.center_x
        quarter = pair.gap / 4

        if self._roller.chance(cfg.coin_spawn_chance):
            tier = CoinTier(self._roller.weighted_choice(cfg.coin_weights))
            self._pickups.add(Coin(x=x, y=pair.gap_center_y, radius=radius, tier=tier, anchor=pair))

        if not avatar.has_shield and self._roller.chance(cfg.shield_spawn_chance):
            self._pickups.add(ShieldPickup(x=x, y=pair.top_height + quarter, radius=radius, anchor=pair))

        if not avatar.has_weapon and self._roller.chance(cfg.weapon_spawn_chance):
            ammo = self._roller.randint(cfg.weapon_ammo_min, cfg.weapon_ammo_max)
            self._pickups.add(WeaponPickup(x=x, y=pair.bottom_y - quarter, radius=radius, ammo=ammo, anchor=pair))
