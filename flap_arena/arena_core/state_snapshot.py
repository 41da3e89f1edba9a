"""
State Snapshot
==============

Immutable per-frame views of the simulation for renderers, audio layers and
agents, plus packing into fixed-size numpy arrays for Gymnasium observations.

Views are copies: mutating the engine after a snapshot never changes it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from flap_arena.arena_core.config_loader import DifficultyProfile, get_profile
from flap_arena.arena_core.entities import (
    Avatar,
    Bomb,
    Bullet,
    Coin,
    Hazard,
    HazardKind,
    ObstaclePair,
    Pickup,
    SessionStatus,
    WeaponPickup,
)

HAZARD_KIND_IDS = {
    HazardKind.DRIFTER.value: 0,
    HazardKind.MISSILE.value: 1,
    HazardKind.HUNTER.value: 2,
    HazardKind.BOMBER.value: 3,
}
PICKUP_KIND_IDS = {"coin": 0, "shield": 1, "weapon": 2}
STATUS_IDS = {
    SessionStatus.IDLE: 0,
    SessionStatus.PLAYING: 1,
    SessionStatus.GAME_OVER: 2,
}

AVATAR_FEATURES = 8
OBSTACLE_FEATURES = 4
HAZARD_FEATURES = 6
PROJECTILE_FEATURES = 5
PICKUP_FEATURES = 3


@dataclass(frozen=True)
class AvatarView:
    x: float
    y: float
    width: float
    height: float
    velocity: float
    rotation: float
    shield_level: int
    shield_hits: int
    weapon_level: int
    weapon_ammo: int


@dataclass(frozen=True)
class ObstacleView:
    x: float
    width: float
    top_height: float
    bottom_y: float
    passed: bool
    breached: bool
    moving: bool


@dataclass(frozen=True)
class PickupView:
    kind: str
    x: float
    y: float
    radius: float
    tier: Optional[str] = None   # Coin tier
    ammo: Optional[int] = None   # Weapon rounds


@dataclass(frozen=True)
class HazardView:
    kind: str
    x: float
    y: float
    vx: float
    vy: float
    size: float
    health: Optional[int]


@dataclass(frozen=True)
class ProjectileView:
    kind: str   # "bullet" or "bomb"
    x: float
    y: float
    vx: float
    vy: float
    radius: float
    from_player: bool
    tier: int = 0


@dataclass(frozen=True)
class ObservationLimits:
    """Fixed slot counts for the packed observation arrays."""
    max_obstacles: int = 3
    max_hazards: int = 4
    max_projectiles: int = 8
    max_pickups: int = 4


DEFAULT_LIMITS = ObservationLimits()


@dataclass(frozen=True)
class FrameSnapshot:
    """Read-only picture of one simulated frame."""
    frame: int
    status: SessionStatus
    score: int
    coins: int
    kills: int
    board_width: float
    board_height: float
    ground_y: float
    avatar: AvatarView
    obstacles: Tuple[ObstacleView, ...]
    pickups: Tuple[PickupView, ...]
    hazards: Tuple[HazardView, ...]
    projectiles: Tuple[ProjectileView, ...]

    @property
    def is_over(self) -> bool:
        return self.status == SessionStatus.GAME_OVER

    def next_obstacle(self) -> Optional[ObstacleView]:
        """First pair whose right edge is still ahead of the avatar's left edge."""
        avatar_left = self.avatar.x - self.avatar.width / 2
        for pair in self.obstacles:
            if pair.x + pair.width >= avatar_left:
                return pair
        return None

    def to_obs_dict(self, limits: ObservationLimits = DEFAULT_LIMITS) -> Dict[str, np.ndarray]:
        """
        Pack into a Gymnasium observation dictionary.

        Positions of other entities are relative to the avatar. Variable-count
        entities are sorted nearest first and padded, with a boolean mask.
        """
        ax, ay = self.avatar.x, self.avatar.y

        avatar = np.array([
            self.avatar.y,
            self.avatar.velocity,
            self.avatar.rotation,
            self.avatar.shield_level,
            self.avatar.shield_hits,
            self.avatar.weapon_level,
            self.avatar.weapon_ammo,
            self.ground_y - self.avatar.y,
        ], dtype=np.float32)

        ahead = [p for p in self.obstacles if p.x + p.width >= ax - self.avatar.width / 2]
        obstacles, obstacle_mask = _pack(
            ([p.x - ax, p.top_height, p.bottom_y, float(p.moving)] for p in ahead),
            limits.max_obstacles, OBSTACLE_FEATURES,
        )

        hazards_sorted = sorted(self.hazards, key=lambda h: math.hypot(h.x - ax, h.y - ay))
        hazards, hazard_mask = _pack(
            ([HAZARD_KIND_IDS[h.kind], h.x - ax, h.y - ay, h.vx, h.vy,
              -1.0 if h.health is None else h.health] for h in hazards_sorted),
            limits.max_hazards, HAZARD_FEATURES,
        )

        incoming = [p for p in self.projectiles if not p.from_player]
        incoming.sort(key=lambda p: math.hypot(p.x - ax, p.y - ay))
        projectiles, projectile_mask = _pack(
            ([float(p.kind == "bomb"), p.x - ax, p.y - ay, p.vx, p.vy] for p in incoming),
            limits.max_projectiles, PROJECTILE_FEATURES,
        )

        pickups_sorted = sorted(self.pickups, key=lambda p: math.hypot(p.x - ax, p.y - ay))
        pickups, pickup_mask = _pack(
            ([PICKUP_KIND_IDS[p.kind], p.x - ax, p.y - ay] for p in pickups_sorted),
            limits.max_pickups, PICKUP_FEATURES,
        )

        return {
            "avatar": avatar,
            "obstacles": obstacles,
            "obstacle_mask": obstacle_mask,
            "hazards": hazards,
            "hazard_mask": hazard_mask,
            "projectiles": projectiles,
            "projectile_mask": projectile_mask,
            "pickups": pickups,
            "pickup_mask": pickup_mask,
            "score": np.array(self.score, dtype=np.int64),
            "status": np.array(STATUS_IDS[self.status], dtype=np.int32),
        }


def _pack(rows: Iterable[List[float]], slots: int, features: int) -> Tuple[np.ndarray, np.ndarray]:
    data = np.zeros((slots, features), dtype=np.float32)
    mask = np.zeros(slots, dtype=bool)
    for i, row in enumerate(rows):
        if i >= slots:
            break
        data[i] = row
        mask[i] = True
    return data, mask


class SnapshotBuilder:
    """Copies live engine state into a FrameSnapshot."""

    def __init__(self, profile: Optional[DifficultyProfile] = None):
        if profile is None:
            profile = get_profile()

        self._board_width = float(profile.board.width)
        self._board_height = float(profile.board.height)
        self._ground_y = profile.ground_y

    def build(
        self,
        frame: int,
        status: SessionStatus,
        score: int,
        coins: int,
        kills: int,
        avatar: Avatar,
        pairs: Iterable[ObstaclePair],
        pickups: Iterable[Pickup],
        hazards: Iterable[Hazard],
        bullets: Iterable[Bullet],
        bombs: Iterable[Bomb]
    ) -> FrameSnapshot:
        projectiles = [
            ProjectileView("bullet", b.x, b.y, b.vx, b.vy, b.radius, b.from_player, int(b.tier))
            for b in bullets
        ]
        projectiles.extend(
            ProjectileView("bomb", b.x, b.y, b.vx, b.vy, b.radius, False) for b in bombs
        )

        return FrameSnapshot(
            frame=frame,
            status=status,
            score=score,
            coins=coins,
            kills=kills,
            board_width=self._board_width,
            board_height=self._board_height,
            ground_y=self._ground_y,
            avatar=AvatarView(
                x=avatar.x,
                y=avatar.y,
                width=avatar.width,
                height=avatar.height,
                velocity=avatar.velocity,
                rotation=avatar.rotation,
                shield_level=int(avatar.shield_level),
                shield_hits=avatar.shield_hits,
                weapon_level=avatar.weapon_level,
                weapon_ammo=avatar.weapon_ammo,
            ),
            obstacles=tuple(
                ObstacleView(p.x, p.width, p.top_height, p.bottom_y, p.passed, p.breached, p.moving)
                for p in pairs
            ),
            pickups=tuple(
                PickupView(
                    kind=p.kind,
                    x=p.x,
                    y=p.y,
                    radius=p.radius,
                    tier=p.tier.value if isinstance(p, Coin) else None,
                    ammo=p.ammo if isinstance(p, WeaponPickup) else None,
                )
                for p in pickups
            ),
            hazards=tuple(
                HazardView(h.kind.value, h.x, h.y, h.vx, h.vy, h.size, h.health)
                for h in hazards
            ),
            projectiles=tuple(projectiles),
        )
