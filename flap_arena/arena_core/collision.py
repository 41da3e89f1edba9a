"""
Collision & Resolution Engine
=============================

Detects lethal contacts once per frame and resolves each one against the
avatar's shield.

Evaluation order:
1. Obstacle pairs (padded AABB against the gap; breached pairs skipped)
2. Ground line (padded box bottom)
3. Hazard bodies (centre distance under a fixed contact radius)
4. Hazard bullets (radius sum)
5. Bombs (radius sum)

Without a shield the first contact ends the session and the rest are ignored.
With a shield each contact costs one absorbed hit and the thing that caused it
is neutralized: the projectile or hazard is despawned, the pair is marked
breached, or the avatar bounces off the ground.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Optional

from flap_arena.arena_core.avatar import AvatarController
from flap_arena.arena_core.config_loader import DifficultyProfile, get_profile
from flap_arena.arena_core.entities import Avatar, ObstaclePair
from flap_arena.arena_core.events import EventKind, EventLog
from flap_arena.arena_core.geometry import aabb_overlap, circle_collide, distance
from flap_arena.arena_core.hazards import HazardSystem, ProjectileSystem
from flap_arena.arena_core.obstacles import ObstacleGenerator
from flap_arena.arena_core.pickups import consume_shield_hit
from flap_arena.arena_core.scoring import SessionArbiter


@dataclass
class Contact:
    """One detected lethal contact."""
    source: str        # "obstacle", "ground", "hazard", "bullet" or "bomb"
    entity: Any = None
    absorbed: bool = False


def avatar_body_radius(avatar: Avatar) -> float:
    """Radius used for round projectiles against the avatar."""
    return min(avatar.width, avatar.height) / 2


def hits_obstacle(avatar: Avatar, pair: ObstaclePair, padding: float) -> bool:
    """True if the padded avatar box touches either barrier of the pair."""
    box = avatar.hitbox(padding)
    # Barriers extend past the screen edges so nothing slips over or under them
    upper = (pair.x, -math.inf, pair.right, pair.top_height)
    lower = (pair.x, pair.bottom_y, pair.right, math.inf)
    return aabb_overlap(*box, *upper) or aabb_overlap(*box, *lower)


class CollisionEngine:
    """Runs the ordered contact checks and applies their outcomes."""

    def __init__(
        self,
        profile: Optional[DifficultyProfile],
        controller: AvatarController,
        obstacles: ObstacleGenerator,
        hazards: HazardSystem,
        projectiles: ProjectileSystem,
        arbiter: SessionArbiter,
        events: Optional[EventLog] = None
    ):
        if profile is None:
            profile = get_profile()

        self._profile = profile
        self._cfg = profile.collision
        self._controller = controller
        self._obstacles = obstacles
        self._hazards = hazards
        self._projectiles = projectiles
        self._arbiter = arbiter
        self._events = events if events is not None else EventLog()

    def detect(self) -> List[Contact]:
        """All contacts present this frame, in evaluation order."""
        avatar = self._controller.avatar
        padding = self._cfg.hitbox_padding
        contacts: List[Contact] = []

        for pair in self._obstacles.pairs:
            if not pair.breached and hits_obstacle(avatar, pair, padding):
                contacts.append(Contact("obstacle", pair))

        if avatar.hitbox(padding)[3] >= self._profile.ground_y:
            contacts.append(Contact("ground"))

        reach = self._cfg.hazard_contact_radius
        for hazard in self._hazards.hazards:
            if distance(avatar.x, avatar.y, hazard.x, hazard.y) < reach:
                contacts.append(Contact("hazard", hazard))

        body = avatar_body_radius(avatar)
        for bullet in self._projectiles.hazard_bullets:
            if circle_collide(avatar.x, avatar.y, body, bullet.x, bullet.y, bullet.radius):
                contacts.append(Contact("bullet", bullet))

        for bomb in self._projectiles.bombs:
            if circle_collide(avatar.x, avatar.y, body, bomb.x, bomb.y, bomb.radius):
                contacts.append(Contact("bomb", bomb))

        return contacts

    def resolve(self) -> List[Contact]:
        """
        Detect and resolve this frame's contacts.

        Returns:
            The contacts that were handled. The last one is unabsorbed if it
            ended the session.
        """
        if not self._arbiter.is_playing:
            return []

        handled: List[Contact] = []
        for contact in self.detect():
            avatar = self._controller.avatar
            if not avatar.has_shield:
                handled.append(contact)
                self._arbiter.end()
                self._events.emit(EventKind.GAME_OVER, avatar.x, avatar.y, cause=contact.source)
                break

            consume_shield_hit(avatar)
            contact.absorbed = True
            self._neutralize(contact)
            self._events.emit(
                EventKind.SHIELD_ABSORB, avatar.x, avatar.y,
                cause=contact.source, level=int(avatar.shield_level), hits=avatar.shield_hits,
            )
            handled.append(contact)
        return handled

    def _neutralize(self, contact: Contact) -> None:
        if contact.source == "obstacle":
            contact.entity.breached = True
        elif contact.source == "ground":
            self._controller.bounce_off_ground(self._profile.ground_y)
        elif contact.source == "hazard":
            self._hazards.remove(contact.entity)
        elif contact.source == "bullet":
            self._projectiles.remove_bullet(contact.entity)
        elif contact.source == "bomb":
            self._projectiles.remove_bomb(contact.entity)
