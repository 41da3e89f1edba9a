"""
Core Game
=========

Main engine orchestrator combining the avatar, obstacles, pickups, hazards,
collision resolution and scoring.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from flap_arena.arena_core.avatar import AvatarController
from flap_arena.arena_core.collision import CollisionEngine, Contact
from flap_arena.arena_core.config_loader import DifficultyProfile, get_profile
from flap_arena.arena_core.entities import Avatar, SessionStatus
from flap_arena.arena_core.events import EventKind, EventLog, FrameEvent
from flap_arena.arena_core.geometry import clamp
from flap_arena.arena_core.hazards import HazardSystem, ProjectileSystem
from flap_arena.arena_core.obstacles import ObstacleGenerator
from flap_arena.arena_core.pickups import PickupSystem, WeaponSystem
from flap_arena.arena_core.rng import SpawnRoller
from flap_arena.arena_core.scoring import ScoreTracker, SessionArbiter, SessionSummary
from flap_arena.arena_core.state_snapshot import FrameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Result of a single simulated frame."""
    snapshot: FrameSnapshot
    events: List[FrameEvent]
    delta_score: int
    terminated: bool
    contacts: List[Contact]
    summary: Optional[SessionSummary] = None


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Avatar physics
    - Obstacle spawning and scrolling
    - Pickups, shields and weapon auto-fire
    - Hazards and projectiles
    - Collision resolution
    - Scoring and the session state machine

    One update = one frame. The session starts on the first jump.
    """

    def __init__(
        self,
        profile: Union[DifficultyProfile, str, None] = None,
        seed: Optional[int] = None,
        listeners: Optional[Iterable[Callable[[SessionSummary], None]]] = None
    ):
        """
        Initialize game.

        Args:
            profile: Difficulty profile or its name. Uses the default if None.
            seed: Random seed for reproducibility.
            listeners: Callbacks receiving the SessionSummary on game over.
        """
        if profile is None or isinstance(profile, str):
            profile = get_profile(profile) if profile else get_profile()

        self._profile = profile
        self._seed = seed

        # Initialize subsystems
        self._events = EventLog()
        self._roller = SpawnRoller(seed)
        self._scorer = ScoreTracker(profile)
        self._arbiter = SessionArbiter(self._scorer, profile)
        self._controller = AvatarController(profile)
        self._pickups = PickupSystem(profile, self._scorer, self._events)
        self._weapon = WeaponSystem(profile, self._events)
        self._obstacles = ObstacleGenerator(
            profile, self._roller, self._pickups, self._scorer, self._events
        )
        self._projectiles = ProjectileSystem(profile, self._events)
        self._hazards = HazardSystem(profile, self._roller, self._projectiles, self._events)
        self._collision = CollisionEngine(
            profile,
            controller=self._controller,
            obstacles=self._obstacles,
            hazards=self._hazards,
            projectiles=self._projectiles,
            arbiter=self._arbiter,
            events=self._events,
        )
        self._snapshot_builder = SnapshotBuilder(profile)

        for listener in listeners or ():
            self._arbiter.add_listener(listener)

        self._frame: int = 0

    @property
    def profile(self) -> DifficultyProfile:
        """Active difficulty profile."""
        return self._profile

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    @property
    def avatar(self) -> Avatar:
        return self._controller.avatar

    @property
    def score(self) -> int:
        """Current score."""
        return self._scorer.score

    @property
    def status(self) -> SessionStatus:
        return self._arbiter.status

    @property
    def is_over(self) -> bool:
        """True if the session has ended."""
        return self._arbiter.is_over

    @property
    def summary(self) -> Optional[SessionSummary]:
        return self._arbiter.summary

    @property
    def controller(self) -> AvatarController:
        return self._controller

    @property
    def collision(self) -> CollisionEngine:
        return self._collision

    @property
    def events(self) -> EventLog:
        """Pending events of the frame in progress."""
        return self._events

    @property
    def obstacles(self) -> ObstacleGenerator:
        return self._obstacles

    @property
    def pickups(self) -> PickupSystem:
        return self._pickups

    @property
    def hazards(self) -> HazardSystem:
        return self._hazards

    @property
    def projectiles(self) -> ProjectileSystem:
        return self._projectiles

    @property
    def arbiter(self) -> SessionArbiter:
        return self._arbiter

    def add_listener(self, listener: Callable[[SessionSummary], None]) -> None:
        self._arbiter.add_listener(listener)

    def reset(self, seed: Optional[int] = None) -> FrameSnapshot:
        """
        Reset the session to IDLE with fresh collections.

        Args:
            seed: New random seed. Uses previous if None.

        Returns:
            Initial frame snapshot.
        """
        if seed is not None:
            self._seed = seed

        self._roller.reset(self._seed)
        self._scorer.reset()
        self._arbiter.reset()
        self._controller.reset()
        self._obstacles.reset()
        self._pickups.reset()
        self._hazards.reset()
        self._projectiles.reset()
        self._events.clear()
        self._frame = 0

        logger.debug("Session reset (%s, seed=%s)", self._profile.name, self._seed)
        return self.snapshot()

    def jump(self) -> bool:
        """
        Request a jump. Starts the session when idle.

        Returns:
            True if the impulse was applied.
        """
        if self._arbiter.is_over:
            return False

        self._arbiter.start()
        accepted = self._controller.apply_jump()
        if accepted:
            avatar = self._controller.avatar
            self._events.emit(EventKind.JUMP, avatar.x, avatar.y)
        return accepted

    def update(self, dt: float) -> FrameResult:
        """
        Advance the simulation by one frame.

        Args:
            dt: Elapsed seconds, clamped into [0, max_frame_dt].

        Returns:
            FrameResult with the new snapshot and this frame's events.
        """
        dt = clamp(dt, 0.0, self._profile.engine.max_frame_dt)

        if self._arbiter.is_over:
            return FrameResult(
                snapshot=self.snapshot(),
                events=self._events.drain(),
                delta_score=0,
                terminated=True,
                contacts=[],
                summary=self._arbiter.summary,
            )

        self._frame += 1

        if self._arbiter.status == SessionStatus.IDLE:
            self._controller.hover(dt)
            return FrameResult(
                snapshot=self.snapshot(),
                events=self._events.drain(),
                delta_score=0,
                terminated=False,
                contacts=[],
            )

        score_before = self._scorer.score
        avatar = self._controller.avatar

        self._controller.integrate(dt)
        self._obstacles.update(dt, avatar)
        self._pickups.advance(dt)
        self._hazards.update(dt, avatar, self._scorer.score)
        self._weapon.update(dt, avatar, self._projectiles)
        self._projectiles.advance(dt)
        self._hazards.resolve_player_bullets(self._scorer)
        self._pickups.collect(avatar)
        self._arbiter.tick(dt)
        contacts = self._collision.resolve()

        return FrameResult(
            snapshot=self.snapshot(),
            events=self._events.drain(),
            delta_score=self._scorer.score - score_before,
            terminated=self._arbiter.is_over,
            contacts=contacts,
            summary=self._arbiter.summary,
        )

    def snapshot(self) -> FrameSnapshot:
        """Build the current frame snapshot."""
        return self._snapshot_builder.build(
            frame=self._frame,
            status=self._arbiter.status,
            score=self._scorer.score,
            coins=self._scorer.coins,
            kills=self._scorer.kills,
            avatar=self._controller.avatar,
            pairs=self._obstacles.pairs,
            pickups=self._pickups.items,
            hazards=self._hazards.hazards,
            bullets=self._projectiles.bullets,
            bombs=self._projectiles.bombs,
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        avatar = self._controller.avatar
        return {
            "score": self._scorer.score,
            "coins": self._scorer.coins,
            "kills": self._scorer.kills,
            "obstacles_passed": self._scorer.passes,
            "status": self._arbiter.status.value,
            "frames": self._arbiter.frames,
            "play_time": self._arbiter.play_time,
            "difficulty": self._profile.name,
            "shield_level": int(avatar.shield_level),
            "shield_hits": avatar.shield_hits,
            "weapon_level": avatar.weapon_level,
            "weapon_ammo": avatar.weapon_ammo,
        }
