"""
Scoring & Session Arbiter
=========================

Tracks score, coins and kills, owns the session state machine and publishes
the end-of-session summary to the progression layer.

    IDLE --jump--> PLAYING --lethal, unshielded--> GAME_OVER --reset--> IDLE
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from flap_arena.arena_core.config_loader import DifficultyProfile, get_profile
from flap_arena.arena_core.entities import SessionStatus

logger = logging.getLogger(__name__)

PASS_POINTS = 1


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    source: str  # "pass", "coin" or "kill"

    def __repr__(self) -> str:
        return f"ScoreEvent({self.source}=+{self.points})"


@dataclass(frozen=True)
class SessionSummary:
    """One-shot payload emitted when a session ends."""
    final_score: int
    coins_collected: int
    kill_count: int
    obstacles_passed: int
    difficulty: str
    frames: int
    play_time: float


SummaryListener = Callable[[SessionSummary], None]


class ScoreTracker:
    """
    Tracks score and the per-run tallies.

    Score only grows: +1 per obstacle pass, +tier value per coin and the
    profile's kill bonus per destroyed hazard.
    """

    def __init__(self, profile: Optional[DifficultyProfile] = None):
        if profile is None:
            profile = get_profile()

        self._profile = profile
        self._score: int = 0
        self._coins: int = 0
        self._kills: int = 0
        self._passes: int = 0

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def coins(self) -> int:
        """Coin value collected this run."""
        return self._coins

    @property
    def kills(self) -> int:
        """Hazards destroyed this run."""
        return self._kills

    @property
    def passes(self) -> int:
        """Obstacle pairs passed this run."""
        return self._passes

    def apply_pass(self) -> ScoreEvent:
        self._score += PASS_POINTS
        self._passes += 1
        return ScoreEvent(points=PASS_POINTS, source="pass")

    def apply_coin(self, tier: str) -> ScoreEvent:
        value = self._profile.scoring.coin_value(tier)
        self._score += value
        self._coins += value
        return ScoreEvent(points=value, source="coin")

    def apply_kill(self) -> ScoreEvent:
        bonus = self._profile.scoring.kill_bonus
        self._score += bonus
        self._kills += 1
        return ScoreEvent(points=bonus, source="kill")

    def reset(self) -> None:
        """Reset all tallies to zero."""
        self._score = 0
        self._coins = 0
        self._kills = 0
        self._passes = 0


class SessionArbiter:
    """
    Owns the session status and decides termination.

    A session terminates at most once; the summary is delivered to every
    listener exactly once per run.
    """

    def __init__(self, scorer: ScoreTracker, profile: Optional[DifficultyProfile] = None):
        if profile is None:
            profile = get_profile()

        self._profile = profile
        self._scorer = scorer
        self._status = SessionStatus.IDLE
        self._listeners: List[SummaryListener] = []
        self._summary: Optional[SessionSummary] = None
        self._frames: int = 0
        self._play_time: float = 0.0

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_playing(self) -> bool:
        return self._status == SessionStatus.PLAYING

    @property
    def is_over(self) -> bool:
        return self._status == SessionStatus.GAME_OVER

    @property
    def summary(self) -> Optional[SessionSummary]:
        """Summary of the finished run, or None while it is still going."""
        return self._summary

    @property
    def frames(self) -> int:
        return self._frames

    @property
    def play_time(self) -> float:
        return self._play_time

    def add_listener(self, listener: SummaryListener) -> None:
        """Register a callback invoked with the SessionSummary on game over."""
        self._listeners.append(listener)

    def remove_listener(self, listener: SummaryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def start(self) -> bool:
        """IDLE -> PLAYING. Returns True if the transition happened."""
        if self._status != SessionStatus.IDLE:
            return False
        self._status = SessionStatus.PLAYING
        logger.debug("Session started (%s)", self._profile.name)
        return True

    def tick(self, dt: float) -> None:
        """Count a simulated frame while playing."""
        if self._status == SessionStatus.PLAYING:
            self._frames += 1
            self._play_time += dt

    def end(self) -> Optional[SessionSummary]:
        """
        PLAYING -> GAME_OVER, capturing and publishing the summary.

        Returns:
            The summary if this call terminated the session, None otherwise.
        """
        if self._status != SessionStatus.PLAYING:
            return None

        self._status = SessionStatus.GAME_OVER
        self._summary = SessionSummary(
            final_score=self._scorer.score,
            coins_collected=self._scorer.coins,
            kill_count=self._scorer.kills,
            obstacles_passed=self._scorer.passes,
            difficulty=self._profile.name,
            frames=self._frames,
            play_time=self._play_time,
        )
        logger.info(
            "Session over (%s): score=%d coins=%d kills=%d",
            self._profile.name,
            self._summary.final_score,
            self._summary.coins_collected,
            self._summary.kill_count,
        )
        for listener in list(self._listeners):
            listener(self._summary)
        return self._summary

    def reset(self) -> None:
        """Back to IDLE; listeners stay registered."""
        self._status = SessionStatus.IDLE
        self._summary = None
        self._frames = 0
        self._play_time = 0.0
