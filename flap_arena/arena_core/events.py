"""
Frame Events
============

One-shot notifications produced during a frame (jumps, passes, pickups,
shield absorptions, shots, kills, game over). Audio and visual-effect layers
consume them; they never feed back into the simulation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class EventKind(str, Enum):
    JUMP = "jump"
    PASS = "pass"
    COIN = "coin"
    SHIELD_PICKUP = "shield_pickup"
    WEAPON_PICKUP = "weapon_pickup"
    SHIELD_ABSORB = "shield_absorb"
    SHOT = "shot"
    HAZARD_HIT = "hazard_hit"
    KILL = "kill"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class FrameEvent:
    kind: EventKind
    x: float = 0.0
    y: float = 0.0
    data: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"FrameEvent({self.kind.value} @ {self.x:.0f},{self.y:.0f} {self.data})"


class EventLog:
    """Collects events for the current frame."""

    def __init__(self):
        self._events: List[FrameEvent] = []

    def emit(self, kind: EventKind, x: float = 0.0, y: float = 0.0, **data: Any) -> None:
        self._events.append(FrameEvent(kind=kind, x=x, y=y, data=data))

    def drain(self) -> List[FrameEvent]:
        """Return and clear the pending events."""
        events, self._events = self._events, []
        return events

    def clear(self) -> None:
        self._events = []

    def __len__(self) -> int:
        return len(self._events)
