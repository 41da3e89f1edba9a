"""
Arena Core - the per-frame simulation engine.

Main exports:
- CoreGame: Engine orchestrator (jump / update / reset)
- FlapArenaEnv: Gymnasium environment for agent training
- DifficultyProfile: Tuning loaded from difficulty_profiles.yaml
- FrameSnapshot / FrameEvent / SessionSummary: engine outputs
"""

from flap_arena.arena_core.config_loader import (
    DifficultyProfile,
    get_profile,
    load_profile,
    load_profiles,
    reload_profiles,
)
from flap_arena.arena_core.entities import SessionStatus, ShieldLevel
from flap_arena.arena_core.env_gym import FlapArenaEnv
from flap_arena.arena_core.events import EventKind, FrameEvent
from flap_arena.arena_core.game import CoreGame, FrameResult
from flap_arena.arena_core.scoring import SessionSummary
from flap_arena.arena_core.state_snapshot import FrameSnapshot

__all__ = [
    "DifficultyProfile",
    "get_profile",
    "load_profile",
    "load_profiles",
    "reload_profiles",
    "SessionStatus",
    "ShieldLevel",
    "FlapArenaEnv",
    "EventKind",
    "FrameEvent",
    "CoreGame",
    "FrameResult",
    "SessionSummary",
    "FrameSnapshot",
]
