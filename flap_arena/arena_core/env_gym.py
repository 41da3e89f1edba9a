"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the flap arena engine.
Reward is always 0.0 - agents compute their own from info.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from flap_arena.arena_core.config_loader import DifficultyProfile, load_profile
from flap_arena.arena_core.game import CoreGame
from flap_arena.arena_core.state_snapshot import (
    AVATAR_FEATURES,
    HAZARD_FEATURES,
    OBSTACLE_FEATURES,
    PICKUP_FEATURES,
    PROJECTILE_FEATURES,
    FrameSnapshot,
    ObservationLimits,
)

NOOP = 0
JUMP = 1


class FlapArenaEnv(gym.Env):
    """
    Flap arena as a Gymnasium environment.

    Action Space:
        Discrete(2): 0 = do nothing, 1 = jump.

    Observation Space:
        Dict of fixed-size arrays: avatar state, upcoming obstacles, nearest
        hazards, incoming projectiles and pickups (each with a mask).

    Reward:
        Always 0.0. Agents must compute their own reward from the info dict.

    Info:
        Contains score, delta_score, coins, kills, status, shield/weapon state.
    """

    metadata = {
        "render_modes": ["rgb_array"],
        "render_fps": 60,
    }

    def __init__(
        self,
        difficulty: Union[str, DifficultyProfile] = "easy",
        config_path: Optional[str] = None,
        render_mode: Optional[str] = None,
        frame_skip: int = 2,
        max_steps: Optional[int] = 5000,
        limits: Optional[ObservationLimits] = None,
        debug: bool = False,
    ):
        """
        Initialize environment.

        Args:
            difficulty: Profile name or a DifficultyProfile instance.
            config_path: Path to difficulty_profiles.yaml. Uses default if None.
            render_mode: "rgb_array" for numpy frames, None for headless.
            frame_skip: Engine frames simulated per step.
            max_steps: Truncate the episode after this many steps. None disables.
            limits: Slot counts for the variable-length observation arrays.
            debug: If True, enables verbose debug output for agent development.
        """
        super().__init__()

        if isinstance(difficulty, DifficultyProfile):
            self._profile = difficulty
        else:
            self._profile = load_profile(difficulty, config_path)

        if frame_skip < 1:
            raise ValueError(f"frame_skip must be >= 1, got {frame_skip}")

        self.render_mode = render_mode
        self._frame_skip = frame_skip
        self._max_steps = max_steps
        self._limits = limits or ObservationLimits()
        self._debug = debug
        self._dt = 1.0 / self._profile.engine.fps
        self._steps = 0

        self._game = CoreGame(self._profile)
        self._renderer = None

        self.action_space = spaces.Discrete(2)
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] FlapArenaEnv initialized")
            print(f"[DEBUG]   Profile: {self._profile.name}")
            print(f"[DEBUG]   Board: {self._profile.board.width}x{self._profile.board.height}")
            print(f"[DEBUG]   dt={self._dt:.4f}s x frame_skip={self._frame_skip}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        lim = self._limits

        def table(rows: int, cols: int) -> spaces.Box:
            return spaces.Box(low=-np.inf, high=np.inf, shape=(rows, cols), dtype=np.float32)

        return spaces.Dict({
            "avatar": spaces.Box(low=-np.inf, high=np.inf, shape=(AVATAR_FEATURES,), dtype=np.float32),
            "obstacles": table(lim.max_obstacles, OBSTACLE_FEATURES),
            "obstacle_mask": spaces.MultiBinary(lim.max_obstacles),
            "hazards": table(lim.max_hazards, HAZARD_FEATURES),
            "hazard_mask": spaces.MultiBinary(lim.max_hazards),
            "projectiles": table(lim.max_projectiles, PROJECTILE_FEATURES),
            "projectile_mask": spaces.MultiBinary(lim.max_projectiles),
            "pickups": table(lim.max_pickups, PICKUP_FEATURES),
            "pickup_mask": spaces.MultiBinary(lim.max_pickups),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "status": spaces.Box(low=0, high=2, shape=(), dtype=np.int32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        snapshot = self._game.reset(seed=seed)
        self._steps = 0

        obs = self._snapshot_to_obs(snapshot)
        info = self._game.get_info()
        info["delta_score"] = 0
        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: 1 to jump before simulating, 0 to do nothing.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())
        action = int(action)

        jumped = self._game.jump() if action == JUMP else False

        delta_score = 0
        events = []
        result = None
        for _ in range(self._frame_skip):
            result = self._game.update(self._dt)
            delta_score += result.delta_score
            events.extend(result.events)
            if result.terminated:
                break

        self._steps += 1
        terminated = result.terminated
        truncated = (
            not terminated
            and self._max_steps is not None
            and self._steps >= self._max_steps
        )

        obs = self._snapshot_to_obs(result.snapshot)

        # Reward is always 0.0 - agents compute their own
        reward = 0.0

        info = self._game.get_info()
        info["delta_score"] = delta_score
        info["jumped"] = jumped
        info["events"] = [e.kind.value for e in events]

        if self._debug:
            print(f"[DEBUG] Step {self._steps}: action={action}, delta_score={delta_score}, "
                  f"y={result.snapshot.avatar.y:.1f}, vy={result.snapshot.avatar.velocity:.1f}")
            if terminated:
                print(f"[DEBUG] TERMINATED: score={info['score']}")

        return obs, reward, terminated, truncated, info

    def _snapshot_to_obs(self, snapshot: FrameSnapshot) -> Dict[str, np.ndarray]:
        return snapshot.to_obs_dict(self._limits)

    def _init_renderer(self) -> None:
        from flap_arena.arena_core.render_solid import SolidRenderer
        self._renderer = SolidRenderer(self._profile)

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array if render_mode is "rgb_array", None otherwise.
        """
        if self.render_mode != "rgb_array":
            return None
        if self._renderer is None:
            self._init_renderer()
        return self._renderer.render(self._game.snapshot())

    def close(self) -> None:
        """Clean up resources."""
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def profile(self) -> DifficultyProfile:
        return self._profile
