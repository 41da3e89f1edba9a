"""
Baseline Gap Follower - Holds the avatar just below the next gap's centre.

This is a simple heuristic agent that reads the avatar row and the first
obstacle row of the observation, and jumps whenever the avatar is falling
below its target height.

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark to compare trained agents against
3. A verification that the environment API works correctly

Strategy:
- Jump on the first step to leave the idle state
- Target the gap centre of the next obstacle pair, biased slightly low
  because a jump carries the avatar upward a long way
- With no obstacle in view, target the middle of the playfield
- Jump only while falling and below the target
"""

from typing import Any, Dict, Optional

import numpy as np

# Avatar row layout (see FrameSnapshot.to_obs_dict)
AVATAR_Y = 0
AVATAR_VELOCITY = 1
AVATAR_GROUND_CLEARANCE = 7

# Obstacle row layout
OBSTACLE_DX = 0
OBSTACLE_TOP = 1
OBSTACLE_BOTTOM = 2

STATUS_IDLE = 0

# Fraction of the gap below its centre to aim for
LOW_BIAS = 0.2


class FlapAgent:
    """
    Simple baseline agent that follows the centre of the next gap.
    """

    def __init__(self, debug: bool = False, low_bias: float = LOW_BIAS):
        """
        Initialize the agent.

        Args:
            debug: If True, print decisions to stdout.
            low_bias: Fraction of the gap height to aim below its centre.
        """
        self.debug = debug
        self.low_bias = low_bias

    def reset(self, seed: Optional[int] = None) -> None:
        """The agent is stateless; present for API symmetry."""
        pass

    def target_y(self, observation: Dict[str, Any]) -> float:
        avatar = observation["avatar"]
        y = float(avatar[AVATAR_Y])
        ground_y = y + float(avatar[AVATAR_GROUND_CLEARANCE])

        mask = observation["obstacle_mask"]
        if not bool(np.any(mask)):
            return ground_y / 2

        row = observation["obstacles"][int(np.argmax(mask))]
        top = float(row[OBSTACLE_TOP])
        bottom = float(row[OBSTACLE_BOTTOM])
        return (top + bottom) / 2 + (bottom - top) * self.low_bias

    def act(self, observation: Dict[str, Any], debug: bool = False) -> int:
        """
        Decide whether to jump this step.

        Args:
            observation: Dict of numpy arrays from the environment.
            debug: If True, print debug info for this step.

        Returns:
            1 to jump, 0 otherwise.
        """
        if int(observation["status"]) == STATUS_IDLE:
            return 1

        avatar = observation["avatar"]
        y = float(avatar[AVATAR_Y])
        velocity = float(avatar[AVATAR_VELOCITY])
        target = self.target_y(observation)

        action = 1 if (y > target and velocity >= 0) else 0

        if debug or self.debug:
            print(f"[GapFollower] y={y:.0f} vy={velocity:.0f} "
                  f"target={target:.0f} action={action}")

        return action


# Convenience function to create agent (used by evaluation harness)
def create_agent(**kwargs) -> FlapAgent:
    """Factory function to create an agent instance."""
    return FlapAgent(**kwargs)
