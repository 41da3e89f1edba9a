"""
Avatar Controller
=================

Owns the avatar's kinematic state: jump impulses with a debounce window,
gravity integration with a terminal fall speed, velocity-driven rotation and
the soft ceiling.
"""

from __future__ import annotations

import math
from typing import Optional

from flap_arena.arena_core.config_loader import DifficultyProfile, get_profile
from flap_arena.arena_core.entities import Avatar

# Rotation targets in degrees: velocity divisors and caps
DIVE_ROTATION_DIVISOR = 8.0
DIVE_ROTATION_CAP = 80.0
RISE_ROTATION_DIVISOR = 6.0
RISE_ROTATION_CAP = -30.0

IDLE_HOVER_PERIOD = 0.4
IDLE_TILT_PERIOD = 0.5
IDLE_TILT_DEGREES = 8.0


def target_rotation(velocity: float) -> float:
    """Nose-down pitch while falling, smaller nose-up pitch while rising."""
    if velocity > 0:
        return min(velocity / DIVE_ROTATION_DIVISOR, DIVE_ROTATION_CAP)
    return max(velocity / RISE_ROTATION_DIVISOR, RISE_ROTATION_CAP)


class AvatarController:
    """
    Drives one Avatar instance.

    The debounce window runs on simulation time: a countdown set by each
    accepted jump and drained by integrate()/hover().
    """

    def __init__(self, profile: Optional[DifficultyProfile] = None):
        if profile is None:
            profile = get_profile()

        self._profile = profile
        self._physics = profile.physics
        self.avatar = self._spawn_avatar()
        self._debounce_timer: float = 0.0
        self._idle_clock: float = 0.0

    def _spawn_avatar(self) -> Avatar:
        x, y = self._profile.avatar_start
        return Avatar(
            x=x,
            y=y,
            width=self._profile.board.avatar_width,
            height=self._profile.board.avatar_height,
        )

    def reset(self) -> Avatar:
        """Recreate the avatar at its start position with no upgrades."""
        self.avatar = self._spawn_avatar()
        self._debounce_timer = 0.0
        self._idle_clock = 0.0
        return self.avatar

    @property
    def can_jump(self) -> bool:
        return self._debounce_timer <= 0.0

    def apply_jump(self) -> bool:
        """
        Set vertical velocity to the jump impulse.

        Returns:
            True if the jump was accepted, False if still inside the debounce window.
        """
        if not self.can_jump:
            return False
        self.avatar.velocity = self._physics.jump_impulse
        self._debounce_timer = self._physics.jump_debounce
        return True

    def integrate(self, dt: float) -> None:
        """Advance the avatar by one frame of gravity and motion."""
        avatar = self.avatar
        self._debounce_timer = max(0.0, self._debounce_timer - dt)

        avatar.velocity += self._physics.gravity * dt
        if avatar.velocity > self._physics.max_fall_speed:
            avatar.velocity = self._physics.max_fall_speed

        avatar.y += avatar.velocity * dt

        target = target_rotation(avatar.velocity)
        avatar.rotation += (target - avatar.rotation) * self._physics.rotation_smoothing

        # Ceiling is soft: push back down instead of ending the run
        if avatar.top <= 0:
            avatar.y = avatar.height / 2
            avatar.velocity = self._physics.ceiling_bounce_velocity

    def hover(self, dt: float) -> None:
        """Idle bobbing before the first jump; no gravity applies."""
        self._debounce_timer = max(0.0, self._debounce_timer - dt)
        self._idle_clock += dt
        _, start_y = self._profile.avatar_start
        amplitude = self._physics.idle_hover_amplitude
        self.avatar.y = start_y + math.sin(self._idle_clock / IDLE_HOVER_PERIOD) * amplitude
        self.avatar.rotation = math.sin(self._idle_clock / IDLE_TILT_PERIOD) * IDLE_TILT_DEGREES

    def bounce_off_ground(self, ground_y: float) -> None:
        """Lift the avatar out of the ground after a shield absorbed the impact."""
        self.avatar.y = ground_y - self.avatar.height / 2 - 1.0
        self.avatar.velocity = self._physics.jump_impulse
