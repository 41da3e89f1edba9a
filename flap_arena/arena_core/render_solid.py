"""
Solid Renderer
==============

Fast numpy-based renderer that draws a FrameSnapshot with flat colours:
barriers and the avatar as rectangles, pickups, hazards and projectiles as
circles. Uses OpenCV for the score text when available.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from flap_arena.arena_core.config_loader import DifficultyProfile, get_profile
from flap_arena.arena_core.state_snapshot import FrameSnapshot

# Try to import cv2 for text rendering
try:
    import cv2
    CV2_AVAILABLE = True
except ImportError:
    CV2_AVAILABLE = False

Color = Tuple[int, int, int]

SKY_COLOR: Color = (110, 190, 220)
GROUND_COLOR: Color = (210, 180, 110)
BARRIER_COLOR: Color = (80, 170, 60)
BREACHED_COLOR: Color = (120, 120, 120)
AVATAR_COLOR: Color = (250, 210, 40)
SHIELD_COLORS = {1: (90, 160, 255), 2: (170, 90, 255)}

PICKUP_COLORS = {
    "silver": (200, 200, 210),
    "gold": (255, 200, 0),
    "diamond": (120, 240, 255),
    "shield": (60, 120, 255),
    "weapon": (230, 70, 60),
}
HAZARD_COLORS = {
    "drifter": (150, 60, 170),
    "missile": (220, 60, 40),
    "hunter": (60, 60, 60),
    "bomber": (100, 80, 40),
}
PLAYER_BULLET_COLOR: Color = (255, 255, 120)
HAZARD_BULLET_COLOR: Color = (255, 90, 90)
BOMB_COLOR: Color = (30, 30, 30)


class SolidRenderer:
    """
    Renders frame snapshots as solid-colour shapes.

    Draws the actual collision geometry rather than sprites, so it doubles as
    a hitbox debugger.
    """

    def __init__(self, profile: Optional[DifficultyProfile] = None, show_hitbox: bool = True):
        if profile is None:
            profile = get_profile()

        self._profile = profile
        self._show_hitbox = show_hitbox
        self._padding = profile.collision.hitbox_padding

        self._text_color = (255, 255, 255)
        self._text_shadow = (40, 40, 50)

    def render(
        self,
        snapshot: FrameSnapshot,
        width: Optional[int] = None,
        height: Optional[int] = None
    ) -> np.ndarray:
        """
        Render a snapshot to an RGB array.

        Args:
            snapshot: Frame to draw.
            width: Output image width. Board width if None.
            height: Output image height. Board height if None.

        Returns:
            (height, width, 3) uint8 array.
        """
        width = width or int(snapshot.board_width)
        height = height or int(snapshot.board_height)
        sx = width / snapshot.board_width
        sy = height / snapshot.board_height

        img = np.zeros((height, width, 3), dtype=np.uint8)
        img[:] = SKY_COLOR

        ground_row = int(snapshot.ground_y * sy)
        img[ground_row:, :] = GROUND_COLOR

        for pair in snapshot.obstacles:
            color = BREACHED_COLOR if pair.breached else BARRIER_COLOR
            left = pair.x * sx
            right = (pair.x + pair.width) * sx
            self._fill_rect(img, left, 0, right, pair.top_height * sy, color)
            self._fill_rect(img, left, pair.bottom_y * sy, right, snapshot.ground_y * sy, color)

        for pickup in snapshot.pickups:
            key = pickup.tier if pickup.kind == "coin" else pickup.kind
            self._draw_circle(img, pickup.x * sx, pickup.y * sy, pickup.radius * sx, PICKUP_COLORS[key])

        for hazard in snapshot.hazards:
            self._draw_circle(img, hazard.x * sx, hazard.y * sy, hazard.size / 2 * sx, HAZARD_COLORS[hazard.kind])

        for proj in snapshot.projectiles:
            if proj.kind == "bomb":
                color = BOMB_COLOR
            elif proj.from_player:
                color = PLAYER_BULLET_COLOR
            else:
                color = HAZARD_BULLET_COLOR
            self._draw_circle(img, proj.x * sx, proj.y * sy, max(1.0, proj.radius * sx), color)

        self._draw_avatar(img, snapshot, sx, sy)
        self._draw_score(img, snapshot, width)
        return img

    def _draw_avatar(self, img: np.ndarray, snapshot: FrameSnapshot, sx: float, sy: float) -> None:
        av = snapshot.avatar
        if av.shield_level in SHIELD_COLORS:
            radius = max(av.width, av.height) / 2 + 6
            self._draw_circle(img, av.x * sx, av.y * sy, radius * sx, SHIELD_COLORS[av.shield_level])

        half_w = av.width / 2
        half_h = av.height / 2
        self._fill_rect(
            img,
            (av.x - half_w) * sx, (av.y - half_h) * sy,
            (av.x + half_w) * sx, (av.y + half_h) * sy,
            AVATAR_COLOR,
        )

        if self._show_hitbox:
            p = self._padding
            self._outline_rect(
                img,
                (av.x - half_w + p) * sx, (av.y - half_h + p) * sy,
                (av.x + half_w - p) * sx, (av.y + half_h - p) * sy,
                (200, 30, 30),
            )

    def _draw_score(self, img: np.ndarray, snapshot: FrameSnapshot, width: int) -> None:
        """Draw score and coin count at the top of the image."""
        if not CV2_AVAILABLE:
            return

        font = cv2.FONT_HERSHEY_SIMPLEX
        font_scale = 0.6
        thickness = 2

        score_text = f"Score: {snapshot.score}"
        cv2.putText(img, score_text, (12, 27), font, font_scale, self._text_shadow, thickness + 1)
        cv2.putText(img, score_text, (10, 25), font, font_scale, self._text_color, thickness)

        coins_text = f"Coins: {snapshot.coins}"
        text_size = cv2.getTextSize(coins_text, font, font_scale, thickness)[0]
        x = width - text_size[0] - 10
        cv2.putText(img, coins_text, (x + 2, 27), font, font_scale, self._text_shadow, thickness + 1)
        cv2.putText(img, coins_text, (x, 25), font, font_scale, self._text_color, thickness)

    def _fill_rect(
        self,
        img: np.ndarray,
        left: float,
        top: float,
        right: float,
        bottom: float,
        color: Color
    ) -> None:
        height, width = img.shape[:2]
        x0 = max(0, int(left))
        x1 = min(width, int(right))
        y0 = max(0, int(top))
        y1 = min(height, int(bottom))
        if x0 >= x1 or y0 >= y1:
            return
        img[y0:y1, x0:x1] = color

    def _outline_rect(
        self,
        img: np.ndarray,
        left: float,
        top: float,
        right: float,
        bottom: float,
        color: Color
    ) -> None:
        self._fill_rect(img, left, top, right, top + 1, color)
        self._fill_rect(img, left, bottom - 1, right, bottom, color)
        self._fill_rect(img, left, top, left + 1, bottom, color)
        self._fill_rect(img, right - 1, top, right, bottom, color)

    def _draw_circle(
        self,
        img: np.ndarray,
        cx: float,
        cy: float,
        radius: float,
        color: Color
    ) -> None:
        """Draw a filled circle using numpy."""
        height, width = img.shape[:2]
        cx, cy, radius = int(cx), int(cy), int(radius)

        y_min = max(0, cy - radius)
        y_max = min(height, cy + radius + 1)
        x_min = max(0, cx - radius)
        x_max = min(width, cx + radius + 1)

        if y_min >= y_max or x_min >= x_max:
            return

        yy, xx = np.meshgrid(np.arange(y_min, y_max), np.arange(x_min, x_max), indexing='ij')
        mask = (xx - cx) ** 2 + (yy - cy) ** 2 <= radius ** 2
        img[y_min:y_max, x_min:x_max][mask] = color

    def close(self) -> None:
        """Clean up resources (no-op for solid renderer)."""
        pass
