"""
Human Play Mode
===============

Play flap arena interactively with the keyboard.

Controls:
    - Space / Up / Click: Jump (the first jump starts the run)
    - R: Restart
    - ESC: Quit

Usage:
    python -m tools.play_human [--difficulty NAME] [--seed SEED] [--scale SCALE]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from flap_arena.arena_core.config_loader import DifficultyProfile, load_profile
from flap_arena.arena_core.events import EventKind
from flap_arena.arena_core.game import CoreGame
from flap_arena.arena_core.scoring import SessionSummary
from flap_arena.arena_core.state_snapshot import FrameSnapshot

logger = logging.getLogger(__name__)

SKY = (110, 190, 220)
GROUND = (210, 180, 110)
BARRIER = (80, 170, 60)
BARRIER_EDGE = (40, 110, 30)
BREACHED = (130, 130, 130)
AVATAR = (250, 210, 40)
SHIELD = {1: (90, 160, 255), 2: (170, 90, 255)}
COIN = {"silver": (200, 200, 210), "gold": (255, 200, 0), "diamond": (120, 240, 255)}
SHIELD_PICKUP = (60, 120, 255)
WEAPON_PICKUP = (230, 70, 60)
HAZARD = {
    "drifter": (150, 60, 170),
    "missile": (220, 60, 40),
    "hunter": (60, 60, 60),
    "bomber": (100, 80, 40),
}
TEXT = (255, 255, 255)
TEXT_SHADOW = (40, 40, 50)

# Events echoed to the console in place of sound effects
CONSOLE_EVENTS = {
    EventKind.COIN,
    EventKind.SHIELD_PICKUP,
    EventKind.WEAPON_PICKUP,
    EventKind.SHIELD_ABSORB,
    EventKind.KILL,
}


class ArenaRenderer:
    """Draws frame snapshots with pygame primitives."""

    def __init__(self, profile: DifficultyProfile, scale: float):
        self._profile = profile
        self._scale = scale
        pygame.font.init()
        self._font_large = pygame.font.Font(None, int(48 * scale))
        self._font_small = pygame.font.Font(None, int(22 * scale))

    def _s(self, value: float) -> int:
        return int(value * self._scale)

    def render(self, screen: "pygame.Surface", snap: FrameSnapshot) -> None:
        screen.fill(SKY)
        width = self._s(snap.board_width)
        height = self._s(snap.board_height)
        ground = self._s(snap.ground_y)
        pygame.draw.rect(screen, GROUND, (0, ground, width, height - ground))

        for pair in snap.obstacles:
            color = BREACHED if pair.breached else BARRIER
            x = self._s(pair.x)
            w = self._s(pair.width)
            top = pygame.Rect(x, 0, w, self._s(pair.top_height))
            bottom = pygame.Rect(x, self._s(pair.bottom_y), w, ground - self._s(pair.bottom_y))
            for rect in (top, bottom):
                pygame.draw.rect(screen, color, rect)
                pygame.draw.rect(screen, BARRIER_EDGE, rect, 2)

        for item in snap.pickups:
            if item.kind == "coin":
                color = COIN[item.tier]
            elif item.kind == "shield":
                color = SHIELD_PICKUP
            else:
                color = WEAPON_PICKUP
            pygame.draw.circle(screen, color, (self._s(item.x), self._s(item.y)), self._s(item.radius))

        for hazard in snap.hazards:
            half = self._s(hazard.size / 2)
            rect = pygame.Rect(self._s(hazard.x) - half, self._s(hazard.y) - half, half * 2, half * 2)
            pygame.draw.rect(screen, HAZARD[hazard.kind], rect, border_radius=half // 2)

        for proj in snap.projectiles:
            if proj.kind == "bomb":
                color = (30, 30, 30)
            elif proj.from_player:
                color = (255, 255, 120)
            else:
                color = (255, 90, 90)
            pygame.draw.circle(screen, color, (self._s(proj.x), self._s(proj.y)), max(2, self._s(proj.radius)))

        self._draw_avatar(screen, snap)
        self._draw_hud(screen, snap, width)

        if snap.is_over:
            self._draw_centered(screen, "GAME OVER", height // 2 - self._s(30), self._font_large)
            self._draw_centered(screen, "R to restart", height // 2 + self._s(10), self._font_small)
        elif snap.status.value == "idle":
            self._draw_centered(screen, "Space to start", height // 3, self._font_small)

    def _draw_avatar(self, screen: "pygame.Surface", snap: FrameSnapshot) -> None:
        av = snap.avatar
        body = pygame.Surface((self._s(av.width), self._s(av.height)), pygame.SRCALPHA)
        body.fill(AVATAR)
        rotated = pygame.transform.rotate(body, -av.rotation)
        rect = rotated.get_rect(center=(self._s(av.x), self._s(av.y)))
        if av.shield_level in SHIELD:
            radius = self._s(max(av.width, av.height) / 2 + 6)
            pygame.draw.circle(screen, SHIELD[av.shield_level], rect.center, radius, 3)
        screen.blit(rotated, rect)

    def _draw_hud(self, screen: "pygame.Surface", snap: FrameSnapshot, width: int) -> None:
        score = self._font_large.render(str(snap.score), True, TEXT)
        shadow = self._font_large.render(str(snap.score), True, TEXT_SHADOW)
        x = (width - score.get_width()) // 2
        screen.blit(shadow, (x + 2, self._s(22)))
        screen.blit(score, (x, self._s(20)))

        av = snap.avatar
        status = f"coins {snap.coins}  kills {snap.kills}"
        if av.weapon_level:
            status += f"  gun L{av.weapon_level} x{av.weapon_ammo}"
        line = self._font_small.render(status, True, TEXT)
        screen.blit(line, (self._s(8), self._s(8)))

    def _draw_centered(self, screen: "pygame.Surface", text: str, y: int, font) -> None:
        surface = font.render(text, True, TEXT)
        screen.blit(surface, ((screen.get_width() - surface.get_width()) // 2, y))


class HumanPlayer:
    """Keyboard-driven session running the engine at the display frame rate."""

    def __init__(
        self,
        profile: DifficultyProfile,
        seed: Optional[int] = None,
        scale: float = 1.0,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        self._profile = profile
        self._seed = seed
        self._target_fps = target_fps

        self._game = CoreGame(profile, seed=seed, listeners=[self._on_summary])
        self._game.reset(seed=seed)

        pygame.init()
        size = (int(profile.board.width * scale), int(profile.board.height * scale))
        self._screen = pygame.display.set_mode(size)
        pygame.display.set_caption(f"Flap Arena ({profile.name})")
        self._clock = pygame.time.Clock()
        self._renderer = ArenaRenderer(profile, scale)
        self._running = True

    def _on_summary(self, summary: SessionSummary) -> None:
        print(f"\nGAME OVER - score={summary.final_score} coins={summary.coins_collected} "
              f"kills={summary.kill_count} time={summary.play_time:.1f}s")

    def run(self) -> int:
        """Run the game loop. Returns final score."""
        print("=== Flap Arena ===")
        print("Space to jump, R to restart, ESC to quit")
        print()

        while self._running:
            dt = self._clock.tick(self._target_fps) / 1000.0
            self._handle_events()
            result = self._game.update(dt)
            for event in result.events:
                if event.kind in CONSOLE_EVENTS:
                    print(f"  {event.kind.value} {event.data}")
            self._renderer.render(self._screen, result.snapshot)
            pygame.display.flip()

        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_r:
                    self._game.reset(seed=self._seed)
                    print("\n=== Game Restarted ===\n")
                elif event.key in (pygame.K_SPACE, pygame.K_UP):
                    self._game.jump()
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._game.jump()


def main():
    parser = argparse.ArgumentParser(description="Play flap arena interactively")
    parser.add_argument("--difficulty", type=str, default="easy", help="Difficulty profile")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--scale", type=float, default=1.0, help="Window scale (default: 1.0)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        profile = load_profile(args.difficulty)
        player = HumanPlayer(profile, seed=args.seed, scale=args.scale, target_fps=args.fps)
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except (ImportError, ValueError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
