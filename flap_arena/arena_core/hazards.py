"""
Hazards & Projectiles
=====================

Spawns and advances hostile actors and every projectile in flight.

Hazard behaviors:
- Drifter: constant leftward speed plus a sinusoidal vertical wobble
- Missile: constant closing speed with proportional vertical homing
- Hunter: flies in to a holding x, hovers, fires aimed bullets, then leaves
- Bomber: crosses at altitude dropping bombs that fall under their own gravity

Drifters and missiles spawn on the basic timer. Hunters and bombers appear
once the score reaches a threshold, on a timer that shortens as score grows.
"""

from __future__ import annotations

import math
from typing import List, Optional

from flap_arena.arena_core.config_loader import DifficultyProfile, get_profile
from flap_arena.arena_core.entities import (
    Avatar,
    Bomb,
    Bomber,
    Bullet,
    BulletTier,
    Drifter,
    Hazard,
    Hunter,
    Missile,
)
from flap_arena.arena_core.events import EventKind, EventLog
from flap_arena.arena_core.geometry import circle_collide, clamp, direction_to
from flap_arena.arena_core.rng import SpawnRoller
from flap_arena.arena_core.scoring import ScoreTracker

# How far outside the playfield entities may travel before removal
OFFSCREEN_MARGIN = 50.0
HUNTER_HOVER_RATE = 2.0


class ProjectileSystem:
    """Owns bullets (player and hazard fired) and bombs."""

    def __init__(
        self,
        profile: Optional[DifficultyProfile] = None,
        events: Optional[EventLog] = None
    ):
        if profile is None:
            profile = get_profile()

        self._profile = profile
        self._events = events if events is not None else EventLog()
        self.bullets: List[Bullet] = []
        self.bombs: List[Bomb] = []

    def reset(self) -> None:
        self.bullets.clear()
        self.bombs.clear()

    @property
    def player_bullets(self) -> List[Bullet]:
        return [b for b in self.bullets if b.from_player]

    @property
    def hazard_bullets(self) -> List[Bullet]:
        return [b for b in self.bullets if not b.from_player]

    def damage_for(self, tier: BulletTier) -> Optional[int]:
        """Damage points for a bullet tier; None means instantly lethal."""
        if tier == BulletTier.LETHAL:
            return None
        if tier == BulletTier.ELEVATED:
            return self._profile.weapon.elevated_damage
        return 1

    def spawn_player_bullet(self, x: float, y: float, tier: BulletTier) -> Bullet:
        cfg = self._profile.weapon
        bullet = Bullet(
            x=x, y=y,
            vx=cfg.bullet_speed, vy=0.0,
            radius=cfg.bullet_radius,
            from_player=True,
            tier=tier,
        )
        self.bullets.append(bullet)
        return bullet

    def spawn_hazard_bullet(
        self,
        x: float,
        y: float,
        dir_x: float,
        dir_y: float,
        speed: float
    ) -> Bullet:
        bullet = Bullet(
            x=x, y=y,
            vx=dir_x * speed, vy=dir_y * speed,
            radius=self._profile.hazards.bullet_radius,
            from_player=False,
        )
        self.bullets.append(bullet)
        return bullet

    def spawn_bomb(self, x: float, y: float, vx: float, vy: float) -> Bomb:
        bomb = Bomb(x=x, y=y, vx=vx, vy=vy, radius=self._profile.hazards.bomb_radius)
        self.bombs.append(bomb)
        return bomb

    def remove_bullet(self, bullet: Bullet) -> None:
        if bullet in self.bullets:
            self.bullets.remove(bullet)

    def remove_bomb(self, bomb: Bomb) -> None:
        if bomb in self.bombs:
            self.bombs.remove(bomb)

    def advance(self, dt: float) -> None:
        """Integrate every projectile and drop the ones that left the playfield."""
        width = self._profile.board.width
        height = self._profile.board.height
        ground_y = self._profile.ground_y
        gravity = self._profile.hazards.bomb_gravity

        for bullet in self.bullets:
            bullet.x += bullet.vx * dt
            bullet.y += bullet.vy * dt

        for bomb in self.bombs:
            bomb.vy += gravity * dt
            bomb.x += bomb.vx * dt
            bomb.y += bomb.vy * dt

        self.bullets[:] = [
            b for b in self.bullets
            if -OFFSCREEN_MARGIN <= b.x <= width + OFFSCREEN_MARGIN
            and -OFFSCREEN_MARGIN <= b.y <= height + OFFSCREEN_MARGIN
        ]
        # Bombs burst on the ground
        self.bombs[:] = [
            b for b in self.bombs
            if b.y + b.radius < ground_y and b.x + b.radius > -OFFSCREEN_MARGIN
        ]


class HazardSystem:
    """Owns live hazards, their spawn timers and their weapons."""

    def __init__(
        self,
        profile: Optional[DifficultyProfile],
        roller: SpawnRoller,
        projectiles: ProjectileSystem,
        events: Optional[EventLog] = None
    ):
        if profile is None:
            profile = get_profile()

        self._profile = profile
        self._cfg = profile.hazards
        self._roller = roller
        self._projectiles = projectiles
        self._events = events if events is not None else EventLog()

        self.hazards: List[Hazard] = []
        self._basic_timer: float = 0.0
        self._advanced_timer: float = 0.0

    def reset(self) -> None:
        self.hazards.clear()
        self._basic_timer = 0.0
        self._advanced_timer = 0.0

    def advanced_interval(self, score: int) -> float:
        """Spawn interval for hunters/bombers; shrinks with score down to a floor."""
        cfg = self._cfg
        excess = max(0, score - cfg.advanced_score)
        return max(cfg.advanced_min_interval, cfg.advanced_spawn_interval - excess * cfg.advanced_interval_decay)

    def advanced_unlocked(self, score: int) -> bool:
        return score >= self._cfg.advanced_score

    def update(self, dt: float, avatar: Avatar, score: int) -> None:
        """Run spawn timers, move every hazard and let armed hazards fire."""
        if self._cfg.has_hazards:
            self._run_spawn_timers(dt, score)

        for hazard in self.hazards:
            if isinstance(hazard, Drifter):
                self._advance_drifter(hazard, dt)
            elif isinstance(hazard, Missile):
                self._advance_missile(hazard, dt, avatar)
            elif isinstance(hazard, Hunter):
                self._advance_hunter(hazard, dt, avatar)
            elif isinstance(hazard, Bomber):
                self._advance_bomber(hazard, dt)

        height = self._profile.board.height
        self.hazards[:] = [
            h for h in self.hazards
            if h.x + h.radius > -OFFSCREEN_MARGIN
            and -OFFSCREEN_MARGIN < h.y < height + OFFSCREEN_MARGIN
        ]

    def _run_spawn_timers(self, dt: float, score: int) -> None:
        self._basic_timer += dt
        if self._basic_timer >= self._cfg.spawn_interval:
            self._basic_timer = 0.0
            if self._roller.chance(self._cfg.missile_share):
                self.spawn_missile()
            else:
                self.spawn_drifter()

        if not self.advanced_unlocked(score):
            self._advanced_timer = 0.0
            return

        self._advanced_timer += dt
        if self._advanced_timer >= self.advanced_interval(score):
            self._advanced_timer = 0.0
            if self._roller.chance(self._cfg.bomber_share):
                self.spawn_bomber()
            else:
                self.spawn_hunter()

    def _spawn_band(self, size: float) -> tuple:
        return (size, self._profile.ground_y - size)

    # -- spawning -----------------------------------------------------------

    def spawn_drifter(self, y: Optional[float] = None) -> Drifter:
        cfg = self._cfg
        if y is None:
            y = self._roller.uniform(*self._spawn_band(cfg.drifter_size))
        drifter = Drifter(
            x=self._profile.board.width + cfg.drifter_size,
            y=y,
            vx=-self._profile.obstacles.scroll_speed * cfg.drifter_speed_factor,
            vy=0.0,
            size=cfg.drifter_size,
            base_y=y,
            phase=self._roller.uniform(0.0, 2 * math.pi),
        )
        self.hazards.append(drifter)
        return drifter

    def spawn_missile(self, y: Optional[float] = None) -> Missile:
        cfg = self._cfg
        if y is None:
            y = self._roller.uniform(*self._spawn_band(cfg.missile_size))
        missile = Missile(
            x=self._profile.board.width + cfg.missile_size,
            y=y,
            vx=-cfg.missile_speed,
            vy=0.0,
            size=cfg.missile_size,
        )
        self.hazards.append(missile)
        return missile

    def spawn_hunter(self, y: Optional[float] = None) -> Hunter:
        cfg = self._cfg
        if y is None:
            y = self._roller.uniform(*self._spawn_band(cfg.hunter_size * 2))
        hunter = Hunter(
            x=self._profile.board.width + cfg.hunter_size,
            y=y,
            vx=-cfg.hunter_entry_speed * cfg.hunter_speed_multiplier,
            vy=0.0,
            size=cfg.hunter_size,
            hp=cfg.hunter_health,
            hold_x=self._profile.board.width * cfg.hunter_hold_ratio,
            base_y=y,
            shot_interval=cfg.hunter_shot_interval,
        )
        self.hazards.append(hunter)
        return hunter

    def spawn_bomber(self, y: Optional[float] = None) -> Bomber:
        cfg = self._cfg
        if y is None:
            y = self._roller.uniform(cfg.bomber_min_altitude, cfg.bomber_max_altitude)
        bomber = Bomber(
            x=self._profile.board.width + cfg.bomber_size,
            y=y,
            vx=-cfg.bomber_speed,
            vy=0.0,
            size=cfg.bomber_size,
            hp=cfg.bomber_health,
            bomb_interval=cfg.bomb_interval,
        )
        self.hazards.append(bomber)
        return bomber

    # -- behaviors ----------------------------------------------------------

    def _advance_drifter(self, drifter: Drifter, dt: float) -> None:
        drifter.phase += self._cfg.drifter_frequency * dt
        drifter.x += drifter.vx * dt
        new_y = drifter.base_y + math.sin(drifter.phase) * self._cfg.drifter_amplitude
        drifter.vy = (new_y - drifter.y) / dt if dt > 0 else 0.0
        drifter.y = new_y

    def _advance_missile(self, missile: Missile, dt: float, avatar: Avatar) -> None:
        cfg = self._cfg
        limit = cfg.missile_max_vertical_speed
        missile.vy = clamp((avatar.y - missile.y) * cfg.missile_homing_gain, -limit, limit)
        missile.x += missile.vx * dt
        missile.y += missile.vy * dt

    def _advance_hunter(self, hunter: Hunter, dt: float, avatar: Avatar) -> None:
        cfg = self._cfg
        if hunter.retreating:
            hunter.vx = -self._profile.obstacles.scroll_speed
            hunter.x += hunter.vx * dt
        elif hunter.x > hunter.hold_x:
            hunter.x = max(hunter.hold_x, hunter.x + hunter.vx * dt)
        else:
            hunter.vx = 0.0
            hunter.hold_timer += dt
            if hunter.hold_timer >= cfg.hunter_hold_time:
                hunter.retreating = True

        hunter.hover_phase += HUNTER_HOVER_RATE * dt
        hunter.y = hunter.base_y + math.sin(hunter.hover_phase) * cfg.hunter_hover_amplitude

        hunter.shot_timer += dt
        if hunter.shot_timer >= hunter.shot_interval and hunter.x <= self._profile.board.width:
            hunter.shot_timer = 0.0
            self.fire_at(hunter, avatar)

    def _advance_bomber(self, bomber: Bomber, dt: float) -> None:
        bomber.x += bomber.vx * dt
        bomber.bomb_timer += dt
        if bomber.bomb_timer >= bomber.bomb_interval and bomber.x <= self._profile.board.width:
            bomber.bomb_timer = 0.0
            self._projectiles.spawn_bomb(
                x=bomber.x,
                y=bomber.y + bomber.radius,
                vx=bomber.vx,
                vy=self._cfg.bomb_initial_vy,
            )

    def fire_at(self, hunter: Hunter, avatar: Avatar) -> Bullet:
        """Fire one bullet from the hunter toward the avatar's current position."""
        dir_x, dir_y = direction_to(hunter.x, hunter.y, avatar.x, avatar.y)
        speed = self._cfg.bullet_speed * self._cfg.hunter_speed_multiplier
        return self._projectiles.spawn_hazard_bullet(hunter.x, hunter.y, dir_x, dir_y, speed)

    # -- damage -------------------------------------------------------------

    def remove(self, hazard: Hazard) -> None:
        if hazard in self.hazards:
            self.hazards.remove(hazard)

    def resolve_player_bullets(self, scorer: ScoreTracker) -> List[Hazard]:
        """
        Test every player bullet against every hazard.

        Each bullet hits at most one hazard and is consumed. Lethal-tier
        bullets destroy outright whatever health remains.

        Returns:
            Hazards destroyed this frame.
        """
        killed: List[Hazard] = []
        spent: List[Bullet] = []

        for bullet in self._projectiles.player_bullets:
            for hazard in self.hazards:
                if hazard in killed:
                    continue
                if not circle_collide(bullet.x, bullet.y, bullet.radius, hazard.x, hazard.y, hazard.radius):
                    continue
                spent.append(bullet)
                damage = self._projectiles.damage_for(bullet.tier)
                if hazard.take_hit(damage):
                    killed.append(hazard)
                    event = scorer.apply_kill()
                    self._events.emit(EventKind.KILL, hazard.x, hazard.y,
                                      hazard=hazard.kind.value, bonus=event.points)
                else:
                    self._events.emit(EventKind.HAZARD_HIT, hazard.x, hazard.y,
                                      hazard=hazard.kind.value, health=hazard.health)
                break

        for bullet in spent:
            self._projectiles.remove_bullet(bullet)
        self.hazards[:] = [h for h in self.hazards if h not in killed]
        return killed
