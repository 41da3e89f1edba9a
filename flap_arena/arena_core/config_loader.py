"""
Configuration Loader
====================

Loads difficulty_profiles.yaml and provides typed, validated access to every
tunable constant of a session. Each named profile is a DifficultyProfile made
of frozen per-subsystem sections.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "easy"

# Safe minimums applied when a profile would produce degenerate geometry/timing
MIN_OBSTACLE_GAP = 60.0
MIN_SPAWN_INTERVAL = 0.25
MIN_FIRE_INTERVAL = 0.05
MIN_SHOT_INTERVAL = 0.1
MIN_FRAME_DT = 0.001

COIN_TIERS = ("silver", "gold", "diamond")


@dataclass(frozen=True)
class BoardConfig:
    """Playfield geometry shared by every profile."""
    width: int
    height: int
    avatar_x_ratio: float
    avatar_width: float
    avatar_height: float


@dataclass(frozen=True)
class PhysicsConfig:
    """Avatar kinematics."""
    gravity: float
    jump_impulse: float          # Negative = upward
    max_fall_speed: float
    jump_debounce: float         # Minimum seconds between accepted jumps
    ceiling_bounce_velocity: float
    idle_hover_amplitude: float
    rotation_smoothing: float


@dataclass(frozen=True)
class ObstacleConfig:
    """Obstacle pair spawning and motion."""
    scroll_speed: float
    spawn_interval: float
    gap: float
    ground_height: float
    width: float
    min_height: float
    spawn_margin: float
    despawn_margin: float
    has_moving: bool
    moving_chance: float
    move_speed: float


@dataclass(frozen=True)
class PickupConfig:
    """Coin, shield and weapon pickup rolls."""
    has_coins: bool
    coin_spawn_chance: float
    coin_weights: Tuple[Tuple[str, float], ...]
    shield_spawn_chance: float
    weapon_spawn_chance: float
    weapon_ammo_min: int
    weapon_ammo_max: int
    pickup_radius: float
    collect_radius: float


@dataclass(frozen=True)
class WeaponConfig:
    """Player auto-fire weapon."""
    bullet_speed: float
    bullet_radius: float
    fire_intervals: Tuple[float, float, float]  # Seconds between shots per level
    elevated_damage: int

    @property
    def max_level(self) -> int:
        return len(self.fire_intervals)

    def fire_interval(self, level: int) -> float:
        """Seconds between shots at the given weapon level (1-based)."""
        index = max(1, min(level, self.max_level)) - 1
        return self.fire_intervals[index]


@dataclass(frozen=True)
class HazardConfig:
    """Hostile actor spawning and behavior."""
    has_hazards: bool
    spawn_interval: float
    missile_share: float
    drifter_size: float
    drifter_speed_factor: float
    drifter_amplitude: float
    drifter_frequency: float
    missile_size: float
    missile_speed: float
    missile_homing_gain: float
    missile_max_vertical_speed: float
    advanced_score: int
    advanced_spawn_interval: float
    advanced_min_interval: float
    advanced_interval_decay: float
    bomber_share: float
    hunter_size: float
    hunter_health: int
    hunter_entry_speed: float
    hunter_hold_ratio: float
    hunter_hold_time: float
    hunter_hover_amplitude: float
    hunter_speed_multiplier: float
    hunter_shot_interval: float
    bomber_size: float
    bomber_health: int
    bomber_speed: float
    bomber_min_altitude: float
    bomber_max_altitude: float
    bomb_interval: float
    bomb_initial_vy: float
    bomb_gravity: float
    bomb_radius: float
    bullet_speed: float
    bullet_radius: float


@dataclass(frozen=True)
class CollisionConfig:
    """Hitbox tuning."""
    hitbox_padding: float        # Shrinks the avatar AABB on every side
    hazard_contact_radius: float  # Fixed proximity radius for hazard bodies


@dataclass(frozen=True)
class ScoringConfig:
    """Score awards."""
    kill_bonus: int
    coin_values: Tuple[Tuple[str, int], ...]

    def coin_value(self, tier: str) -> int:
        for name, value in self.coin_values:
            if name == tier:
                return value
        raise ValueError(f"Unknown coin tier: {tier}")


@dataclass(frozen=True)
class EngineConfig:
    """Frame loop parameters."""
    max_frame_dt: float
    fps: int


@dataclass(frozen=True)
class DifficultyProfile:
    """
    Complete tuning for one session, loaded from YAML.

    All values are immutable; use replace() to derive a tuned copy.
    """
    name: str
    board: BoardConfig
    physics: PhysicsConfig
    obstacles: ObstacleConfig
    pickups: PickupConfig
    weapon: WeaponConfig
    hazards: HazardConfig
    collision: CollisionConfig
    scoring: ScoringConfig
    engine: EngineConfig

    @property
    def ground_y(self) -> float:
        """Y coordinate of the ground line."""
        return self.board.height - self.obstacles.ground_height

    @property
    def avatar_start(self) -> Tuple[float, float]:
        """Initial avatar position."""
        return (self.board.width * self.board.avatar_x_ratio, self.board.height / 2)

    @property
    def top_height_range(self) -> Tuple[float, float]:
        """Range of the top barrier height for a freshly spawned pair."""
        obs = self.obstacles
        low = obs.min_height
        high = self.board.height - obs.ground_height - obs.gap - obs.min_height - obs.spawn_margin
        return (low, max(low, high))

    @property
    def oscillation_range(self) -> Tuple[float, float]:
        """Bounds of top barrier height for oscillating pairs."""
        obs = self.obstacles
        low = obs.min_height
        high = self.board.height - obs.ground_height - obs.gap - obs.min_height
        return (low, max(low, high))

    def replace(self, **overrides: Any) -> "DifficultyProfile":
        """
        Derive a profile with some values changed.

        Args:
            **overrides: Section name mapped to a dict of field overrides,
                e.g. ``replace(physics={"gravity": 1200})``. ``name`` may be
                passed as a plain string.

        Returns:
            New clamped DifficultyProfile.
        """
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key == "name":
                changes[key] = str(value)
                continue
            section = getattr(self, key, None)
            if section is None or not dataclasses.is_dataclass(section):
                raise ValueError(f"Unknown profile section: {key}")
            changes[key] = dataclasses.replace(section, **value)
        return _clamp_profile(dataclasses.replace(self, **changes))


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _parse_board(data: dict) -> BoardConfig:
    return BoardConfig(
        width=int(data["width"]),
        height=int(data["height"]),
        avatar_x_ratio=float(data.get("avatar_x_ratio", 0.2)),
        avatar_width=float(data.get("avatar_width", 40)),
        avatar_height=float(data.get("avatar_height", 30)),
    )


def _parse_physics(data: dict) -> PhysicsConfig:
    return PhysicsConfig(
        gravity=float(data["gravity"]),
        jump_impulse=float(data["jump_impulse"]),
        max_fall_speed=float(data["max_fall_speed"]),
        jump_debounce=float(data.get("jump_debounce", 0.05)),
        ceiling_bounce_velocity=float(data.get("ceiling_bounce_velocity", 50)),
        idle_hover_amplitude=float(data.get("idle_hover_amplitude", 25)),
        rotation_smoothing=float(data.get("rotation_smoothing", 0.15)),
    )


def _parse_obstacles(data: dict) -> ObstacleConfig:
    return ObstacleConfig(
        scroll_speed=float(data["scroll_speed"]),
        spawn_interval=float(data["spawn_interval"]),
        gap=float(data["gap"]),
        ground_height=float(data["ground_height"]),
        width=float(data.get("width", 70)),
        min_height=float(data.get("min_height", 70)),
        spawn_margin=float(data.get("spawn_margin", 30)),
        despawn_margin=float(data.get("despawn_margin", 50)),
        has_moving=bool(data.get("has_moving", False)),
        moving_chance=float(data.get("moving_chance", 0.0)),
        move_speed=float(data.get("move_speed", 0.0)),
    )


def _parse_pickups(data: dict) -> PickupConfig:
    weights = data.get("coin_weights", {})
    return PickupConfig(
        has_coins=bool(data.get("has_coins", False)),
        coin_spawn_chance=float(data.get("coin_spawn_chance", 0.0)),
        coin_weights=tuple((str(k), float(v)) for k, v in weights.items()),
        shield_spawn_chance=float(data.get("shield_spawn_chance", 0.0)),
        weapon_spawn_chance=float(data.get("weapon_spawn_chance", 0.0)),
        weapon_ammo_min=int(data.get("weapon_ammo_min", 8)),
        weapon_ammo_max=int(data.get("weapon_ammo_max", 15)),
        pickup_radius=float(data.get("pickup_radius", 12)),
        collect_radius=float(data.get("collect_radius", 18)),
    )


def _parse_weapon(data: dict) -> WeaponConfig:
    intervals = data["fire_intervals"]
    if len(intervals) != 3:
        raise ValueError(f"weapon.fire_intervals must have 3 values, got {intervals}")
    return WeaponConfig(
        bullet_speed=float(data["bullet_speed"]),
        bullet_radius=float(data.get("bullet_radius", 5)),
        fire_intervals=tuple(float(v) for v in intervals),
        elevated_damage=int(data.get("elevated_damage", 2)),
    )


def _parse_hazards(data: dict) -> HazardConfig:
    # Every field is numeric except the feature flag; coerce by declared type
    values: Dict[str, Any] = {}
    for f in dataclasses.fields(HazardConfig):
        if f.name not in data:
            raise ValueError(f"Missing hazards.{f.name} in profile")
        raw = data[f.name]
        if f.type == "bool":
            values[f.name] = bool(raw)
        elif f.type == "int":
            values[f.name] = int(raw)
        else:
            values[f.name] = float(raw)
    return HazardConfig(**values)


def _parse_collision(data: dict) -> CollisionConfig:
    return CollisionConfig(
        hitbox_padding=float(data.get("hitbox_padding", 5)),
        hazard_contact_radius=float(data.get("hazard_contact_radius", 28)),
    )


def _parse_scoring(data: dict) -> ScoringConfig:
    values = data.get("coin_values", {"silver": 1, "gold": 3, "diamond": 5})
    return ScoringConfig(
        kill_bonus=int(data.get("kill_bonus", 3)),
        coin_values=tuple((str(k), int(v)) for k, v in values.items()),
    )


def _parse_engine(data: dict) -> EngineConfig:
    return EngineConfig(
        max_frame_dt=float(data.get("max_frame_dt", 0.033)),
        fps=int(data.get("fps", 60)),
    )


def _parse_profile(name: str, board: BoardConfig, data: dict) -> DifficultyProfile:
    return DifficultyProfile(
        name=name,
        board=board,
        physics=_parse_physics(data["physics"]),
        obstacles=_parse_obstacles(data["obstacles"]),
        pickups=_parse_pickups(data["pickups"]),
        weapon=_parse_weapon(data["weapon"]),
        hazards=_parse_hazards(data["hazards"]),
        collision=_parse_collision(data.get("collision", {})),
        scoring=_parse_scoring(data.get("scoring", {})),
        engine=_parse_engine(data.get("engine", {})),
    )


def _validate_profile(profile: DifficultyProfile) -> None:
    """Reject structurally invalid profiles."""
    tiers = tuple(name for name, _ in profile.pickups.coin_weights)
    values = tuple(name for name, _ in profile.scoring.coin_values)
    if set(tiers) != set(values):
        raise ValueError(
            f"[{profile.name}] coin_weights tiers {tiers} must match coin_values tiers {values}"
        )
    if profile.pickups.has_coins and sum(w for _, w in profile.pickups.coin_weights) <= 0:
        raise ValueError(f"[{profile.name}] coin_weights must have a positive total")
    if profile.pickups.weapon_ammo_min > profile.pickups.weapon_ammo_max:
        raise ValueError(
            f"[{profile.name}] weapon_ammo_min ({profile.pickups.weapon_ammo_min}) exceeds "
            f"weapon_ammo_max ({profile.pickups.weapon_ammo_max})"
        )
    if profile.pickups.weapon_ammo_max < 1:
        raise ValueError(f"[{profile.name}] weapon_ammo_max must be at least 1")
    if profile.hazards.bomber_min_altitude > profile.hazards.bomber_max_altitude:
        raise ValueError(f"[{profile.name}] bomber_min_altitude exceeds bomber_max_altitude")
    if profile.obstacles.ground_height >= profile.board.height:
        raise ValueError(f"[{profile.name}] ground_height must be smaller than board height")


def _at_least(profile_name: str, label: str, value: float, minimum: float) -> float:
    if value < minimum:
        logger.warning("[%s] %s=%s below safe minimum, clamped to %s",
                       profile_name, label, value, minimum)
        return minimum
    return value


def _probability(profile_name: str, label: str, value: float) -> float:
    clamped = max(0.0, min(1.0, value))
    if clamped != value:
        logger.warning("[%s] %s=%s outside [0, 1], clamped to %s",
                       profile_name, label, value, clamped)
    return clamped


def _clamp_profile(profile: DifficultyProfile) -> DifficultyProfile:
    """Clamp degenerate values to safe minimums instead of failing."""
    name = profile.name
    obs = profile.obstacles
    obstacles = dataclasses.replace(
        obs,
        gap=_at_least(name, "obstacles.gap", obs.gap, MIN_OBSTACLE_GAP),
        spawn_interval=_at_least(name, "obstacles.spawn_interval", obs.spawn_interval, MIN_SPAWN_INTERVAL),
        moving_chance=_probability(name, "obstacles.moving_chance", obs.moving_chance),
    )

    pk = profile.pickups
    pickups = dataclasses.replace(
        pk,
        coin_spawn_chance=_probability(name, "pickups.coin_spawn_chance", pk.coin_spawn_chance),
        shield_spawn_chance=_probability(name, "pickups.shield_spawn_chance", pk.shield_spawn_chance),
        weapon_spawn_chance=_probability(name, "pickups.weapon_spawn_chance", pk.weapon_spawn_chance),
        weapon_ammo_min=int(_at_least(name, "pickups.weapon_ammo_min", pk.weapon_ammo_min, 1)),
    )

    wp = profile.weapon
    weapon = dataclasses.replace(
        wp,
        fire_intervals=tuple(
            _at_least(name, f"weapon.fire_intervals[{i}]", v, MIN_FIRE_INTERVAL)
            for i, v in enumerate(wp.fire_intervals)
        ),
    )

    hz = profile.hazards
    advanced_min = _at_least(name, "hazards.advanced_min_interval", hz.advanced_min_interval, MIN_SPAWN_INTERVAL)
    hazards = dataclasses.replace(
        hz,
        spawn_interval=_at_least(name, "hazards.spawn_interval", hz.spawn_interval, MIN_SPAWN_INTERVAL),
        advanced_min_interval=advanced_min,
        advanced_spawn_interval=_at_least(
            name, "hazards.advanced_spawn_interval", hz.advanced_spawn_interval, advanced_min
        ),
        hunter_shot_interval=_at_least(name, "hazards.hunter_shot_interval", hz.hunter_shot_interval, MIN_SHOT_INTERVAL),
        bomb_interval=_at_least(name, "hazards.bomb_interval", hz.bomb_interval, MIN_SHOT_INTERVAL),
        missile_share=_probability(name, "hazards.missile_share", hz.missile_share),
        bomber_share=_probability(name, "hazards.bomber_share", hz.bomber_share),
        hunter_health=int(_at_least(name, "hazards.hunter_health", hz.hunter_health, 1)),
        bomber_health=int(_at_least(name, "hazards.bomber_health", hz.bomber_health, 1)),
    )

    eng = profile.engine
    engine = dataclasses.replace(
        eng,
        max_frame_dt=_at_least(name, "engine.max_frame_dt", eng.max_frame_dt, MIN_FRAME_DT),
        fps=int(_at_least(name, "engine.fps", eng.fps, 1)),
    )

    return dataclasses.replace(
        profile,
        obstacles=obstacles,
        pickups=pickups,
        weapon=weapon,
        hazards=hazards,
        engine=engine,
    )


def _default_path() -> str:
    return os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "difficulty_profiles.yaml"
    )


def load_profiles(config_path: Optional[str] = None) -> Dict[str, DifficultyProfile]:
    """
    Load, validate and clamp every profile in the YAML file.

    Args:
        config_path: Path to difficulty_profiles.yaml. If None, uses default location.

    Returns:
        Mapping of profile name to DifficultyProfile.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = _default_path()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    board = _parse_board(raw["board"])
    defaults = raw.get("defaults", {})
    profiles_data = raw.get("profiles") or {}
    if not profiles_data:
        raise ValueError(f"No profiles defined in {config_path}")

    profiles: Dict[str, DifficultyProfile] = {}
    for name, override in profiles_data.items():
        merged = _deep_merge(defaults, override or {})
        profile = _parse_profile(str(name), board, merged)
        _validate_profile(profile)
        profiles[str(name)] = _clamp_profile(profile)

    logger.debug("Loaded %d difficulty profiles from %s", len(profiles), config_path)
    return profiles


def load_profile(name: str = DEFAULT_PROFILE, config_path: Optional[str] = None) -> DifficultyProfile:
    """
    Load a single named profile.

    Raises:
        ValueError: If no profile with that name exists.
    """
    profiles = load_profiles(config_path)
    if name not in profiles:
        raise ValueError(f"Unknown difficulty profile '{name}', expected one of {sorted(profiles)}")
    return profiles[name]


# Module-level cache for convenience
_cached_profiles: Optional[Dict[str, DifficultyProfile]] = None


def get_profile(name: str = DEFAULT_PROFILE) -> DifficultyProfile:
    """Get a cached profile, loading the default file if necessary."""
    global _cached_profiles
    if _cached_profiles is None:
        _cached_profiles = load_profiles()
    if name not in _cached_profiles:
        raise ValueError(f"Unknown difficulty profile '{name}', expected one of {sorted(_cached_profiles)}")
    return _cached_profiles[name]


def reload_profiles(config_path: Optional[str] = None) -> Dict[str, DifficultyProfile]:
    """Reload the profile cache (useful for testing)."""
    global _cached_profiles
    _cached_profiles = load_profiles(config_path)
    return _cached_profiles
