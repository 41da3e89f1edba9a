"""
Entities
========

Plain dataclasses for everything the simulation owns: the avatar, obstacle
pairs, pickups, hazards and projectiles. Each hazard kind is its own type
carrying only the fields its behavior needs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import ClassVar, Optional, Tuple


class SessionStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class ShieldLevel(IntEnum):
    NONE = 0
    BASIC = 1      # Absorbs a single hit
    ENHANCED = 2   # Absorbs up to ENHANCED_SHIELD_HITS hits


ENHANCED_SHIELD_HITS = 3
MAX_WEAPON_LEVEL = 3


class CoinTier(str, Enum):
    SILVER = "silver"
    GOLD = "gold"
    DIAMOND = "diamond"


class BulletTier(IntEnum):
    NORMAL = 1
    ELEVATED = 2
    LETHAL = 3


class HazardKind(str, Enum):
    DRIFTER = "drifter"
    MISSILE = "missile"
    HUNTER = "hunter"
    BOMBER = "bomber"


@dataclass
class Avatar:
    """The player-controlled actor. Position is the hitbox centre."""
    x: float
    y: float
    width: float
    height: float
    velocity: float = 0.0
    rotation: float = 0.0  # Degrees, positive = nose down
    shield_level: ShieldLevel = ShieldLevel.NONE
    shield_hits: int = 0
    weapon_level: int = 0
    weapon_ammo: int = 0
    fire_timer: float = 0.0

    @property
    def has_shield(self) -> bool:
        return self.shield_level != ShieldLevel.NONE

    @property
    def has_weapon(self) -> bool:
        return self.weapon_level > 0 and self.weapon_ammo > 0

    @property
    def top(self) -> float:
        return self.y - self.height / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height / 2

    def hitbox(self, padding: float = 0.0) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) shrunk by padding on every side."""
        return (
            self.x - self.width / 2 + padding,
            self.y - self.height / 2 + padding,
            self.x + self.width / 2 - padding,
            self.y + self.height / 2 - padding,
        )


@dataclass
class ObstaclePair:
    """
    A top and bottom barrier separated by a vertical gap.

    bottom_y is always derived from top_height, so the gap is preserved by
    construction through every oscillation step.
    """
    x: float
    top_height: float
    gap: float
    width: float
    passed: bool = False
    breached: bool = False  # A shield already absorbed contact with this pair
    moving: bool = False
    direction: float = 1.0
    move_speed: float = 0.0
    original_top_height: Optional[float] = None

    @property
    def bottom_y(self) -> float:
        return self.top_height + self.gap

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def gap_center_y(self) -> float:
        return self.top_height + self.gap / 2


@dataclass
class Pickup:
    """Base collectible."""
    kind: ClassVar[str] = "pickup"

    x: float
    y: float
    radius: float
    collected: bool = False
    # Pair the pickup rides with while that pair oscillates
    anchor: Optional[ObstaclePair] = field(default=None, repr=False, compare=False)


@dataclass
class Coin(Pickup):
    kind: ClassVar[str] = "coin"

    tier: CoinTier = CoinTier.SILVER


@dataclass
class ShieldPickup(Pickup):
    kind: ClassVar[str] = "shield"


@dataclass
class WeaponPickup(Pickup):
    kind: ClassVar[str] = "weapon"

    ammo: int = 10


@dataclass
class Hazard:
    """Base hostile actor. Size is the side of its square body."""
    kind: ClassVar[HazardKind]
    max_health: ClassVar[Optional[int]] = None

    x: float
    y: float
    vx: float
    vy: float
    size: float

    @property
    def radius(self) -> float:
        return self.size / 2

    @property
    def health(self) -> Optional[int]:
        return None

    def take_hit(self, damage: Optional[int]) -> bool:
        """
        Apply one bullet hit.

        Args:
            damage: Damage points, or None for an instantly lethal hit.

        Returns:
            True if the hazard is destroyed.
        """
        return True


@dataclass
class Drifter(Hazard):
    """Straight leftward flyer with a sinusoidal vertical wobble."""
    kind: ClassVar[HazardKind] = HazardKind.DRIFTER

    base_y: float = 0.0
    phase: float = 0.0


@dataclass
class Missile(Hazard):
    """Fast flyer that softly homes on the avatar's altitude."""
    kind: ClassVar[HazardKind] = HazardKind.MISSILE


@dataclass
class _Armored(Hazard):
    hp: int = 1

    @property
    def health(self) -> Optional[int]:
        return self.hp

    def take_hit(self, damage: Optional[int]) -> bool:
        if damage is None:
            self.hp = 0
        else:
            self.hp = max(0, self.hp - damage)
        return self.hp == 0


@dataclass
class Hunter(_Armored):
    """Holds station near the right edge and fires aimed bullets."""
    kind: ClassVar[HazardKind] = HazardKind.HUNTER

    hold_x: float = 0.0
    base_y: float = 0.0
    shot_interval: float = 2.5
    shot_timer: float = 0.0
    hover_phase: float = 0.0
    hold_timer: float = 0.0
    retreating: bool = False


@dataclass
class Bomber(_Armored):
    """Crosses at altitude and drops gravity bombs."""
    kind: ClassVar[HazardKind] = HazardKind.BOMBER

    bomb_interval: float = 1.8
    bomb_timer: float = 0.0


@dataclass
class Bullet:
    x: float
    y: float
    vx: float
    vy: float
    radius: float
    from_player: bool
    tier: BulletTier = BulletTier.NORMAL


@dataclass
class Bomb:
    x: float
    y: float
    vx: float
    vy: float
    radius: float
