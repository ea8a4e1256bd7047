"""Game data models"""
import time
from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, List, Any

from .config import CONFIG


ACTION_CURRENCY_GAIN = "currency_gain"
ACTION_PET_STAT_UPDATE = "pet_stat_update"
ACTION_ITEM_ADD = "item_add"

ACTION_KINDS = (ACTION_CURRENCY_GAIN, ACTION_PET_STAT_UPDATE, ACTION_ITEM_ADD)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Egg:
    """Egg offered on the selection screen. Immutable once selected."""
    id: str
    name: str
    species: str
    rarity: str = "Common"
    description: str = ""
    emoji: str = ""
    gradient: str = ""
    bonuses: Dict[str, int] = field(default_factory=dict)

    def bonus(self, stat: str) -> int:
        """Bonus the egg grants to a stat (0 when it does not boost it)"""
        return self.bonuses.get(stat, 0)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Egg":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            species=data["species"],
            rarity=data.get("rarity", "Common"),
            description=data.get("description", ""),
            emoji=data.get("emoji", ""),
            gradient=data.get("gradient", ""),
            bonuses=dict(data.get("bonuses", {})),
        )


EGGS: Dict[str, Egg] = {
    egg_data["id"]: Egg.from_dict(egg_data) for egg_data in CONFIG["EGGS"]
}


@dataclass(frozen=True)
class IncubationRecord:
    """
    An egg being incubated for one user.

    The deadline is always started_at + duration_ms; remaining time is derived
    from it and the wall clock, never from a countdown.
    """
    egg: Egg
    user_id: str
    started_at: int  # Epoch ms when the egg was selected
    duration_ms: int = CONFIG["INCUBATION_DURATION_MS"]
    hatching_started_at: Optional[int] = None  # Epoch ms when hatching began

    @property
    def deadline(self) -> int:
        return self.started_at + self.duration_ms

    @property
    def is_hatching(self) -> bool:
        return self.hatching_started_at is not None

    def remaining(self, current_ms: int) -> int:
        """Milliseconds until the deadline (never negative)"""
        return max(0, self.deadline - current_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "egg": self.egg.to_dict(),
            "user_id": self.user_id,
            "started_at": self.started_at,
            "duration_ms": self.duration_ms,
            "hatching_started_at": self.hatching_started_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IncubationRecord":
        return cls(
            egg=Egg.from_dict(data["egg"]),
            user_id=data["user_id"],
            started_at=int(data["started_at"]),
            duration_ms=int(data.get("duration_ms", CONFIG["INCUBATION_DURATION_MS"])),
            hatching_started_at=data.get("hatching_started_at"),
        )


@dataclass
class PendingMutation:
    """A state change awaiting validation and persistence. Never saved locally."""
    kind: str
    payload: Dict[str, Any] = field(default_factory=dict)


PET_STATS = (
    "happiness", "health", "hunger",
    "strength", "dexterity", "intelligence", "speed",
    "attack", "defense", "precision", "evasion", "luck",
)


@dataclass
class Pet:
    """Pet data model"""
    name: str
    species: str
    owner_id: str
    style: str = "Default"
    personality: str = "Sanguine"
    happiness: int = 0
    health: int = 0
    hunger: int = 0
    strength: int = 0
    dexterity: int = 0
    intelligence: int = 0
    speed: int = 0
    attack: int = 0
    defense: int = 0
    precision: int = 0
    evasion: int = 0
    luck: int = 0
    level: int = 1
    conditions: List[str] = field(default_factory=list)
    equipment: Dict[str, Any] = field(default_factory=dict)
    is_alive: bool = True
    is_active: bool = True
    id: Optional[str] = None  # Assigned by the backend

    def stats(self) -> Dict[str, int]:
        """Numeric stats keyed by name"""
        return {stat: getattr(self, stat) for stat in PET_STATS}

    def to_record(self) -> Dict[str, Any]:
        """Backend row for this pet (without the id when unassigned)"""
        record = asdict(self)
        if record["id"] is None:
            del record["id"]
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Pet":
        known = {name for name in cls.__dataclass_fields__}
        return cls(**{key: value for key, value in record.items() if key in known})


@dataclass
class WorldPoint:
    """Interactive point on the world map, handed across a screen boundary"""
    id: str
    name: str
    x: float
    y: float
    description: str = ""
    icon: str = ""
    glow_color: str = ""
    image_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorldPoint":
        known = {name for name in cls.__dataclass_fields__}
        return cls(**{key: value for key, value in data.items() if key in known})


WORLD_POINTS: Dict[str, WorldPoint] = {
    point_data["id"]: WorldPoint.from_dict(point_data) for point_data in CONFIG["WORLD_POINTS"]
}


@dataclass
class Notification:
    """User-facing notification entry"""
    type: str  # success, error, info
    title: str
    message: str
    is_read: bool = False
    created_at: int = field(default_factory=now_ms)
