"""Data models and dataclasses."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from errors import ConfigurationInvalid


@dataclass(frozen=True)
class HttpAction:
    """Device action performed with an HTTP GET."""
    url: str

    def __str__(self) -> str:
        return f"GET {self.url}"


@dataclass(frozen=True)
class MqttAction:
    """Device action performed with an MQTT publish."""
    topic: str
    payload: bytes

    def __str__(self) -> str:
        return f"PUBLISH {self.topic} {self.payload!r}"


Action = Union[HttpAction, MqttAction]


@dataclass(frozen=True)
class Level:
    """A discrete actuator position."""
    value: int
    action: Action


class LevelTable:
    """Levels of one accessory, sorted ascending by value.

    Sorting is stable, so levels sharing a value keep their configuration
    order. The table is read-only once built.
    """

    def __init__(self, levels: Iterable[Level]):
        self._levels: Tuple[Level, ...] = tuple(sorted(levels, key=lambda lv: lv.value))
        if not self._levels:
            raise ConfigurationInvalid("Level table must contain at least one level")

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[int, Action]]) -> "LevelTable":
        return cls(Level(value=value, action=action) for value, action in pairs)

    def __len__(self) -> int:
        return len(self._levels)

    def __getitem__(self, index: int) -> Level:
        return self._levels[index]

    def __iter__(self) -> Iterator[Level]:
        return iter(self._levels)

    def values(self) -> List[int]:
        return [lv.value for lv in self._levels]

    def __repr__(self) -> str:
        return f"LevelTable({self.values()})"


@dataclass(frozen=True)
class PowerActions:
    """Dedicated on/off actions; either may be absent except on switch lights."""
    on: Optional[Action] = None
    off: Optional[Action] = None


@dataclass(frozen=True)
class ToggleSpec:
    """A single-actuator device cycling through level_count stops (off included)."""
    level_count: int
    ascending: bool
    pulse_action: Action
    settle_delay: float

    def __post_init__(self):
        if self.level_count < 1:
            raise ConfigurationInvalid(f"level_count must be >= 1, got {self.level_count}")
        if self.settle_delay < 0:
            raise ConfigurationInvalid(f"settle_delay must be >= 0, got {self.settle_delay}")


@dataclass
class AccessoryRuntimeState:
    """Mutable state of one accessory, owned by its controller."""
    power: bool
    current_value: int
    current_toggle_index: Optional[int] = None  # toggle devices only


@dataclass
class AccessoryConfig:
    """One configured accessory."""
    name: str
    kind: str  # "fan" | "basic_light" | "toggle_light" | "switch_light"
    manufacturer: str
    model: str
    serial: str
    default_power_on: bool
    default_value: int
    levels: Optional[LevelTable] = None  # fans and basic lights
    toggle: Optional[ToggleSpec] = None  # toggle lights
    power: PowerActions = field(default_factory=PowerActions)


@dataclass
class MqttSettings:
    """MQTT broker connection settings."""
    host: str
    port: int
    username: Optional[str] = None
    password: Optional[str] = None
    client_id: str = ""


@dataclass
class BridgeConfig:
    """Whole bridge configuration."""
    name: str
    port: int
    pincode: str
    persist_file: str
    http_timeout: float
    mqtt: Optional[MqttSettings] = None
    accessories: List[AccessoryConfig] = field(default_factory=list)
