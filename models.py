"""
Domain models for the Hotkey Auto Clicker application.
Each class follows the Single Responsibility Principle (SRP).
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Tuple, Dict, Any, Optional


DEFAULT_INTERVAL_MS = 100
MIN_INTERVAL_MS = 1

# Raw key codes for identifiers that global hooks do not always name symbolically.
RAW_KEY_CODES: Dict[str, int] = {
    "0": 48,
    "1": 49,
    "2": 50,
    "3": 51,
    "4": 52,
    "5": 53,
    "6": 54,
    "7": 55,
    "8": 56,
    "9": 57,
    "esc": 27,
}

_KEY_NAME_ALIASES: Dict[str, str] = {
    "escape": "esc",
}


@dataclass(frozen=True)
class ClickPosition:
    """Represents the screen position where clicks should occur."""
    x: int
    y: int

    def to_tuple(self) -> Tuple[int, int]:
        """Returns position as a tuple for compatibility with mouse libraries."""
        return (self.x, self.y)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


@dataclass(frozen=True)
class KeyEvent:
    """A single event delivered by the global keyboard hook."""
    name: Optional[str]
    raw_code: Optional[int] = None
    is_press_down: bool = True


@dataclass(frozen=True)
class KeyIdentifier:
    """
    A key bound to an action.

    Matches an event by symbolic name (case-insensitive) or, for keys the
    platform may only report by code, by raw key code.
    """
    name: str

    def __post_init__(self):
        if not self.name:
            raise ValueError("Key identifier cannot be empty")
        normalized = self.name.lower()
        object.__setattr__(self, "name", _KEY_NAME_ALIASES.get(normalized, normalized))

    @property
    def raw_code(self) -> Optional[int]:
        return RAW_KEY_CODES.get(self.name)

    def matches(self, event: KeyEvent) -> bool:
        if event.name:
            event_name = event.name.lower()
            return _KEY_NAME_ALIASES.get(event_name, event_name) == self.name

        # Raw codes are platform specific; only trust them for unnamed events.
        raw_code = self.raw_code
        return raw_code is not None and event.raw_code == raw_code

    def __str__(self) -> str:
        return self.name.upper()


ESCAPE_KEY = KeyIdentifier("esc")


@dataclass(frozen=True)
class KeyBindings:
    """User-configurable hotkeys. Each binding is a single character."""
    start: str = "1"
    stop: str = "2"
    exit: str = "3"
    update_position: str = "4"

    def __post_init__(self):
        seen = set()
        for action, key in self.as_dict().items():
            if not isinstance(key, str) or len(key) != 1 or key.isspace():
                raise ValueError(f"Key for '{action}' must be a single character, got {key!r}")
            lowered = key.lower()
            if lowered in seen:
                raise ValueError(f"Key '{key}' is bound to more than one action")
            seen.add(lowered)

    def as_dict(self) -> Dict[str, str]:
        return {
            "start": self.start,
            "stop": self.stop,
            "exit": self.exit,
            "updatePosition": self.update_position,
        }


@dataclass(frozen=True)
class ClickerConfig:
    """
    Click interval and hotkey bindings.

    SRP: This class encapsulates all configuration-related logic
    and validation.
    """
    interval_ms: int = DEFAULT_INTERVAL_MS
    keys: KeyBindings = field(default_factory=KeyBindings)

    def __post_init__(self):
        """Validate configuration parameters."""
        if isinstance(self.interval_ms, bool) or not isinstance(self.interval_ms, int):
            raise ValueError("Click interval must be an integer number of milliseconds")

        if self.interval_ms < MIN_INTERVAL_MS:
            raise ValueError("Click interval must be positive")

    def get_interval_seconds(self) -> float:
        return self.interval_ms / 1000.0

    def clicks_per_second(self) -> float:
        """Approximate click rate; real cadence is bounded by the OS timer resolution."""
        return 1000.0 / self.interval_ms

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the configuration for JSON storage."""
        return {
            "clickInterval": self.interval_ms,
            "keys": self.keys.as_dict(),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ClickerConfig":
        """Create a configuration from its JSON dictionary. Missing fields take defaults."""
        defaults = KeyBindings()
        keys_data = data.get("keys") or {}
        if not isinstance(keys_data, dict):
            raise ValueError("'keys' must be an object")

        interval_raw = data.get("clickInterval", DEFAULT_INTERVAL_MS)
        if isinstance(interval_raw, float) and interval_raw.is_integer():
            interval_raw = int(interval_raw)

        return ClickerConfig(
            interval_ms=interval_raw,
            keys=KeyBindings(
                start=str(keys_data.get("start") or defaults.start),
                stop=str(keys_data.get("stop") or defaults.stop),
                exit=str(keys_data.get("exit") or defaults.exit),
                update_position=str(keys_data.get("updatePosition") or defaults.update_position),
            ),
        )


class SessionState(Enum):
    """Lifecycle states of a clicking session."""
    IDLE = "idle"
    LISTENING = "listening"
    CLICKING = "clicking"


class SessionEvent(Enum):
    """Status notifications emitted toward the presentation layer."""
    SESSION_LISTENING = "session_listening"
    CLICKING_STARTED = "clicking_started"
    CLICKING_STOPPED = "clicking_stopped"
