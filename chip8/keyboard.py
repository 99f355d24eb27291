"""Keypad snapshots, host keyboard layouts and scripted input sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .constants import NUM_KEYS
from .errors import ConfigError

#   CHIP-8 keypad        conventional host keys
#   1 2 3 C              1 2 3 4
#   4 5 6 D              Q W E R
#   7 8 9 E              A S D F
#   A 0 B F              Z X C V
_HOST_GRID = "1234QWERASDFZXCV"
_COSMAC_GRID = (0x1, 0x2, 0x3, 0xC, 0x4, 0x5, 0x6, 0xD,
                0x7, 0x8, 0x9, 0xE, 0xA, 0x0, 0xB, 0xF)


@dataclass(frozen=True)
class KeypadState:
    """Immutable 16-entry key-down snapshot, index = key code 0x0-0xF."""

    keys: Tuple[bool, ...] = (False,) * NUM_KEYS

    def __post_init__(self) -> None:
        if len(self.keys) != NUM_KEYS:
            raise ValueError(f"Keypad state needs {NUM_KEYS} entries, got {len(self.keys)}")

    @classmethod
    def from_pressed(cls, pressed: Iterable[int]) -> "KeypadState":
        down = [False] * NUM_KEYS
        for key in pressed:
            if not 0 <= key < NUM_KEYS:
                raise ValueError(f"Invalid key code: {key}")
            down[key] = True
        return cls(tuple(down))

    def is_pressed(self, key: int) -> bool:
        return self.keys[key & 0xF]

    def lowest_pressed(self) -> Optional[int]:
        for index, down in enumerate(self.keys):
            if down:
                return index
        return None

    def pressed(self) -> Tuple[int, ...]:
        return tuple(i for i, down in enumerate(self.keys) if down)

    def any_pressed(self) -> bool:
        return any(self.keys)


NO_KEYS = KeypadState()


@dataclass(frozen=True)
class KeypadLayout:
    """Mapping from host key names to CHIP-8 key codes."""

    name: str
    mapping: Dict[str, int]

    def key_code(self, host_key: str) -> int:
        try:
            return self.mapping[host_key.upper()]
        except KeyError:
            raise KeyError(f"Key {host_key!r} is not mapped in layout {self.name!r}") from None


def _layout(name: str, codes: Iterable[int]) -> KeypadLayout:
    return KeypadLayout(name, dict(zip(_HOST_GRID, codes)))


LAYOUTS: Dict[str, KeypadLayout] = {
    "cosmac": _layout("cosmac", _COSMAC_GRID),
    # Host keys in reading order map to 0x0..0xF.
    "sequential": _layout("sequential", range(NUM_KEYS)),
}


def get_layout(name: str) -> KeypadLayout:
    try:
        return LAYOUTS[name]
    except KeyError:
        raise ConfigError(
            f"Unknown keypad layout {name!r} (expected one of: {sorted(LAYOUTS)})"
        ) from None


def parse_key(token: str, layout: KeypadLayout) -> int:
    """Resolve a key token: ``0x5`` style hex codes or a host key name."""
    token = token.strip()
    if token.lower().startswith("0x"):
        code = int(token, 16)
        if not 0 <= code < NUM_KEYS:
            raise ValueError(f"Invalid key code: {token}")
        return code
    return layout.key_code(token)


class NullInput:
    """Input source with every key permanently up."""

    def poll(self) -> KeypadState:
        return NO_KEYS


@dataclass(frozen=True)
class KeyHold:
    """Key ``key`` held down from tick ``start`` up to but excluding ``end``."""

    key: int
    start: int
    end: Optional[int] = None

    def active(self, tick: int) -> bool:
        return tick >= self.start and (self.end is None or tick < self.end)


@dataclass
class KeySchedule:
    holds: List[KeyHold] = field(default_factory=list)

    def hold(self, key: int, start: int, end: Optional[int] = None) -> "KeySchedule":
        self.holds.append(KeyHold(key, start, end))
        return self

    def state_at(self, tick: int) -> KeypadState:
        return KeypadState.from_pressed(h.key for h in self.holds if h.active(tick))

    @classmethod
    def parse(cls, specs: Iterable[str], layout: KeypadLayout) -> "KeySchedule":
        """Build a schedule from ``KEY:START[:END]`` strings."""
        schedule = cls()
        for spec in specs:
            parts = spec.split(":")
            if len(parts) not in (2, 3):
                raise ValueError(f"Expected KEY:START[:END], got {spec!r}")
            key = parse_key(parts[0], layout)
            start = int(parts[1], 0)
            end = int(parts[2], 0) if len(parts) == 3 else None
            if end is not None and end <= start:
                raise ValueError(f"Hold {spec!r} ends before it starts")
            schedule.hold(key, start, end)
        return schedule


class ScriptedInput:
    """Replays a ``KeySchedule``; each ``poll`` advances one tick."""

    def __init__(self, schedule: Optional[KeySchedule] = None) -> None:
        self.schedule = schedule or KeySchedule()
        self.tick = 0

    def poll(self) -> KeypadState:
        state = self.schedule.state_at(self.tick)
        self.tick += 1
        return state


__all__ = [
    "KeyHold",
    "KeySchedule",
    "KeypadLayout",
    "KeypadState",
    "LAYOUTS",
    "NO_KEYS",
    "NullInput",
    "ScriptedInput",
    "get_layout",
    "parse_key",
]
