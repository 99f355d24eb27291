"""Machine configuration for the CHIP-8 interpreter."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional
import json
from pathlib import Path

from ..errors import ConfigError
from ..keyboard import LAYOUTS


def _is_int(value: Any) -> bool:
    # bool is an int subclass; JSON true/false must not pass as a number.
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class MachineConfig:
    """Interpreter settings; the 60 Hz cadence itself is fixed."""

    name: str = "CHIP-8"
    seed: Optional[int] = None  # RNG seed for Cxkk; None draws from OS entropy
    add_to_i_sets_vf: bool = False  # Fx1E sets VF on I overflow past 0xFFF
    keypad_layout: str = "cosmac"
    display_zoom: int = 16  # host pixels per CHIP-8 pixel
    throttle: bool = True  # sleep between ticks to hold 60 Hz

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        for name in ("name", "keypad_layout"):
            if not isinstance(getattr(self, name), str):
                raise ConfigError(f"{name} must be a string, got {getattr(self, name)!r}")
        for name in ("add_to_i_sets_vf", "throttle"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be true or false, got {getattr(self, name)!r}")
        if self.keypad_layout not in LAYOUTS:
            raise ConfigError(
                f"Unknown keypad layout {self.keypad_layout!r} "
                f"(expected one of: {sorted(LAYOUTS)})"
            )
        if not _is_int(self.display_zoom) or self.display_zoom < 1:
            raise ConfigError(f"display_zoom must be a positive integer, got {self.display_zoom!r}")
        if self.seed is not None and (not _is_int(self.seed) or self.seed < 0):
            raise ConfigError(f"seed must be a non-negative integer, got {self.seed!r}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MachineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save configuration to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str | Path) -> "MachineConfig":
        """Load configuration from JSON file."""
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Cannot read configuration {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration {path} must contain a JSON object")
        return cls.from_dict(data)

    @classmethod
    def for_profile(cls, profile: str) -> "MachineConfig":
        """Get a named preset. Unknown names fall back to ``default``."""
        configs = {
            "default": cls(),
            # Some legacy ROMs rely on Fx1E reporting overflow in VF.
            "legacy-amiga": cls(name="CHIP-8 (Amiga Fx1E)", add_to_i_sets_vf=True),
            "original-keys": cls(name="CHIP-8 (sequential keys)", keypad_layout="sequential"),
        }
        return configs.get(profile, configs["default"])


__all__ = ["MachineConfig"]
