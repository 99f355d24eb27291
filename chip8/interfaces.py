"""Narrow collaborator interfaces injected into the cycle scheduler."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import numpy as np

if TYPE_CHECKING:
    from .keyboard import KeypadState


class Display(Protocol):
    """Consumes a read-only ``(32, 64)`` boolean frame once per tick."""

    def present(self, frame: np.ndarray) -> None: ...


class InputSource(Protocol):
    """Supplies the 16-key snapshot used for the coming tick."""

    def poll(self) -> "KeypadState": ...


__all__ = ["Display", "InputSource"]
