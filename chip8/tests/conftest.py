"""Shared pytest fixtures for CHIP-8 core tests."""

from __future__ import annotations

from typing import Callable, Optional

import pytest

from chip8 import Chip8Emulator, MachineConfig
from chip8.decoder import encode_words
from chip8.tracing import TraceDispatcher

EmulatorFactory = Callable[..., Chip8Emulator]


@pytest.fixture
def make_emulator() -> EmulatorFactory:
    """Build an emulator from instruction words, optionally followed by raw data."""

    def _make(
        *words: int,
        data: bytes = b"",
        seed: int = 1234,
        config: Optional[MachineConfig] = None,
        trace: Optional[TraceDispatcher] = None,
    ) -> Chip8Emulator:
        cfg = config or MachineConfig(seed=seed)
        return Chip8Emulator(encode_words(words) + data, cfg, trace=trace)

    return _make
