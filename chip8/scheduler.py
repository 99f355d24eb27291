"""Fixed-cadence cycle scheduler for the CHIP-8 emulator."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .constants import TICK_HZ
from .emulator import Chip8Emulator
from .errors import Chip8Error
from .interfaces import Display, InputSource
from .keyboard import NullInput

logger = logging.getLogger(__name__)

TICK_PERIOD = 1.0 / TICK_HZ


@dataclass(frozen=True)
class RunResult:
    """Outcome of a scheduler run."""

    ticks: int
    instructions: int
    halted: bool
    error: Optional[Chip8Error] = None


@dataclass
class CycleScheduler:
    """Drives one emulator tick per 1/60 s.

    Each tick polls the input source, runs the emulator tick (cycle plus
    timer decrement) and hands a read-only frame to the display. With
    ``throttle`` off the loop runs as fast as possible, which tests and
    headless runs rely on.
    """

    emulator: Chip8Emulator
    display: Optional[Display] = None
    input_source: InputSource = field(default_factory=NullInput)
    throttle: bool = True
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        self._stop_requested = False

    def stop(self) -> None:
        """Ask a running loop to return after the current tick."""
        self._stop_requested = True

    def run_tick(self) -> None:
        keypad = self.input_source.poll()
        try:
            self.emulator.tick(keypad)
        finally:
            # Present even on a fatal tick so the last frame stays visible.
            if self.display is not None:
                self.display.present(self.emulator.framebuffer.snapshot())

    def run(self, max_ticks: Optional[int] = None) -> RunResult:
        """Tick until ``max_ticks``, a halt, or ``stop()``."""
        self._stop_requested = False
        start_ticks = self.emulator.tick_count
        start_instructions = self.emulator.instruction_count
        deadline = self.clock() + TICK_PERIOD
        error: Optional[Chip8Error] = None

        logger.info("Scheduler started (throttle=%s, max_ticks=%s)", self.throttle, max_ticks)
        while not self._stop_requested and not self.emulator.halted:
            if max_ticks is not None and self.emulator.tick_count - start_ticks >= max_ticks:
                break
            try:
                self.run_tick()
            except Chip8Error as exc:
                error = exc
                break
            if self.throttle:
                deadline = self._wait_until(deadline)

        ticks = self.emulator.tick_count - start_ticks
        logger.info("Scheduler stopped after %d ticks", ticks)
        return RunResult(
            ticks=ticks,
            instructions=self.emulator.instruction_count - start_instructions,
            halted=self.emulator.halted,
            error=error,
        )

    def _wait_until(self, deadline: float) -> float:
        remaining = deadline - self.clock()
        if remaining > 0:
            self.sleep(remaining)
            return deadline + TICK_PERIOD
        # More than a tick behind: resynchronise instead of bursting.
        if -remaining > TICK_PERIOD:
            return self.clock() + TICK_PERIOD
        return deadline + TICK_PERIOD


__all__ = ["CycleScheduler", "RunResult", "TICK_PERIOD"]
