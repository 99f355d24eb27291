"""Canonical machine state snapshots and diff utilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .emulator import Chip8Emulator


@dataclass(frozen=True)
class CPUState:
    """Program counter, registers and execution mode."""

    pc: int
    v: Tuple[int, ...]
    i: int
    mode: str
    await_register: Optional[int]
    instruction_count: int


@dataclass(frozen=True)
class StackState:
    entries: Tuple[int, ...]


@dataclass(frozen=True)
class TimerState:
    delay: int
    sound: int


@dataclass(frozen=True)
class MachineSnapshot:
    """Composite immutable snapshot of the machine."""

    cpu: CPUState
    stack: StackState
    timers: TimerState
    memory: bytes
    display: bytes
    tick: int


@dataclass(frozen=True)
class FieldDiff:
    """Difference for a single named field."""

    name: str
    before: object
    after: object


@dataclass(frozen=True)
class StateDiff:
    """Aggregated differences between two snapshots."""

    cpu: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    stack: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    timers: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    memory_addresses: Tuple[int, ...] = field(default_factory=tuple)
    display_changed: bool = False

    def is_empty(self) -> bool:
        """Return True when no differences were recorded."""

        return (
            not self.cpu
            and not self.stack
            and not self.timers
            and not self.memory_addresses
            and not self.display_changed
        )


def capture_state(emulator: Chip8Emulator) -> MachineSnapshot:
    """Capture the current emulator state as canonical snapshot."""

    state = emulator.state
    cpu = CPUState(
        pc=state.pc,
        v=state.registers.values(),
        i=state.registers.i,
        mode=state.mode.name,
        await_register=state.await_register,
        instruction_count=emulator.instruction_count,
    )
    return MachineSnapshot(
        cpu=cpu,
        stack=StackState(entries=state.stack.entries()),
        timers=TimerState(delay=state.timers.delay, sound=state.timers.sound),
        memory=bytes(state.memory.data),
        display=state.framebuffer.to_bytes(),
        tick=emulator.tick_count,
    )


def diff_states(before: Optional[MachineSnapshot], after: MachineSnapshot) -> StateDiff:
    """Compute structured differences between two snapshots."""

    if before is None:
        return StateDiff()

    return StateDiff(
        cpu=_diff_fields(
            before.cpu,
            after.cpu,
            ("pc", "v", "i", "mode", "await_register", "instruction_count"),
        ),
        stack=_diff_fields(before.stack, after.stack, ("entries",)),
        timers=_diff_fields(before.timers, after.timers, ("delay", "sound")),
        memory_addresses=tuple(
            addr
            for addr, (old, new) in enumerate(zip(before.memory, after.memory))
            if old != new
        ),
        display_changed=before.display != after.display,
    )


def _diff_fields(before: object, after: object, names: Tuple[str, ...]) -> Tuple[FieldDiff, ...]:
    diffs = []
    for name in names:
        old = getattr(before, name)
        new = getattr(after, name)
        if old != new:
            diffs.append(FieldDiff(name, old, new))
    return tuple(diffs)


__all__ = [
    "CPUState",
    "FieldDiff",
    "MachineSnapshot",
    "StackState",
    "StateDiff",
    "TimerState",
    "capture_state",
    "diff_states",
]
