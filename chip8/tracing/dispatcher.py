"""Fan-out of interpreter trace events to pluggable observers.

The engine reports machine-level happenings (an instruction retired, a
subroutine entered or left, a sprite drawn, a key wait completed, a halt)
through a ``TraceDispatcher``. Observers decide how to record them:
``PerfettoObserver`` writes a trace file, ``RecordingObserver`` keeps the
events in memory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Protocol, Tuple

CPU_TRACK = "CPU"
KEYPAD_TRACK = "Keypad"
DISPLAY_TRACK = "Display"
TRACKS: Tuple[str, ...] = (CPU_TRACK, KEYPAD_TRACK, DISPLAY_TRACK)

COUNTERS: Tuple[str, ...] = ("instructions", "call_depth", "delay_timer", "sound_timer")


class TraceEventType(Enum):
    START = "start"
    STOP = "stop"
    INSTANT = "instant"
    COUNTER = "counter"
    FUNCTION_BEGIN = "function_begin"
    FUNCTION_END = "function_end"


@dataclass(frozen=True)
class TraceEvent:
    type: TraceEventType
    track: str = CPU_TRACK
    name: str = ""
    payload: Dict[str, Any] = field(default_factory=dict)


class TraceObserver(Protocol):
    def handle_event(self, event: TraceEvent) -> None: ...


class TraceDispatcher:
    """Forwards every event to each registered observer in registration order."""

    def __init__(self, *observers: TraceObserver) -> None:
        self._observers: List[TraceObserver] = []
        for observer in observers:
            self.register(observer)

    def register(self, observer: TraceObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unregister(self, observer: TraceObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def observers(self) -> Tuple[TraceObserver, ...]:
        return tuple(self._observers)

    def has_observers(self) -> bool:
        return bool(self._observers)

    # ------------------------------------------------------------------ #
    # Trace session
    # ------------------------------------------------------------------ #
    def start_trace(self, output_path: Path | str) -> None:
        self._emit(TraceEvent(TraceEventType.START, payload={"output_path": Path(output_path)}))

    def stop_trace(self) -> None:
        self._emit(TraceEvent(TraceEventType.STOP))

    # ------------------------------------------------------------------ #
    # Machine events
    # ------------------------------------------------------------------ #
    def instruction(self, address: int, word: int, mnemonic: str, count: int) -> None:
        """One retired instruction: an instant named by its mnemonic plus the running count."""
        self.instant(CPU_TRACK, mnemonic, pc=address, opcode=word)
        self.counter("instructions", count)

    def subroutine_call(self, target: int, caller: int, depth: int) -> None:
        self._emit(
            TraceEvent(
                TraceEventType.FUNCTION_BEGIN,
                CPU_TRACK,
                f"sub_{target:03X}",
                {"pc": target, "caller_pc": caller},
            )
        )
        self.counter("call_depth", depth)

    def subroutine_return(self, address: int, depth: int) -> None:
        self._emit(TraceEvent(TraceEventType.FUNCTION_END, CPU_TRACK, payload={"pc": address}))
        self.counter("call_depth", depth)

    def sprite_drawn(self, collision: bool) -> None:
        self.instant(DISPLAY_TRACK, "draw", collision=int(collision))

    def key_resolved(self, register: int, key: int) -> None:
        self.instant(KEYPAD_TRACK, "key_resolved", register=register, key=key)

    def halted(self, pc: int, error: BaseException) -> None:
        self.instant(CPU_TRACK, "halt", pc=pc, error=str(error))

    def timers(self, delay: int, sound: int) -> None:
        self.counter("delay_timer", delay)
        self.counter("sound_timer", sound)

    # ------------------------------------------------------------------ #
    # Primitives
    # ------------------------------------------------------------------ #
    def instant(self, track: str, name: str, **payload: Any) -> None:
        self._emit(TraceEvent(TraceEventType.INSTANT, track, name, payload))

    def counter(self, name: str, value: float) -> None:
        self._emit(TraceEvent(TraceEventType.COUNTER, CPU_TRACK, name, {"value": value}))

    def _emit(self, event: TraceEvent) -> None:
        for observer in tuple(self._observers):
            observer.handle_event(event)


class RecordingObserver:
    """Keeps every event in memory; used by tests and ad-hoc debugging."""

    def __init__(self) -> None:
        self.events: List[TraceEvent] = []

    def handle_event(self, event: TraceEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: TraceEventType) -> List[TraceEvent]:
        return [e for e in self.events if e.type is event_type]

    def counter_values(self, name: str) -> List[float]:
        return [
            e.payload["value"]
            for e in self.events
            if e.type is TraceEventType.COUNTER and e.name == name
        ]


__all__ = [
    "COUNTERS",
    "CPU_TRACK",
    "DISPLAY_TRACK",
    "KEYPAD_TRACK",
    "RecordingObserver",
    "TRACKS",
    "TraceDispatcher",
    "TraceEvent",
    "TraceEventType",
    "TraceObserver",
]
