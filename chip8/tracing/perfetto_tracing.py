# chip8/tracing/perfetto_tracing.py
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from retrobus_perfetto import PerfettoTraceBuilder

from .dispatcher import COUNTERS, CPU_TRACK, TRACKS, TraceEvent, TraceEventType

logger = logging.getLogger(__name__)

DEFAULT_TRACE_PATH = "chip8.perfetto-trace"


@dataclass
class _TraceSession:
    """One open trace file: the builder plus its track and slice bookkeeping."""

    builder: Any
    path: str
    started: float = field(default_factory=time.perf_counter)
    tracks: Dict[str, int] = field(default_factory=dict)
    counter_tracks: Dict[str, int] = field(default_factory=dict)
    open_slices: Dict[str, List[str]] = field(default_factory=dict)

    def now_ns(self) -> int:
        return int((time.perf_counter() - self.started) * 1_000_000_000)

    def track(self, name: str) -> int:
        if name not in self.tracks:
            self.tracks[name] = self.builder.add_thread(name)
        return self.tracks[name]

    def counter_track(self, name: str) -> int:
        if name not in self.counter_tracks:
            self.counter_tracks[name] = self.builder.add_counter_track(name, "count")
        return self.counter_tracks[name]


class PerfettoTracer:
    """Writes interpreter activity to a Perfetto trace via retrobus-perfetto.

    Timestamps are wall-clock offsets from ``start()``. Every event method is
    a no-op while no trace is open.
    """

    def __init__(self, process_name: str = "CHIP-8 Interpreter") -> None:
        self.process_name = process_name
        self._session: Optional[_TraceSession] = None

    @property
    def enabled(self) -> bool:
        return self._session is not None

    def start(self, path: str = DEFAULT_TRACE_PATH) -> None:
        if self._session is not None:
            return
        session = _TraceSession(PerfettoTraceBuilder(self.process_name), path)
        for name in TRACKS:
            session.track(name)
        for name in COUNTERS:
            session.counter_track(name)
        self._session = session
        logger.debug("Perfetto tracing started; output=%s", path)

    def stop(self) -> Optional[str]:
        """Close open slices, write the file and return its path."""
        session = self._session
        if session is None:
            return None
        for track_name, names in session.open_slices.items():
            track_uuid = session.track(track_name)
            while names:
                names.pop()
                session.builder.end_slice(track_uuid, session.now_ns())
        session.builder.save(session.path)
        self._session = None
        logger.info("Perfetto trace saved to %s", session.path)
        return session.path

    def instant(self, track: str, name: str, args: Optional[Dict[str, Any]] = None) -> None:
        session = self._session
        if session is None:
            return
        event = session.builder.add_instant_event(session.track(track), name, session.now_ns())
        if args:
            event.add_annotations(args)

    def counter(self, name: str, value: float) -> None:
        session = self._session
        if session is None:
            return
        session.builder.update_counter(session.counter_track(name), value, session.now_ns())

    def begin_slice(self, track: str, name: str, args: Optional[Dict[str, Any]] = None) -> None:
        session = self._session
        if session is None:
            return
        session.open_slices.setdefault(track, []).append(name)
        event = session.builder.begin_slice(session.track(track), name, session.now_ns())
        if args:
            event.add_annotations(args)

    def end_slice(self, track: str) -> None:
        session = self._session
        if session is None:
            return
        names = session.open_slices.get(track)
        # RET without a traced CALL (tracing started inside a subroutine).
        if not names:
            return
        names.pop()
        session.builder.end_slice(session.track(track), session.now_ns())


class PerfettoObserver:
    """Bridge dispatcher events into a ``PerfettoTracer``."""

    def __init__(self, tracer: Optional[PerfettoTracer] = None) -> None:
        self.tracer = tracer or PerfettoTracer()

    def handle_event(self, event: TraceEvent) -> None:
        tracer = self.tracer
        kind = event.type
        if kind is TraceEventType.START:
            tracer.start(str(event.payload.get("output_path") or DEFAULT_TRACE_PATH))
        elif kind is TraceEventType.STOP:
            tracer.stop()
        elif kind is TraceEventType.INSTANT:
            tracer.instant(event.track or CPU_TRACK, event.name, event.payload)
        elif kind is TraceEventType.COUNTER:
            tracer.counter(event.name, event.payload["value"])
        elif kind is TraceEventType.FUNCTION_BEGIN:
            tracer.begin_slice(event.track or CPU_TRACK, event.name, event.payload)
        elif kind is TraceEventType.FUNCTION_END:
            tracer.end_slice(event.track or CPU_TRACK)


__all__ = ["DEFAULT_TRACE_PATH", "PerfettoObserver", "PerfettoTracer"]
