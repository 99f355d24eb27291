"""Tracing utilities for the CHIP-8 interpreter."""

from .dispatcher import (
    CPU_TRACK,
    DISPLAY_TRACK,
    KEYPAD_TRACK,
    RecordingObserver,
    TraceDispatcher,
    TraceEvent,
    TraceEventType,
    TraceObserver,
)

__all__ = [
    "CPU_TRACK",
    "DISPLAY_TRACK",
    "KEYPAD_TRACK",
    "RecordingObserver",
    "TraceDispatcher",
    "TraceEvent",
    "TraceEventType",
    "TraceObserver",
]
