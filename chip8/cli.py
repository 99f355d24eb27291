#!/usr/bin/env python3
"""Command-line runner: reads a CHIP-8 program from standard input."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import MachineConfig
from .constants import MAX_PROGRAM_SIZE
from .decoder import disassemble
from .display import ImageDisplay, NullDisplay, TerminalDisplay
from .emulator import Chip8Emulator
from .errors import ConfigError, ProgramLoadError
from .keyboard import KeySchedule, ScriptedInput, get_layout
from .loader import ProgramLoader
from .scheduler import CycleScheduler
from .tracing import TraceDispatcher

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_USAGE = 2

USAGE_HINT = (
    "The CHIP-8 emulator accepts programs through stdin.\n"
    "Usage: chip8 [options] < ./program.ch8"
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8",
        description="CHIP-8 interpreter (program is read from stdin)",
    )
    parser.add_argument(
        "--ticks", type=int, default=None, help="Stop after N ticks (default: run until halted)"
    )
    parser.add_argument(
        "--throttle",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Hold the 60 Hz cadence (default from config; off runs flat out)",
    )
    parser.add_argument(
        "--display",
        choices=["none", "terminal", "image"],
        default="terminal",
        help="Where frames are presented",
    )
    parser.add_argument("--save-png", type=str, help="Save the final frame as PNG")
    parser.add_argument(
        "--frames-dir",
        type=str,
        help="Save frames as PNG into this directory (selects the image display)",
    )
    parser.add_argument(
        "--frame-interval", type=int, default=60, help="Save every Nth frame (default 60)"
    )
    parser.add_argument(
        "--hold",
        action="append",
        default=[],
        metavar="KEY:START[:END]",
        help="Hold KEY (host key name or 0x0-0xF) from tick START to END; repeatable",
    )
    parser.add_argument("--config", type=str, help="Load a MachineConfig JSON file")
    parser.add_argument(
        "--profile",
        choices=["default", "legacy-amiga", "original-keys"],
        default="default",
        help="Named configuration preset (ignored with --config)",
    )
    parser.add_argument("--seed", type=int, help="Seed for the random-byte instruction")
    parser.add_argument(
        "--perfetto", action="store_true", help="Record a Perfetto trace"
    )
    parser.add_argument(
        "--trace-file",
        type=str,
        default="chip8.perfetto-trace",
        help="Perfetto trace path",
    )
    parser.add_argument(
        "--disassemble", action="store_true", help="Print a listing and exit"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (DEBUG logs every instruction)",
    )
    return parser


def _usage(parser: argparse.ArgumentParser, message: Optional[str] = None) -> int:
    if message:
        print(message, file=sys.stderr)
    print(USAGE_HINT, file=sys.stderr)
    parser.print_usage(sys.stderr)
    return EXIT_USAGE


def _resolve_config(args: argparse.Namespace) -> MachineConfig:
    if args.config:
        config = MachineConfig.load(args.config)
    else:
        config = MachineConfig.for_profile(args.profile)
    if args.seed is not None:
        config.seed = args.seed
    if args.throttle is not None:
        config.throttle = args.throttle
    config.validate()
    return config


def _build_display(args: argparse.Namespace, config: MachineConfig):
    if args.frames_dir:
        # Frame export goes through the image display whatever --display says.
        return ImageDisplay(
            config.display_zoom,
            save_every=args.frame_interval,
            output_dir=Path(args.frames_dir),
        )
    if args.display == "terminal":
        return TerminalDisplay()
    if args.display == "image" or args.save_png:
        return ImageDisplay(config.display_zoom)
    return NullDisplay()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _resolve_config(args)
        layout = get_layout(config.keypad_layout)
        schedule = KeySchedule.parse(args.hold, layout)
    except (ConfigError, KeyError, ValueError) as exc:
        return _usage(parser, f"error: {exc}")
    if args.frame_interval < 1:
        return _usage(parser, f"error: --frame-interval must be >= 1, got {args.frame_interval}")

    if sys.stdin is None or sys.stdin.isatty():
        return _usage(parser)
    try:
        program = ProgramLoader().read_stream(sys.stdin.buffer)
    except ProgramLoadError as exc:
        if exc.size:
            message = (
                "The program you provided was too large.\n"
                f"CHIP-8 program space is limited to {MAX_PROGRAM_SIZE} bytes."
            )
        else:
            message = None
        return _usage(parser, message)

    if args.disassemble:
        for line in disassemble(program):
            print(line)
        return EXIT_OK

    trace: Optional[TraceDispatcher] = None
    if args.perfetto:
        from .tracing.perfetto_tracing import PerfettoObserver

        trace = TraceDispatcher()
        trace.register(PerfettoObserver())
        trace.start_trace(args.trace_file)

    display = _build_display(args, config)
    emulator = Chip8Emulator(program, config, trace=trace)
    scheduler = CycleScheduler(
        emulator,
        display=display,
        input_source=ScriptedInput(schedule),
        throttle=config.throttle,
    )

    try:
        result = scheduler.run(max_ticks=args.ticks)
    except KeyboardInterrupt:
        logger.info("Interrupted at tick %d", emulator.tick_count)
        result = None
    finally:
        if trace is not None:
            trace.stop_trace()

    if args.save_png:
        if isinstance(display, ImageDisplay):
            display.save_png(args.save_png)
        else:
            image_display = ImageDisplay(config.display_zoom)
            image_display.present(emulator.framebuffer.snapshot())
            image_display.save_png(args.save_png)

    if result is not None and result.error is not None:
        print(f"error: {result.error}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
