"""Program loading from byte streams."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from .constants import MAX_PROGRAM_SIZE
from .errors import ProgramLoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgramLoader:
    """Reads and validates a program image of 1..``max_size`` bytes."""

    max_size: int = MAX_PROGRAM_SIZE

    def validate(self, program: bytes) -> bytes:
        if not program:
            raise ProgramLoadError("No program supplied", size=0)
        if len(program) > self.max_size:
            raise ProgramLoadError(
                f"Program is {len(program)} bytes; CHIP-8 program space holds "
                f"{self.max_size} bytes",
                size=len(program),
            )
        return bytes(program)

    def read_stream(self, stream: BinaryIO) -> bytes:
        # Read one byte past the limit so oversize input is detected
        # without buffering an arbitrarily large stream.
        data = stream.read(self.max_size + 1)
        program = self.validate(data)
        logger.info("Read %d-byte program", len(program))
        return program

    def read_file(self, path: str | Path) -> bytes:
        with open(path, "rb") as f:
            return self.read_stream(f)


__all__ = ["ProgramLoader"]
