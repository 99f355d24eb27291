"""Monochrome 64x32 framebuffer with XOR sprite blitting."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ..constants import SCREEN_HEIGHT, SCREEN_WIDTH, SPRITE_WIDTH


class Framebuffer:
    """Row-major boolean pixel grid (``pixels[y, x]``).

    Only ``clear`` and ``draw_sprite`` mutate the grid. Consumers get
    read-only copies through ``snapshot``.
    """

    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width), dtype=bool)

    def clear(self) -> None:
        self.pixels.fill(False)

    def draw_sprite(self, x: int, y: int, rows: bytes) -> bool:
        """XOR an 8-pixel-wide sprite at ``(x, y)``.

        The origin is reduced modulo the grid size and pixels past an edge
        wrap around to the opposite side. Returns True when at least one lit
        pixel was switched off.
        """
        if not rows:
            return False
        sprite = np.frombuffer(bytes(rows), dtype=np.uint8)
        bits = np.unpackbits(sprite).reshape(len(sprite), SPRITE_WIDTH).astype(bool)

        ys = (y % self.height + np.arange(len(sprite))) % self.height
        xs = (x % self.width + np.arange(SPRITE_WIDTH)) % self.width
        window = np.ix_(ys, xs)

        current = self.pixels[window]
        collision = bool(np.any(current & bits))
        self.pixels[window] = current ^ bits
        return collision

    def get_pixel(self, x: int, y: int) -> bool:
        return bool(self.pixels[y % self.height, x % self.width])

    def snapshot(self) -> np.ndarray:
        frame = self.pixels.copy()
        frame.setflags(write=False)
        return frame

    def lit_count(self) -> int:
        return int(np.count_nonzero(self.pixels))

    def to_bytes(self) -> bytes:
        """Pack the grid row-major, MSB first, 8 pixels per byte."""
        return np.packbits(self.pixels, axis=None).tobytes()

    def rows(self) -> Tuple[Tuple[bool, ...], ...]:
        return tuple(tuple(bool(p) for p in row) for row in self.pixels)


__all__ = ["Framebuffer"]
