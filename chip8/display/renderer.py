"""Presentation helpers and ``Display`` implementations."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO, Tuple

import numpy as np
from PIL import Image

from ..constants import SCREEN_HEIGHT, SCREEN_WIDTH

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

OFF_COLOR: Color = (0, 0, 0)
ON_COLOR: Color = (255, 255, 255)


def render_image(
    frame: np.ndarray,
    zoom: int = 1,
    on_color: Color = ON_COLOR,
    off_color: Color = OFF_COLOR,
) -> Image.Image:
    """Render a boolean frame as an RGB image, each pixel a ``zoom`` square."""
    if zoom < 1:
        raise ValueError(f"zoom must be >= 1, got {zoom}")
    pixels = np.asarray(frame, dtype=bool)
    if zoom > 1:
        pixels = pixels.repeat(zoom, axis=0).repeat(zoom, axis=1)
    rgb = np.where(
        pixels[..., None],
        np.array(on_color, dtype=np.uint8),
        np.array(off_color, dtype=np.uint8),
    ).astype(np.uint8)
    return Image.fromarray(rgb)


def render_text(frame: np.ndarray, on: str = "█", off: str = " ") -> str:
    """Render a frame as text, one line per pixel row."""
    return "\n".join("".join(on if p else off for p in row) for row in frame)


class NullDisplay:
    """Discards frames; counts them for diagnostics."""

    def __init__(self) -> None:
        self.frames = 0

    def present(self, frame: np.ndarray) -> None:
        self.frames += 1


class ImageDisplay:
    """Keeps the latest frame and renders it with Pillow on demand.

    When ``save_every`` is set, every Nth frame is written to
    ``output_dir/frame_00000.png``.
    """

    def __init__(
        self,
        zoom: int = 16,
        *,
        save_every: Optional[int] = None,
        output_dir: Optional[Path] = None,
    ) -> None:
        if save_every is not None and (save_every < 1 or output_dir is None):
            raise ValueError("save_every needs a positive interval and an output_dir")
        self.zoom = zoom
        self.save_every = save_every
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.frames = 0
        self._frame = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=bool)

    def present(self, frame: np.ndarray) -> None:
        self._frame = np.array(frame, dtype=bool)
        if self.save_every is not None and self.frames % self.save_every == 0:
            assert self.output_dir is not None
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.save_png(self.output_dir / f"frame_{self.frames:05d}.png")
        self.frames += 1

    @property
    def frame(self) -> np.ndarray:
        return self._frame

    @property
    def image(self) -> Image.Image:
        return render_image(self._frame, self.zoom)

    def save_png(self, path: str | Path) -> Path:
        target = Path(path)
        self.image.save(target, format="PNG")
        logger.debug("Saved frame %d to %s", self.frames, target)
        return target


class TerminalDisplay:
    """Redraws the frame in a text stream using ANSI cursor-home."""

    def __init__(self, stream: Optional[TextIO] = None, *, ansi: bool = True) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.ansi = ansi
        self._last: Optional[bytes] = None

    def present(self, frame: np.ndarray) -> None:
        packed = np.packbits(np.asarray(frame, dtype=bool)).tobytes()
        if packed == self._last:
            return
        self._last = packed
        if self.ansi:
            self.stream.write("\x1b[H")
        self.stream.write(render_text(frame))
        self.stream.write("\n")
        self.stream.flush()


__all__ = [
    "ImageDisplay",
    "NullDisplay",
    "OFF_COLOR",
    "ON_COLOR",
    "TerminalDisplay",
    "render_image",
    "render_text",
]
