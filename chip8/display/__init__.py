"""Framebuffer and presentation for the CHIP-8 display."""

from .framebuffer import Framebuffer
from .renderer import (
    ImageDisplay,
    NullDisplay,
    TerminalDisplay,
    render_image,
    render_text,
)

__all__ = [
    "Framebuffer",
    "ImageDisplay",
    "NullDisplay",
    "TerminalDisplay",
    "render_image",
    "render_text",
]
