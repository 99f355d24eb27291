"""Shared machine constants for the CHIP-8 interpreter.

Address layout:

    0x000-0x1FF  interpreter area (font glyphs live at the very bottom)
    0x200-0xFFF  program space
"""

MEMORY_SIZE = 0x1000  # 4096 bytes
ADDRESS_MASK = MEMORY_SIZE - 1

FONT_START = 0x000
GLYPH_SIZE = 5  # bytes per hex digit glyph

PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START  # 3584 bytes

NUM_REGISTERS = 16
FLAG_REGISTER = 0xF
I_MASK = 0xFFFF

STACK_DEPTH = 16

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
SPRITE_WIDTH = 8

NUM_KEYS = 16

# Timers and instruction cycles both run at this fixed rate.
TICK_HZ = 60
