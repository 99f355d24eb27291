"""Instruction semantics, one opcode group at a time."""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from chip8 import MachineConfig
from chip8.font import glyph
from chip8.keyboard import KeypadState

BYTE_SAMPLES = (0x00, 0x01, 0x0F, 0x7F, 0x80, 0x81, 0xC8, 0xFE, 0xFF)


# --------------------------------------------------------------------------- #
# Flow control
# --------------------------------------------------------------------------- #


def test_jump_sets_pc_without_advance(make_emulator) -> None:
    emu = make_emulator(0x1234)
    emu.tick()
    assert emu.pc == 0x234


def test_jump_plus_v0(make_emulator) -> None:
    emu = make_emulator(0x6004, 0xB300)
    emu.run(2)
    assert emu.pc == 0x304


def test_call_then_return_restores_pc_and_stack_pointer(make_emulator) -> None:
    # 0x200: CALL 0x206 / 0x202: LD V0, 0x11 / 0x204: JP 0x204 / 0x206: RET
    emu = make_emulator(0x2206, 0x6011, 0x1204, 0x00EE)
    depth_before = emu.stack.pointer

    emu.tick()
    assert emu.pc == 0x206
    assert emu.stack.pointer == depth_before + 1
    assert emu.stack.entries() == (0x202,)

    emu.tick()
    assert emu.pc == 0x202
    assert emu.stack.pointer == depth_before

    emu.tick()
    assert emu.registers.get(0) == 0x11


@pytest.mark.parametrize(
    "words, expected_pc",
    [
        ((0x6005, 0x3005), 0x206),  # SE Vx, kk taken
        ((0x6005, 0x3006), 0x204),  # SE Vx, kk not taken
        ((0x6005, 0x4006), 0x206),  # SNE Vx, kk taken
        ((0x6005, 0x4005), 0x204),  # SNE Vx, kk not taken
        ((0x6005, 0x6105, 0x5010), 0x208),  # SE Vx, Vy taken
        ((0x6005, 0x6106, 0x5010), 0x206),  # SE Vx, Vy not taken
        ((0x6005, 0x6106, 0x9010), 0x208),  # SNE Vx, Vy taken
        ((0x6005, 0x6105, 0x9010), 0x206),  # SNE Vx, Vy not taken
    ],
)
def test_skip_instructions(make_emulator, words, expected_pc) -> None:
    emu = make_emulator(*words)
    emu.run(len(words))
    assert emu.pc == expected_pc


# --------------------------------------------------------------------------- #
# Loads and ALU
# --------------------------------------------------------------------------- #


def test_load_immediate_and_copy(make_emulator) -> None:
    emu = make_emulator(0x6A42, 0x8BA0)
    emu.run(2)
    assert emu.registers.get(0xA) == 0x42
    assert emu.registers.get(0xB) == 0x42
    assert emu.pc == 0x204


def test_add_immediate_wraps_without_touching_vf(make_emulator) -> None:
    emu = make_emulator(0x6F07, 0x60FF, 0x7002)
    emu.run(3)
    assert emu.registers.get(0) == 0x01
    assert emu.registers.vf == 0x07


@pytest.mark.parametrize(
    "op, expected",
    [
        (0x1, 0b1110),  # OR
        (0x2, 0b1000),  # AND
        (0x3, 0b0110),  # XOR
    ],
)
def test_bitwise_ops(make_emulator, op, expected) -> None:
    emu = make_emulator(0x600C, 0x610A, 0x8010 | op)
    emu.run(3)
    assert emu.registers.get(0) == expected
    assert emu.registers.get(1) == 0x0A


@pytest.mark.parametrize("a, b", list(itertools.product(BYTE_SAMPLES, repeat=2)))
def test_add_sets_carry_iff_sum_exceeds_255(make_emulator, a, b) -> None:
    emu = make_emulator(0x6000 | a, 0x6100 | b, 0x8014)
    emu.run(3)
    assert emu.registers.get(0) == (a + b) % 256
    assert emu.registers.vf == (1 if a + b > 255 else 0)


@pytest.mark.parametrize("a, b", list(itertools.product(BYTE_SAMPLES, repeat=2)))
def test_sub_sets_flag_iff_no_borrow(make_emulator, a, b) -> None:
    emu = make_emulator(0x6000 | a, 0x6100 | b, 0x8015)
    emu.run(3)
    assert emu.registers.get(0) == (a - b) % 256
    assert emu.registers.vf == (1 if a >= b else 0)


@pytest.mark.parametrize("a, b", [(0x10, 0x30), (0x30, 0x10), (0x22, 0x22), (0x00, 0xFF)])
def test_reverse_sub(make_emulator, a, b) -> None:
    emu = make_emulator(0x6000 | a, 0x6100 | b, 0x8017)
    emu.run(3)
    assert emu.registers.get(0) == (b - a) % 256
    assert emu.registers.vf == (1 if b >= a else 0)


@pytest.mark.parametrize("value", [0x00, 0x01, 0x80, 0x81, 0xFF, 0x5A])
def test_shifts_capture_shifted_out_bit(make_emulator, value) -> None:
    right = make_emulator(0x6000 | value, 0x8006)
    right.run(2)
    assert right.registers.get(0) == value >> 1
    assert right.registers.vf == value & 0x01

    left = make_emulator(0x6000 | value, 0x800E)
    left.run(2)
    assert left.registers.get(0) == (value << 1) & 0xFF
    assert left.registers.vf == (value >> 7) & 0x01


def test_flag_wins_when_vf_is_destination(make_emulator) -> None:
    # VF = 0xFF + 0x01 -> result 0x00, but the carry flag is written last.
    emu = make_emulator(0x6FFF, 0x6101, 0x8F14)
    emu.run(3)
    assert emu.registers.vf == 1


def test_load_i(make_emulator) -> None:
    emu = make_emulator(0xA123)
    emu.tick()
    assert emu.registers.i == 0x123
    assert emu.pc == 0x202


def test_random_is_masked_and_reproducible(make_emulator) -> None:
    words = (0xC00F, 0xC1F0, 0xC2FF)
    first = make_emulator(*words, seed=99)
    second = make_emulator(*words, seed=99)
    first.run(3)
    second.run(3)

    assert first.registers.get(0) & 0xF0 == 0
    assert first.registers.get(1) & 0x0F == 0
    assert first.registers.values() == second.registers.values()

    rng = np.random.default_rng(99)
    expected = [int(rng.integers(0, 256)) & mask for mask in (0x0F, 0xF0, 0xFF)]
    assert list(first.registers.values()[:3]) == expected


# --------------------------------------------------------------------------- #
# Display
# --------------------------------------------------------------------------- #


def test_clear_screen(make_emulator) -> None:
    # Draw glyph 0 at the origin, then clear.
    emu = make_emulator(0xF029, 0xD005, 0x00E0)
    emu.run(2)
    assert emu.framebuffer.lit_count() > 0
    emu.tick()
    assert emu.framebuffer.lit_count() == 0
    assert emu.pc == 0x206


def test_draw_font_glyph_reproduces_bit_pattern(make_emulator) -> None:
    # V0 = 0xA, V1 = 3 (x), V2 = 4 (y); I = glyph(A); draw 5 rows.
    emu = make_emulator(0x600A, 0x6103, 0x6204, 0xF029, 0xD125)
    emu.run(5)

    rows = glyph(0xA)
    for dy, row in enumerate(rows):
        for dx in range(8):
            expected = bool((row >> (7 - dx)) & 1)
            assert emu.framebuffer.get_pixel(3 + dx, 4 + dy) is expected
    assert emu.framebuffer.lit_count() == sum(bin(r).count("1") for r in rows)
    assert emu.registers.vf == 0


def test_drawing_twice_restores_screen_and_reports_collision(make_emulator) -> None:
    emu = make_emulator(0x6107, 0x6209, 0xF029, 0xD125, 0xD125)
    emu.run(4)
    assert emu.registers.vf == 0
    assert emu.framebuffer.lit_count() > 0

    emu.tick()
    assert emu.registers.vf == 1
    assert emu.framebuffer.lit_count() == 0


def test_draw_wraps_at_right_edge(make_emulator) -> None:
    # V0 = 60, V1 = 0, I -> 0x208 where a single 0xFF row lives.
    emu = make_emulator(0x603C, 0x6100, 0xA208, 0xD011, data=bytes([0xFF, 0x00]))
    emu.run(4)

    lit = [x for x in range(64) if emu.framebuffer.get_pixel(x, 0)]
    assert lit == [0, 1, 2, 3, 60, 61, 62, 63]
    assert emu.registers.vf == 0


def test_draw_origin_is_reduced_modulo_screen(make_emulator) -> None:
    # V0 = 66 -> x = 2, V1 = 33 -> y = 1
    emu = make_emulator(0x6042, 0x6121, 0xA20A, 0xD011, 0x120A, data=bytes([0x80, 0x00]))
    emu.run(4)
    assert emu.framebuffer.get_pixel(2, 1)
    assert emu.framebuffer.lit_count() == 1


# --------------------------------------------------------------------------- #
# Keypad
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "opcode, pressed, expected_pc",
    [
        (0xE09E, {5}, 0x206),
        (0xE09E, set(), 0x204),
        (0xE09E, {4}, 0x204),
        (0xE0A1, set(), 0x206),
        (0xE0A1, {5}, 0x204),
    ],
)
def test_skip_on_key(make_emulator, opcode, pressed, expected_pc) -> None:
    emu = make_emulator(0x6005, opcode)
    keypad = KeypadState.from_pressed(pressed)
    emu.tick(keypad)
    emu.tick(keypad)
    assert emu.pc == expected_pc


# --------------------------------------------------------------------------- #
# Timers, I register and memory transfers
# --------------------------------------------------------------------------- #


def test_delay_timer_write_and_read(make_emulator) -> None:
    emu = make_emulator(0x603C, 0xF015, 0xF107)
    emu.run(2)
    # Set to 60 during tick 2, decremented once at the end of that tick.
    assert emu.timers.delay == 59
    emu.tick()
    assert emu.registers.get(1) == 59
    assert emu.timers.delay == 58


def test_sound_timer_write(make_emulator) -> None:
    emu = make_emulator(0x6003, 0xF018)
    emu.run(2)
    assert emu.timers.sound == 2
    assert emu.sound_active


def test_add_to_i_leaves_vf_alone_by_default(make_emulator) -> None:
    emu = make_emulator(0x6F07, 0x6002, 0xAFFF, 0xF01E)
    emu.run(4)
    assert emu.registers.i == 0x1001
    assert emu.registers.vf == 0x07


def test_add_to_i_overflow_flag_quirk(make_emulator) -> None:
    config = MachineConfig(seed=0, add_to_i_sets_vf=True)
    emu = make_emulator(0x6002, 0xAFFF, 0xF01E, 0xA100, 0xF01E, config=config)
    emu.run(3)
    assert emu.registers.vf == 1
    emu.run(2)
    assert emu.registers.i == 0x102
    assert emu.registers.vf == 0


def test_font_address(make_emulator) -> None:
    emu = make_emulator(0x600A, 0xF029)
    emu.run(2)
    assert emu.registers.i == 0xA * 5
    assert emu.memory.read_block(emu.registers.i, 5) == bytes(glyph(0xA))


def test_bcd_of_157(make_emulator) -> None:
    emu = make_emulator(0x609D, 0xA300, 0xF033)
    emu.run(3)
    assert emu.memory.read_block(0x300, 3) == bytes([1, 5, 7])
    assert emu.pc == 0x206


@pytest.mark.parametrize("value, digits", [(0, (0, 0, 0)), (9, (0, 0, 9)), (255, (2, 5, 5))])
def test_bcd_edges(make_emulator, value, digits) -> None:
    emu = make_emulator(0x6500 | value, 0xA300, 0xF533)
    emu.run(3)
    assert tuple(emu.memory.read_block(0x300, 3)) == digits


def test_store_registers_is_inclusive_and_keeps_i(make_emulator) -> None:
    emu = make_emulator(0x6011, 0x6122, 0x6233, 0x6344, 0xA300, 0xF255)
    emu.run(6)
    assert emu.memory.read_block(0x300, 4) == bytes([0x11, 0x22, 0x33, 0x00])
    assert emu.registers.i == 0x300


def test_load_registers_is_inclusive_and_keeps_i(make_emulator) -> None:
    emu = make_emulator(0xA20A, 0xF265, 0x1204, 0x0000, 0x0000, data=bytes([9, 8, 7, 6]))
    emu.run(2)
    assert emu.registers.values()[:4] == (9, 8, 7, 0)
    assert emu.registers.i == 0x20A
