"""Instruction semantics for the CHIP-8 core.

``Dispatcher.execute`` classifies an ``Instruction`` through the per-class
pattern table in ``opcodes`` and applies the matching handler. Every handler
owns its program-counter update: +2 for straight-line code, +4 for a taken
skip, an absolute target for jumps, calls and returns.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

import numpy as np

from .constants import GLYPH_SIZE, ADDRESS_MASK
from .decoder import Instruction
from .errors import UnknownOpcodeError
from .keyboard import KeypadState, NO_KEYS
from .machine_state import ExecutionMode, MachineState
from .opcodes import Op

Handler = Callable[[MachineState, Instruction], None]


def _skip_if(state: MachineState, condition: bool) -> None:
    state.advance(2 if condition else 1)


class Dispatcher:
    """Applies instruction semantics to a ``MachineState``."""

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        *,
        add_to_i_sets_vf: bool = False,
    ) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()
        self.add_to_i_sets_vf = add_to_i_sets_vf
        self.keypad: KeypadState = NO_KEYS
        self._handlers: Dict[Op, Handler] = {
            Op.CLS: self._op_cls,
            Op.RET: self._op_ret,
            Op.JP: self._op_jp,
            Op.CALL: self._op_call,
            Op.SE_IMM: self._op_se_imm,
            Op.SNE_IMM: self._op_sne_imm,
            Op.SE_REG: self._op_se_reg,
            Op.LD_IMM: self._op_ld_imm,
            Op.ADD_IMM: self._op_add_imm,
            Op.LD_REG: self._op_ld_reg,
            Op.OR: self._op_or,
            Op.AND: self._op_and,
            Op.XOR: self._op_xor,
            Op.ADD_REG: self._op_add_reg,
            Op.SUB: self._op_sub,
            Op.SHR: self._op_shr,
            Op.SUBN: self._op_subn,
            Op.SHL: self._op_shl,
            Op.SNE_REG: self._op_sne_reg,
            Op.LD_I: self._op_ld_i,
            Op.JP_V0: self._op_jp_v0,
            Op.RND: self._op_rnd,
            Op.DRW: self._op_drw,
            Op.SKP: self._op_skp,
            Op.SKNP: self._op_sknp,
            Op.LD_VX_DT: self._op_ld_vx_dt,
            Op.LD_VX_K: self._op_ld_vx_k,
            Op.LD_DT_VX: self._op_ld_dt_vx,
            Op.LD_ST_VX: self._op_ld_st_vx,
            Op.ADD_I: self._op_add_i,
            Op.LD_F: self._op_ld_f,
            Op.LD_B: self._op_ld_b,
            Op.STORE_REGS: self._op_store_regs,
            Op.LOAD_REGS: self._op_load_regs,
        }

    def execute(self, state: MachineState, instr: Instruction) -> Op:
        """Run one instruction and return the operation it matched.

        Raises ``UnknownOpcodeError`` (leaving PC untouched) for words that
        match no pattern.
        """
        pattern = instr.pattern
        if pattern is None:
            raise UnknownOpcodeError(instr.word, instr.address)
        self._handlers[pattern.op](state, instr)
        return pattern.op

    def resolve_key_wait(self, state: MachineState) -> bool:
        """Complete a pending Fx0A if any key is down in the current snapshot."""
        if state.mode is not ExecutionMode.AWAITING_KEY or state.await_register is None:
            return False
        key = self.keypad.lowest_pressed()
        if key is None:
            return False
        state.registers.set(state.await_register, key)
        state.await_register = None
        state.mode = ExecutionMode.RUNNING
        state.advance()
        return True

    # ------------------------------------------------------------------ #
    # Flow control
    # ------------------------------------------------------------------ #
    def _op_cls(self, state: MachineState, instr: Instruction) -> None:
        state.framebuffer.clear()
        state.advance()

    def _op_ret(self, state: MachineState, instr: Instruction) -> None:
        state.pc = state.stack.pop()

    def _op_jp(self, state: MachineState, instr: Instruction) -> None:
        state.pc = instr.nnn

    def _op_call(self, state: MachineState, instr: Instruction) -> None:
        state.stack.push(state.pc + 2)
        state.pc = instr.nnn

    def _op_jp_v0(self, state: MachineState, instr: Instruction) -> None:
        state.pc = (instr.nnn + state.registers.get(0)) & ADDRESS_MASK

    def _op_se_imm(self, state: MachineState, instr: Instruction) -> None:
        _skip_if(state, state.registers.get(instr.x) == instr.kk)

    def _op_sne_imm(self, state: MachineState, instr: Instruction) -> None:
        _skip_if(state, state.registers.get(instr.x) != instr.kk)

    def _op_se_reg(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        _skip_if(state, regs.get(instr.x) == regs.get(instr.y))

    def _op_sne_reg(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        _skip_if(state, regs.get(instr.x) != regs.get(instr.y))

    # ------------------------------------------------------------------ #
    # Register loads and ALU
    # ------------------------------------------------------------------ #
    def _op_ld_imm(self, state: MachineState, instr: Instruction) -> None:
        state.registers.set(instr.x, instr.kk)
        state.advance()

    def _op_add_imm(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        regs.set(instr.x, regs.get(instr.x) + instr.kk)
        state.advance()

    def _op_ld_reg(self, state: MachineState, instr: Instruction) -> None:
        state.registers.set(instr.x, state.registers.get(instr.y))
        state.advance()

    def _op_or(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        regs.set(instr.x, regs.get(instr.x) | regs.get(instr.y))
        state.advance()

    def _op_and(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        regs.set(instr.x, regs.get(instr.x) & regs.get(instr.y))
        state.advance()

    def _op_xor(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        regs.set(instr.x, regs.get(instr.x) ^ regs.get(instr.y))
        state.advance()

    # Flag-producing ops write Vx first and VF last so VF wins when x == F.

    def _op_add_reg(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        total = regs.get(instr.x) + regs.get(instr.y)
        regs.set(instr.x, total)
        regs.set_flag(total > 0xFF)
        state.advance()

    def _op_sub(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        vx, vy = regs.get(instr.x), regs.get(instr.y)
        regs.set(instr.x, vx - vy)
        regs.set_flag(vx >= vy)
        state.advance()

    def _op_subn(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        vx, vy = regs.get(instr.x), regs.get(instr.y)
        regs.set(instr.x, vy - vx)
        regs.set_flag(vy >= vx)
        state.advance()

    def _op_shr(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        vx = regs.get(instr.x)
        regs.set(instr.x, vx >> 1)
        regs.set_flag(bool(vx & 0x01))
        state.advance()

    def _op_shl(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        vx = regs.get(instr.x)
        regs.set(instr.x, vx << 1)
        regs.set_flag(bool(vx & 0x80))
        state.advance()

    def _op_ld_i(self, state: MachineState, instr: Instruction) -> None:
        state.registers.i = instr.nnn
        state.advance()

    def _op_rnd(self, state: MachineState, instr: Instruction) -> None:
        value = int(self.rng.integers(0, 256))
        state.registers.set(instr.x, value & instr.kk)
        state.advance()

    # ------------------------------------------------------------------ #
    # Display
    # ------------------------------------------------------------------ #
    def _op_drw(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        rows = state.memory.read_block(regs.i, instr.n)
        collision = state.framebuffer.draw_sprite(
            regs.get(instr.x), regs.get(instr.y), rows
        )
        regs.set_flag(collision)
        state.advance()

    # ------------------------------------------------------------------ #
    # Keypad
    # ------------------------------------------------------------------ #
    def _op_skp(self, state: MachineState, instr: Instruction) -> None:
        _skip_if(state, self.keypad.is_pressed(state.registers.get(instr.x)))

    def _op_sknp(self, state: MachineState, instr: Instruction) -> None:
        _skip_if(state, not self.keypad.is_pressed(state.registers.get(instr.x)))

    def _op_ld_vx_k(self, state: MachineState, instr: Instruction) -> None:
        # PC stays on this instruction until resolve_key_wait sees a key.
        state.mode = ExecutionMode.AWAITING_KEY
        state.await_register = instr.x
        self.resolve_key_wait(state)

    # ------------------------------------------------------------------ #
    # Timers, I register and memory transfers
    # ------------------------------------------------------------------ #
    def _op_ld_vx_dt(self, state: MachineState, instr: Instruction) -> None:
        state.registers.set(instr.x, state.timers.delay)
        state.advance()

    def _op_ld_dt_vx(self, state: MachineState, instr: Instruction) -> None:
        state.timers.set_delay(state.registers.get(instr.x))
        state.advance()

    def _op_ld_st_vx(self, state: MachineState, instr: Instruction) -> None:
        state.timers.set_sound(state.registers.get(instr.x))
        state.advance()

    def _op_add_i(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        total = regs.i + regs.get(instr.x)
        regs.i = total
        if self.add_to_i_sets_vf:
            regs.set_flag(total > ADDRESS_MASK)
        state.advance()

    def _op_ld_f(self, state: MachineState, instr: Instruction) -> None:
        state.registers.i = state.registers.get(instr.x) * GLYPH_SIZE
        state.advance()

    def _op_ld_b(self, state: MachineState, instr: Instruction) -> None:
        value = state.registers.get(instr.x)
        digits = (value // 100, (value // 10) % 10, value % 10)
        state.memory.write_block(state.registers.i, digits)
        state.advance()

    def _op_store_regs(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        state.memory.write_block(regs.i, regs.values()[: instr.x + 1])
        state.advance()

    def _op_load_regs(self, state: MachineState, instr: Instruction) -> None:
        regs = state.registers
        for index, value in enumerate(state.memory.read_block(regs.i, instr.x + 1)):
            regs.set(index, value)
        state.advance()


__all__ = ["Dispatcher"]
