"""CHIP-8 execution engine."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .config import MachineConfig
from .decoder import Decoder, Instruction
from .dispatcher import Dispatcher
from .errors import Chip8Error, MachineHaltedError
from .keyboard import KeypadState, NO_KEYS
from .machine_state import ExecutionMode, MachineState
from .opcodes import Op
from .tracing import TraceDispatcher

logger = logging.getLogger(__name__)


class Chip8Emulator:
    """Owns the machine state and advances it one tick at a time.

    A tick is one fetch/decode/execute cycle (or one key-wait check while
    an Fx0A is pending) followed by one timer decrement.
    """

    def __init__(
        self,
        program: bytes,
        config: Optional[MachineConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
        trace: Optional[TraceDispatcher] = None,
    ) -> None:
        self.config = config or MachineConfig()
        self.state = MachineState()
        self.state.memory.load_font()
        self.state.memory.load_program(program)
        self.program_size = len(program)

        self.decoder = Decoder()
        self.dispatcher = Dispatcher(
            rng if rng is not None else np.random.default_rng(self.config.seed),
            add_to_i_sets_vf=self.config.add_to_i_sets_vf,
        )
        self.trace = trace

        self.tick_count = 0
        self.instruction_count = 0
        self.halt_error: Optional[Chip8Error] = None
        self.last_instruction: Optional[Instruction] = None

        logger.info("Loaded %d-byte program at 0x%03X", len(program), self.state.pc)

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #
    @property
    def pc(self) -> int:
        return self.state.pc

    @property
    def registers(self):
        return self.state.registers

    @property
    def memory(self):
        return self.state.memory

    @property
    def stack(self):
        return self.state.stack

    @property
    def timers(self):
        return self.state.timers

    @property
    def framebuffer(self):
        return self.state.framebuffer

    @property
    def mode(self) -> ExecutionMode:
        return self.state.mode

    @property
    def halted(self) -> bool:
        return self.state.mode is ExecutionMode.HALTED

    @property
    def awaiting_key(self) -> bool:
        return self.state.mode is ExecutionMode.AWAITING_KEY

    @property
    def sound_active(self) -> bool:
        return self.state.timers.sound_active

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #
    def step(self, keypad: Optional[KeypadState] = None) -> Optional[Instruction]:
        """Run one cycle without touching the timers.

        Returns the executed instruction, or None when the cycle was spent
        waiting for a key. Fatal errors halt the machine and propagate.
        """
        if self.halted:
            raise MachineHaltedError(self.halt_error)
        if keypad is not None:
            self.dispatcher.keypad = keypad

        state = self.state
        if state.mode is ExecutionMode.AWAITING_KEY:
            register = state.await_register
            if self.dispatcher.resolve_key_wait(state) and register is not None:
                self._trace_key_resolved(register)
            return None

        try:
            instr = self.decoder.fetch(state)
            op = self.dispatcher.execute(state, instr)
        except Chip8Error as exc:
            self._halt(exc)
            raise

        self.instruction_count += 1
        self.last_instruction = instr
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s", instr)
        if self.trace is not None:
            self._trace_instruction(instr, op)
        return instr

    def tick(self, keypad: Optional[KeypadState] = None) -> Optional[Instruction]:
        """Run one scheduler tick: a cycle, then one timer decrement."""
        instr = self.step(keypad)
        self.state.timers.tick()
        self.tick_count += 1
        if self.trace is not None:
            self.trace.timers(self.state.timers.delay, self.state.timers.sound)
        return instr

    def run(self, ticks: int, keypad: KeypadState = NO_KEYS) -> int:
        """Tick ``ticks`` times with a fixed keypad; returns ticks executed."""
        for _ in range(ticks):
            self.tick(keypad)
        return ticks

    def _halt(self, exc: Chip8Error) -> None:
        self.state.mode = ExecutionMode.HALTED
        self.halt_error = exc
        logger.error("Halted at PC=0x%03X: %s", self.state.pc, exc)
        if self.trace is not None:
            self.trace.halted(self.state.pc, exc)

    # ------------------------------------------------------------------ #
    # Tracing
    # ------------------------------------------------------------------ #
    def _trace_instruction(self, instr: Instruction, op: Op) -> None:
        trace = self.trace
        assert trace is not None
        state = self.state
        trace.instruction(instr.address, instr.word, instr.mnemonic(), self.instruction_count)
        if op is Op.CALL:
            trace.subroutine_call(instr.nnn, instr.address, state.stack.pointer)
        elif op is Op.RET:
            trace.subroutine_return(instr.address, state.stack.pointer)
        elif op is Op.DRW:
            trace.sprite_drawn(bool(state.registers.vf))
        elif op is Op.LD_VX_K and state.mode is ExecutionMode.RUNNING:
            # A key was already down, so the wait resolved within this cycle.
            self._trace_key_resolved(instr.x)

    def _trace_key_resolved(self, register: int) -> None:
        if self.trace is not None:
            self.trace.key_resolved(register, self.state.registers.get(register))


__all__ = ["Chip8Emulator"]
