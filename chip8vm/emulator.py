"""Main CHIP-8 emulator execution engine."""

from functools import partial
from os import PathLike
from typing import Union

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState, is_halted
from chip8vm.decode import decode
from chip8vm.constants import (
    PROGRAM_START, MEMORY_SIZE, MAX_ROM_SIZE, INSTRUCTIONS_PER_FRAME, Fault, StepStatus,
)
from chip8vm.errors import RomLoadError, RomTooLargeError, signal_fault
from chip8vm.logging import logger, scan_with_progress
from chip8vm.timers import tick_timers
from chip8vm.instructions.system import execute_system_instruction
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chip8vm.instructions.alu import execute_alu_operation
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import execute_misc_instruction


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute a single CHIP-8 instruction.

    Expects the PC to already point past the instruction, as left by fetch.
    """
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance the PC past it."""
    instruction = _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])
    return state.replace(pc=state.pc + 2), instruction


def _fetch_execute(state: EmulatorState) -> EmulatorState:
    state, instruction = fetch(state)
    return execute(state, instruction)


def _pc_out_of_range(state: EmulatorState) -> EmulatorState:
    return signal_fault(state, Fault.MEMORY_OUT_OF_RANGE, 0, rewind=False)


def step(state: EmulatorState) -> EmulatorState:
    """Run one fetch/execute cycle.

    The returned state's ``status`` is ADVANCED, BLOCKED or FAULTED. A
    faulted machine is left as is.
    """
    def _run(state):
        state = state.replace(status=jnp.astype(StepStatus.ADVANCED, jnp.uint8))
        return jax.lax.cond(
            state.pc <= MEMORY_SIZE - 2,
            _fetch_execute,
            _pc_out_of_range,
            state
        )

    return jax.lax.cond(is_halted(state), lambda s: s, _run, state)


def _emulate_frame(state: EmulatorState, instructions_per_frame: int) -> EmulatorState:
    state = jax.lax.fori_loop(0, instructions_per_frame, lambda _, s: step(s), state)
    return jax.lax.cond(
        is_halted(state),
        lambda s: s.replace(sound_event=jnp.zeros((), dtype=jnp.bool_)),
        tick_timers,
        state
    )


@partial(jax.jit, static_argnames="instructions_per_frame")
def emulate(state: EmulatorState, instructions_per_frame: int = INSTRUCTIONS_PER_FRAME) -> EmulatorState:
    """Run one 60Hz frame: a batch of instructions followed by one timer tick."""
    return _emulate_frame(state, instructions_per_frame)


@partial(jax.jit, static_argnames=("num_frames", "instructions_per_frame", "progress"))
def _run_frames(state, num_frames, instructions_per_frame, progress):
    def frame(state, _):
        state = _emulate_frame(state, instructions_per_frame)
        return state, state.display

    if progress:
        frame = scan_with_progress(num_frames)(frame)

    return jax.lax.scan(frame, state, jnp.arange(num_frames))


def run_frames(
    state: EmulatorState,
    num_frames: int,
    instructions_per_frame: int = INSTRUCTIONS_PER_FRAME,
    progress: bool = False,
) -> tuple[EmulatorState, jnp.ndarray]:
    """Run several frames without a host.

    Returns the final state and the display after every frame, shaped
    (num_frames, 64, 32).
    """
    return _run_frames(state, num_frames, instructions_per_frame, progress)


def framebuffer(state: EmulatorState) -> jnp.ndarray:
    """Display as 2048 row-major cells (64 columns x 32 rows) of 0 or 1."""
    return jnp.astype(state.display.T, jnp.uint8).reshape(-1)


def load_rom(state: EmulatorState, rom: bytes) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    if len(rom) >= MAX_ROM_SIZE:
        raise RomTooLargeError(len(rom), MAX_ROM_SIZE)
    rom_array = jnp.array(list(rom), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom_file(state: EmulatorState, filename: Union[str, PathLike]) -> EmulatorState:
    """Read a ROM file and load it at 0x200."""
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read()
    except OSError as e:
        raise RomLoadError(f"Cannot read ROM '{filename}': {e.strerror or e}") from e

    state = load_rom(state, rom_data)
    logger.info(f"Loaded {filename} ({len(rom_data)} bytes)")
    return state
