"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import (
    ADDRESS_MASK, FONT_START, FONT_GLYPH_SIZE, MEMORY_SIZE, NUM_KEYS, NUM_REGISTERS, Fault, StepStatus,
)
from chip8vm.errors import signal_fault
from chip8vm.instructions.system import execute_unknown


def _memory_fault(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    return signal_fault(state, Fault.MEMORY_OUT_OF_RANGE, instruction.raw)


def _checked(last_offset_fn, access_fn):
    """Run access_fn only if I + last_offset_fn(instruction) is a valid address."""
    def execute(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        last_address = jnp.astype(state.I, jnp.int32) + last_offset_fn(instruction)
        return jax.lax.cond(
            last_address < MEMORY_SIZE,
            access_fn,
            _memory_fault,
            state, instruction
        )
    return execute


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I. VF = 1 if the sum passes 0xFFF; I is kept to 12 bits."""
    new_i = jnp.astype(state.I, jnp.int32) + state.V[instruction.x]
    overflow = jnp.astype(new_i > ADDRESS_MASK, jnp.uint8)
    return state.replace(
        I=jnp.astype(new_i & ADDRESS_MASK, jnp.uint16),
        V=state.V.at[15].set(overflow)
    )


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Keys are scanned 0..F and the last pressed one wins, so the highest
    pressed key is stored. With no key down the PC is rewound and the step
    reports BLOCKED, so the same instruction runs again next step.
    """
    def key_pressed_action(state):
        pressed_key = NUM_KEYS - 1 - jnp.argmax(state.keypad[::-1])
        return state.replace(V=state.V.at[instruction.x].set(jnp.astype(pressed_key, jnp.uint8)))

    def wait_action(state):
        return state.replace(
            pc=state.pc - 2,
            status=jnp.astype(StepStatus.BLOCKED, jnp.uint8),
        )

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.int32) * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def _bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    value = state.V[instruction.x]
    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.astype(state.I, jnp.int32) + jnp.arange(3)
    return state.replace(memory=state.memory.at[indices].set(digits))


def _store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    # Indices past the end of memory are dropped by the scatter
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    current_memory_values = state.memory[base_indices]
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    return state.replace(
        memory=state.memory.at[base_indices].set(new_memory_values),
        I=_advance_index(state, instruction),
    )


def _load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    memory_values = state.memory[base_indices]
    return state.replace(
        V=jnp.where(register_mask, memory_values, state.V),
        I=_advance_index(state, instruction),
    )


def _advance_index(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    return jnp.astype((jnp.astype(state.I, jnp.int32) + instruction.x + 1) & ADDRESS_MASK, jnp.uint16)


execute_bcd_conversion = _checked(lambda inst: 2, _bcd_conversion)
execute_bcd_conversion.__doc__ = """FX33 - Store BCD digits of VX at I, I+1, I+2."""

execute_store_registers = _checked(lambda inst: inst.x, _store_registers)
execute_store_registers.__doc__ = """FX55 - Store V0..VX at memory[I..], then I += X + 1."""

execute_load_registers = _checked(lambda inst: inst.x, _load_registers)
execute_load_registers.__doc__ = """FX65 - Load V0..VX from memory[I..], then I += X + 1."""


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions using arithmetic switch."""
    is_0x07 = instruction.nn == 0x07
    is_0x0A = instruction.nn == 0x0A
    is_0x15 = instruction.nn == 0x15
    is_0x18 = instruction.nn == 0x18
    is_0x1E = instruction.nn == 0x1E
    is_0x29 = instruction.nn == 0x29
    is_0x33 = instruction.nn == 0x33
    is_0x55 = instruction.nn == 0x55
    is_0x65 = instruction.nn == 0x65

    switch_index = (
        is_0x07 * 0 +
        is_0x0A * 1 +
        is_0x15 * 2 +
        is_0x18 * 3 +
        is_0x1E * 4 +
        is_0x29 * 5 +
        is_0x33 * 6 +
        is_0x55 * 7 +
        is_0x65 * 8 +
        (~(is_0x07 | is_0x0A | is_0x15 | is_0x18 | is_0x1E | is_0x29 | is_0x33 | is_0x55 | is_0x65)) * 9
    )

    return jax.lax.switch(
        switch_index,
        [
            execute_get_delay_timer,
            execute_wait_for_key,
            execute_set_delay_timer,
            execute_set_sound_timer,
            execute_add_to_index,
            execute_font_character,
            execute_bcd_conversion,
            execute_store_registers,
            execute_load_registers,
            execute_unknown,
        ],
        state, instruction
    )
