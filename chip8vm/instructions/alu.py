"""CHIP-8 ALU operations (8xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.instructions.system import execute_unknown

_NO_FLAG = jnp.zeros((), dtype=jnp.uint8)


def _u8(value) -> jnp.ndarray:
    return jnp.astype(value & 0xFF, jnp.uint8)


def alu_set(vx: int, vy: int) -> tuple[int, int]:
    """8XY0 - Set: VX = VY."""
    return _u8(vy), _NO_FLAG


def alu_or(vx: int, vy: int) -> tuple[int, int]:
    """8XY1 - Binary OR: VX |= VY."""
    return _u8(vx | vy), _NO_FLAG


def alu_and(vx: int, vy: int) -> tuple[int, int]:
    """8XY2 - Binary AND: VX &= VY."""
    return _u8(vx & vy), _NO_FLAG


def alu_xor(vx: int, vy: int) -> tuple[int, int]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return _u8(vx ^ vy), _NO_FLAG


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, VF = carry."""
    result = vx + vy
    return _u8(result), jnp.astype(result > 0xFF, jnp.uint8)


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = 1 when there is no borrow."""
    return _u8(vx - vy), jnp.astype(vx >= vy, jnp.uint8)


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX >>= 1, VF = old LSB."""
    return _u8(vx >> 1), jnp.astype(vx & 1, jnp.uint8)


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when there is no borrow."""
    return _u8(vy - vx), jnp.astype(vy >= vx, jnp.uint8)


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX <<= 1, VF = old MSB."""
    return _u8(vx << 1), jnp.astype((vx & 0x80) >> 7, jnp.uint8)


ALU_OPERATIONS = [
    alu_set, alu_or, alu_and, alu_xor, alu_add,
    alu_sub_xy, alu_shift_right, alu_sub_yx, alu_shift_left,
]

# Low nibble -> index into ALU_OPERATIONS; 8..D and F are undefined
_VALID_OPS = jnp.array([1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=bool)
_OP_INDEX = jnp.array([0, 1, 2, 3, 4, 5, 6, 7, 0, 0, 0, 0, 0, 0, 8, 0], dtype=jnp.int32)
_SETS_FLAG = jnp.array([0, 0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=bool)


def _execute_defined(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    vx = jnp.astype(state.V[instruction.x], jnp.int32)
    vy = jnp.astype(state.V[instruction.y], jnp.int32)

    result, vf = jax.lax.switch(_OP_INDEX[instruction.n], ALU_OPERATIONS, vx, vy)

    # Result first, flag last: for 8FYn the flag wins
    new_V = state.V.at[instruction.x].set(result)
    new_V = jnp.where(_SETS_FLAG[instruction.n], new_V.at[15].set(vf), new_V)
    return state.replace(V=new_V)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    return jax.lax.cond(
        _VALID_OPS[instruction.n],
        _execute_defined,
        execute_unknown,
        state, instruction
    )
