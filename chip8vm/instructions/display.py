"""CHIP-8 display operations."""

import jax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, MEMORY_SIZE, Fault
from chip8vm.errors import signal_fault

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def _draw_sprite(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    # Offset of every screen cell inside the sprite, wrapping around the edges
    col_offset = (xx - sprite_x) % SCREEN_WIDTH
    row_offset = (yy - sprite_y) % SCREEN_HEIGHT
    in_sprite = (col_offset < 8) & (row_offset < instruction.n)

    addresses = jnp.minimum(jnp.astype(state.I, jnp.int32) + row_offset, MEMORY_SIZE - 1)
    sprite_bytes = jnp.astype(state.memory[addresses], jnp.int32)
    sprite = (((sprite_bytes >> jnp.clip(7 - col_offset, 0, 7)) & 1) == 1) & in_sprite

    collision = jnp.any(state.display & sprite)
    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[15].set(jnp.astype(collision, jnp.uint8))
    )


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - XOR an N-row sprite from memory[I] at (VX, VY), VF = collision."""
    in_range = jnp.astype(state.I, jnp.int32) + instruction.n <= MEMORY_SIZE
    return jax.lax.cond(
        in_range,
        _draw_sprite,
        lambda s, inst: signal_fault(s, Fault.MEMORY_OUT_OF_RANGE, inst.raw),
        state, instruction
    )
