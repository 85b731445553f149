"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state, load_rom


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def skip_state():
    """Fresh state that skips unknown opcodes."""
    return create_state(unknown_opcode_policy="skip")


@pytest.fixture
def stall_state():
    """Fresh state that stalls on unknown opcodes."""
    return create_state(unknown_opcode_policy="stall")


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def load_program(state, instructions):
    """Helper to load a list of 16-bit instructions at 0x200."""
    rom = b"".join(instruction.to_bytes(2, "big") for instruction in instructions)
    return load_rom(state, rom)
