"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8vm.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, MEMORY_SIZE, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS, StepStatus, Fault, UnknownOpcodePolicy,
)


@dataclass(frozen=True)
class StackState:
    """Return address stack for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


class EmulatorState(PyTreeNode):
    """Complete state of one CHIP-8 machine.

    The display is indexed ``[x, y]``. ``status`` holds the result of the last
    step; once ``fault`` is set the instance no longer executes.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    stack: StackState = field(default_factory=lambda: StackState())
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_event: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    status: jnp.ndarray = field(default_factory=lambda: jnp.astype(StepStatus.ADVANCED, jnp.uint8))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.astype(Fault.NONE, jnp.uint8))
    fault_opcode: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    unknown_opcode_policy: str = field(pytree_node=False, default=UnknownOpcodePolicy.HALT)


def create_state(
    rng: jax.random.PRNGKey = jax.random.PRNGKey(0),
    unknown_opcode_policy: str = UnknownOpcodePolicy.HALT,
) -> EmulatorState:
    """Create a reset machine with the font table loaded."""
    if unknown_opcode_policy not in UnknownOpcodePolicy.ALL:
        raise ValueError(
            f"Unknown opcode policy '{unknown_opcode_policy}'. "
            f"Available: {list(UnknownOpcodePolicy.ALL)}"
        )
    state = EmulatorState(rng, unknown_opcode_policy=unknown_opcode_policy)
    font = jnp.array(FONT_DATA, dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(font))


def is_halted(state: EmulatorState) -> jnp.ndarray:
    """True once the instance has faulted."""
    return state.fault != Fault.NONE
