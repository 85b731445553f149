"""CHIP-8 system instructions (0x0xxx) and unknown opcode handling."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import Fault, StepStatus, UnknownOpcodePolicy
from chip8vm.errors import signal_fault
from chip8vm.logging import logger
from chip8vm.stack import pop


def _report_unknown_opcode(opcode, pc):
    logger.warning(f"Unknown opcode 0x{int(opcode):04X} at 0x{int(pc):03X}")


def execute_unknown(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Handle an undecodable instruction according to the state's policy.

    halt: fault the instance. skip: report and continue with the next
    instruction. stall: report and stay on this instruction.
    """
    policy = state.unknown_opcode_policy
    if policy == UnknownOpcodePolicy.HALT:
        return signal_fault(state, Fault.UNKNOWN_OPCODE, instruction.raw)

    jax.debug.callback(_report_unknown_opcode, instruction.raw, state.pc - 2)
    if policy == UnknownOpcodePolicy.STALL:
        return state.replace(
            pc=state.pc - 2,
            status=jnp.astype(StepStatus.BLOCKED, jnp.uint8),
        )
    return state


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address, underflow = pop(state.stack)
    return jax.lax.cond(
        underflow,
        lambda s: signal_fault(s, Fault.STACK_UNDERFLOW, instruction.raw),
        lambda s: s.replace(stack=stack, pc=address),
        state
    )


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions. 0NNN machine code calls are not supported."""
    return jax.lax.cond(
        0x00E0 == instruction.raw,
        execute_clear_screen,
        lambda state, instruction: jax.lax.cond(
            0x00EE == instruction.raw,
            execute_return,
            execute_unknown,
            state, instruction
        ),
        state, instruction
    )
