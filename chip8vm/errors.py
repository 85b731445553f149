"""Error types and fault signalling for the CHIP-8 machine.

Compiled code cannot raise, so a failing instruction records a fault on the
state with :func:`signal_fault`. The host converts that record into an
exception with :func:`raise_for_fault` after each frame.
"""

import jax.numpy as jnp

from chip8vm.constants import Fault, StepStatus
from chip8vm.state import EmulatorState


class Chip8Error(Exception):
    """Base class for all emulator errors."""


class RomLoadError(Chip8Error):
    """ROM could not be read."""


class RomTooLargeError(RomLoadError):
    """ROM does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"ROM is {size} bytes, must be smaller than {limit} bytes")
        self.size = size
        self.limit = limit


class MachineFault(Chip8Error):
    """Machine instance stopped and cannot continue."""

    description = "machine fault"

    def __init__(self, pc: int, opcode: int):
        super().__init__(f"{self.description} at 0x{pc:03X} (opcode 0x{opcode:04X})")
        self.pc = pc
        self.opcode = opcode


class UnknownOpcodeError(MachineFault):
    description = "unknown opcode"


class StackOverflowError(MachineFault):
    description = "stack overflow"


class StackUnderflowError(MachineFault):
    description = "return with empty stack"


class MemoryAccessError(MachineFault):
    description = "memory access out of range"


FAULT_ERRORS = {
    Fault.UNKNOWN_OPCODE: UnknownOpcodeError,
    Fault.STACK_OVERFLOW: StackOverflowError,
    Fault.STACK_UNDERFLOW: StackUnderflowError,
    Fault.MEMORY_OUT_OF_RANGE: MemoryAccessError,
}


def signal_fault(state: EmulatorState, fault: int, opcode, rewind: bool = True) -> EmulatorState:
    """Mark the state as faulted.

    With ``rewind`` the PC is moved back onto the faulting instruction, which
    fetch had already stepped over.
    """
    pc = state.pc - 2 if rewind else state.pc
    return state.replace(
        pc=jnp.astype(pc, jnp.uint16),
        status=jnp.astype(StepStatus.FAULTED, jnp.uint8),
        fault=jnp.astype(fault, jnp.uint8),
        fault_opcode=jnp.astype(opcode, jnp.uint16),
    )


def raise_for_fault(state: EmulatorState) -> None:
    """Raise the matching MachineFault if the instance has faulted."""
    fault = int(state.fault)
    if fault == Fault.NONE:
        return
    error_cls = FAULT_ERRORS.get(fault, MachineFault)
    raise error_cls(int(state.pc), int(state.fault_opcode))
