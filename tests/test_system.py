"""Tests for system instructions (0xxx), the call stack and unknown opcodes."""

import pytest
import jax.numpy as jnp
from chip8vm import (
    create_state, execute, step, framebuffer, raise_for_fault, Fault, StepStatus,
    StackOverflowError, StackUnderflowError, UnknownOpcodeError,
)
from conftest import load_program


def test_execute_clear_screen(fresh_state):
    """Test 00E0 - Clear display."""
    state = fresh_state.replace(display=fresh_state.display.at[0, 0].set(True))
    state = state.replace(display=state.display.at[63, 31].set(True))

    state = execute(state, 0x00E0)

    assert jnp.sum(state.display) == 0
    assert jnp.all(framebuffer(state) == 0)


def test_execute_call_and_return(fresh_state):
    """Test 2NNN (call) and 00EE (return) together."""
    state = fresh_state
    initial_pc = state.pc

    state = execute(state, 0x2300)  # Call 0x300
    assert state.pc == 0x300
    assert state.stack.pointer == 1
    assert state.stack.data[0] == initial_pc

    state = execute(state, 0x00EE)  # Return
    assert state.pc == initial_pc
    assert state.stack.pointer == 0


def test_call_return_round_trip_steps(fresh_state):
    """Stepping 2300 then 00EE resumes at call address + 2 with SP unchanged."""
    state = load_program(fresh_state, [0x2300])
    state = state.replace(memory=state.memory.at[0x300:0x302].set(jnp.array([0x00, 0xEE], dtype=jnp.uint8)))
    initial_sp = state.stack.pointer

    state = step(state)
    assert state.pc == 0x300

    state = step(state)
    assert state.pc == 0x202
    assert state.stack.pointer == initial_sp


def test_nested_calls(fresh_state):
    """Returns unwind in reverse order."""
    state = execute(fresh_state.replace(pc=jnp.astype(0x202, jnp.uint16)), 0x2300)
    state = state.replace(pc=jnp.astype(0x302, jnp.uint16))
    state = execute(state, 0x2400)

    state = execute(state, 0x00EE)
    assert state.pc == 0x302
    state = execute(state, 0x00EE)
    assert state.pc == 0x202


def test_return_with_empty_stack_faults(fresh_state):
    """00EE with SP = 0 halts the machine."""
    state = load_program(fresh_state, [0x00EE])

    state = step(state)

    assert state.status == StepStatus.FAULTED
    assert state.fault == Fault.STACK_UNDERFLOW
    assert state.pc == 0x200
    with pytest.raises(StackUnderflowError):
        raise_for_fault(state)


def test_stack_overflow_faults(fresh_state):
    """The 17th nested call halts the machine."""
    state = load_program(fresh_state, [0x2200])  # Recursive call to itself

    for _ in range(16):
        state = step(state)
        assert state.status == StepStatus.ADVANCED
    assert state.stack.pointer == 16

    state = step(state)
    assert state.fault == Fault.STACK_OVERFLOW
    assert state.stack.pointer == 16
    with pytest.raises(StackOverflowError):
        raise_for_fault(state)


class TestUnknownOpcodes:
    """Test the unknown opcode policies."""

    def test_halt_policy(self, fresh_state):
        """Default policy faults and keeps PC on the bad instruction."""
        state = load_program(fresh_state, [0x0123])

        state = step(state)

        assert state.status == StepStatus.FAULTED
        assert state.fault == Fault.UNKNOWN_OPCODE
        assert state.fault_opcode == 0x0123
        assert state.pc == 0x200

        with pytest.raises(UnknownOpcodeError) as excinfo:
            raise_for_fault(state)
        assert excinfo.value.pc == 0x200
        assert excinfo.value.opcode == 0x0123

    def test_halted_machine_is_inert(self, fresh_state):
        """Steps after a fault change nothing."""
        state = load_program(fresh_state, [0x0123, 0x6A05])
        state = step(state)

        halted = step(step(state))

        assert halted.pc == state.pc
        assert halted.V[0xA] == 0
        assert halted.status == StepStatus.FAULTED

    def test_skip_policy(self, skip_state):
        """Skip policy continues with the next instruction."""
        state = load_program(skip_state, [0x0123, 0x6A05])

        state = step(state)
        assert state.status == StepStatus.ADVANCED
        assert state.fault == Fault.NONE
        assert state.pc == 0x202

        state = step(state)
        assert state.V[0xA] == 5

    def test_stall_policy(self, stall_state):
        """Stall policy stays on the bad instruction without faulting."""
        state = load_program(stall_state, [0x0123])

        for _ in range(3):
            state = step(state)
            assert state.status == StepStatus.BLOCKED
            assert state.pc == 0x200
        assert state.fault == Fault.NONE
        raise_for_fault(state)

    def test_invalid_policy_name(self):
        with pytest.raises(ValueError):
            create_state(unknown_opcode_policy="ignore")
