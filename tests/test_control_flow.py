"""Tests for control flow instructions."""

from chip8vm import execute, step, Fault, StepStatus
from conftest import load_program


class TestJump:
    """Test jump instructions."""

    def test_execute_jump(self, fresh_state):
        """1NNN - Jump to address."""
        state = execute(fresh_state, 0x1ABC)
        assert state.pc == 0xABC

    def test_jump_with_offset(self, fresh_state):
        """BNNN - Jump to NNN + V0."""
        state = fresh_state.replace(V=fresh_state.V.at[0].set(0x10))
        state = execute(state, 0xB300)
        assert state.pc == 0x310

    def test_jump_with_offset_ignores_vx(self, fresh_state):
        """BNNN - Only V0 is added, never VX."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0x20))
        state = execute(state, 0xB300)
        assert state.pc == 0x300

    def test_jump_with_offset_past_memory_faults_on_fetch(self, fresh_state):
        """BNNN past 0xFFF is not wrapped; the next fetch faults."""
        state = fresh_state.replace(V=fresh_state.V.at[0].set(0x10))
        state = load_program(state, [0xBFFF])

        state = step(state)
        assert state.pc == 0x100F
        assert state.status == StepStatus.ADVANCED

        state = step(state)
        assert state.fault == Fault.MEMORY_OUT_OF_RANGE
        assert state.status == StepStatus.FAULTED


class TestSkipInstructions:
    """Test all skip instruction variants."""

    def test_skip_if_equal_immediate_true(self, fresh_state):
        """3XNN - Should skip when VX == NN."""
        state = fresh_state.replace(V=fresh_state.V.at[5].set(0x42))
        initial_pc = state.pc

        state = execute(state, 0x3542)
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_immediate_false(self, fresh_state):
        """3XNN - Should not skip when VX != NN."""
        state = fresh_state.replace(V=fresh_state.V.at[5].set(0x41))
        initial_pc = state.pc

        state = execute(state, 0x3542)
        assert state.pc == initial_pc

    def test_skip_if_not_equal_immediate_true(self, fresh_state):
        """4XNN - Should skip when VX != NN."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0x10))
        initial_pc = state.pc

        state = execute(state, 0x4320)
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_immediate_false(self, fresh_state):
        """4XNN - Should not skip when VX == NN."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0x20))
        initial_pc = state.pc

        state = execute(state, 0x4320)
        assert state.pc == initial_pc

    def test_skip_if_equal_register_true(self, fresh_state):
        """5XY0 - Should skip when VX == VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x55))
        state = state.replace(V=state.V.at[2].set(0x55))
        initial_pc = state.pc

        state = execute(state, 0x5120)
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_register_false(self, fresh_state):
        """5XY0 - Should not skip when VX != VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x55))
        state = state.replace(V=state.V.at[2].set(0x44))
        initial_pc = state.pc

        state = execute(state, 0x5120)
        assert state.pc == initial_pc

    def test_skip_if_not_equal_register_true(self, fresh_state):
        """9XY0 - Should skip when VX != VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[7].set(0xAA))
        state = state.replace(V=state.V.at[8].set(0xBB))
        initial_pc = state.pc

        state = execute(state, 0x9780)
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_register_false(self, fresh_state):
        """9XY0 - Should not skip when VX == VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[7].set(0xAA))
        state = state.replace(V=state.V.at[8].set(0xAA))
        initial_pc = state.pc

        state = execute(state, 0x9780)
        assert state.pc == initial_pc

    def test_register_skip_with_nonzero_low_nibble_is_unknown(self, fresh_state):
        """5XY1 and 9XY1 are not valid instructions."""
        for instruction in (0x5121, 0x9121):
            state = execute(fresh_state, instruction)
            assert state.fault == Fault.UNKNOWN_OPCODE

    def test_skip_takes_four_bytes_per_step(self, fresh_state):
        """A taken skip moves PC by 4 from the skip instruction."""
        state = load_program(fresh_state, [0x3000, 0x6A01, 0x6B02])

        state = step(state)  # V0 == 0, skip 6A01
        assert state.pc == 0x204

        state = step(state)
        assert state.V[0xA] == 0
        assert state.V[0xB] == 2


class TestKeySkips:
    """Test EX9E/EXA1."""

    def test_skip_if_key_pressed(self, fresh_state):
        """EX9E - Skip if key VX pressed."""
        state = execute(fresh_state, 0x6005)  # V0 = 5
        state = state.replace(keypad=state.keypad.at[5].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE09E)
        assert state.pc == initial_pc + 2

    def test_no_skip_if_key_not_pressed(self, fresh_state):
        """EX9E - No skip when key is up."""
        state = execute(fresh_state, 0x6005)
        initial_pc = state.pc

        state = execute(state, 0xE09E)
        assert state.pc == initial_pc

    def test_skip_if_key_not_pressed(self, fresh_state):
        """EXA1 - Skip if key VX not pressed."""
        state = execute(fresh_state, 0x6005)
        initial_pc = state.pc

        state = execute(state, 0xE0A1)
        assert state.pc == initial_pc + 2

    def test_no_skip_if_key_pressed(self, fresh_state):
        """EXA1 - No skip when key is down."""
        state = execute(fresh_state, 0x6005)
        state = state.replace(keypad=state.keypad.at[5].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE0A1)
        assert state.pc == initial_pc

    def test_unknown_key_instruction(self, fresh_state):
        """EX00 is not a valid instruction."""
        state = execute(fresh_state, 0xE000)
        assert state.fault == Fault.UNKNOWN_OPCODE
