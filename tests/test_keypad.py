"""Tests for the keypad bridge and the blocking key wait."""

import pytest
from chip8vm import Keypad, update_input, step, StepStatus
from conftest import load_program

KEY_MAP = {key: f"host-{key:X}" for key in range(16)}


class TestKeypad:
    """Test Keypad state tracking."""

    def test_initially_released(self):
        keypad = Keypad(KEY_MAP)
        assert not any(keypad.is_key_down(key) for key in range(16))

    def test_refresh_from_callable(self):
        keypad = Keypad(KEY_MAP)
        keypad.refresh(lambda code: code in ("host-3", "host-E"))

        assert keypad.is_key_down(0x3)
        assert keypad.is_key_down(0xE)
        assert not keypad.is_key_down(0x4)

    def test_refresh_from_snapshot(self):
        """Indexable snapshots, like pygame.key.get_pressed(), are accepted."""
        keypad = Keypad({key: 100 + key for key in range(16)})
        snapshot = [False] * 200
        snapshot[105] = True

        keypad.refresh(snapshot)

        assert keypad.is_key_down(5)
        assert sum(keypad.is_key_down(key) for key in range(16)) == 1

    def test_refresh_replaces_previous_state(self):
        keypad = Keypad(KEY_MAP)
        keypad.refresh(lambda code: code == "host-1")
        keypad.refresh(lambda code: code == "host-2")

        assert not keypad.is_key_down(1)
        assert keypad.is_key_down(2)

    def test_release_all(self):
        keypad = Keypad(KEY_MAP)
        keypad.refresh(lambda code: True)
        keypad.release_all()
        assert not keypad.is_key_down(0)

    def test_incomplete_key_map(self):
        with pytest.raises(ValueError):
            Keypad({key: key for key in range(15)})

    def test_invalid_logical_key(self):
        with pytest.raises(ValueError):
            Keypad(KEY_MAP).is_key_down(16)

    def test_update_input_copies_snapshot(self, fresh_state):
        keypad = Keypad(KEY_MAP)
        keypad.refresh(lambda code: code == "host-A")

        state = update_input(fresh_state, keypad)

        assert bool(state.keypad[0xA])
        assert int(state.keypad.sum()) == 1


class TestWaitForKeyStepping:
    """FX0A blocks across steps until a key is down."""

    def test_blocks_until_key_down(self, fresh_state):
        state = load_program(fresh_state, [0xF30A, 0x1202])
        keypad = Keypad(KEY_MAP)

        for _ in range(5):
            state = step(state)
            assert state.pc == 0x200
            assert state.status == StepStatus.BLOCKED

        keypad.refresh(lambda code: code == "host-5")
        state = update_input(state, keypad)
        state = step(state)

        assert state.pc == 0x202
        assert state.status == StepStatus.ADVANCED
        assert state.V[3] == 5
