"""Host keyboard to CHIP-8 keypad bridge."""

from typing import Any, Callable, Mapping, Sequence, Union

import jax.numpy as jnp
import numpy as np

from chip8vm.constants import NUM_KEYS
from chip8vm.state import EmulatorState

KeyProvider = Union[Callable[[Any], bool], Sequence[bool]]


class Keypad:
    """Latest pressed/released state of the 16 logical keys.

    Args:
        key_map: Mapping from logical key (0x0-0xF) to a host key code. All 16
            keys must be mapped.
    """

    def __init__(self, key_map: Mapping[int, Any]):
        missing = [key for key in range(NUM_KEYS) if key not in key_map]
        if missing:
            raise ValueError(f"Key map is missing logical keys: {[f'{k:X}' for k in missing]}")
        self.host_codes = tuple(key_map[key] for key in range(NUM_KEYS))
        self.states = np.zeros(NUM_KEYS, dtype=np.bool_)

    def refresh(self, provider: KeyProvider) -> None:
        """Update every key from a host snapshot.

        ``provider`` is either a callable taking a host key code, or an
        indexable snapshot such as ``pygame.key.get_pressed()``.
        """
        lookup = provider if callable(provider) else provider.__getitem__
        self.states = np.array([bool(lookup(code)) for code in self.host_codes], dtype=np.bool_)

    def is_key_down(self, key: int) -> bool:
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Logical key must be in 0..{NUM_KEYS - 1}, got {key}")
        return bool(self.states[key])

    def release_all(self) -> None:
        self.states = np.zeros(NUM_KEYS, dtype=np.bool_)


def update_input(state: EmulatorState, keypad: Keypad) -> EmulatorState:
    """Copy the keypad snapshot into the machine before a frame runs."""
    return state.replace(keypad=jnp.asarray(keypad.states, dtype=jnp.bool_))
