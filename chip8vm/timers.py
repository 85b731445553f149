"""CHIP-8 delay and sound timers."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Advance both 60Hz timers by one frame.

    ``sound_event`` is raised only on the tick where the sound timer goes from
    1 to 0, so the host plays the beep once per expiry.
    """
    sound_event = state.sound_timer == 1
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
        sound_event=sound_event,
    )
