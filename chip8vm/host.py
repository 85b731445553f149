"""Pygame host: window, keyboard, beep and the 60Hz frame loop."""

import argparse
import sys
from typing import Optional, Sequence

import jax
import numpy as np
import pygame

from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, INSTRUCTIONS_PER_FRAME
from chip8vm.emulator import emulate, load_rom_file
from chip8vm.errors import MachineFault, RomLoadError, raise_for_fault
from chip8vm.keypad import Keypad, update_input
from chip8vm.logging import logger
from chip8vm.rendering import chip8_display_to_rgb, create_color_scheme
from chip8vm.state import create_state

FPS = 60

# Hex keypad laid over the left-hand 4x4 block of a QWERTY keyboard:
#   1 2 3 C      1 2 3 4
#   4 5 6 D  ->  Q W E R
#   7 8 9 E      A S D F
#   A 0 B F      Z X C V
DEFAULT_KEY_MAP = {
    0x1: pygame.K_1, 0x2: pygame.K_2, 0x3: pygame.K_3, 0xC: pygame.K_4,
    0x4: pygame.K_q, 0x5: pygame.K_w, 0x6: pygame.K_e, 0xD: pygame.K_r,
    0x7: pygame.K_a, 0x8: pygame.K_s, 0x9: pygame.K_d, 0xE: pygame.K_f,
    0xA: pygame.K_z, 0x0: pygame.K_x, 0xB: pygame.K_c, 0xF: pygame.K_v,
}


def build_beep(frequency: int = 440, duration: float = 0.1, volume: float = 0.1) -> pygame.mixer.Sound:
    """Square wave beep for the initialised mixer."""
    sample_rate, bits, channels = pygame.mixer.get_init()
    period = int(round(sample_rate / frequency))
    amplitude = 2 ** (abs(bits) - 1) - 1

    wave = np.full(period, -amplitude, dtype=np.int16)
    wave[:period // 2] = amplitude
    samples = np.tile(wave, max(1, int(duration * sample_rate) // period))
    if channels > 1:
        samples = np.repeat(samples[:, None], channels, axis=1)

    beep = pygame.sndarray.make_sound(np.ascontiguousarray(samples))
    beep.set_volume(volume)
    return beep


def _init_audio() -> Optional[pygame.mixer.Sound]:
    try:
        return build_beep()
    except pygame.error as e:
        logger.warning(f"Audio unavailable, running muted: {e}")
        return None


def run_emulator(
    rom_path: str,
    scale: int = 8,
    instructions_per_frame: int = INSTRUCTIONS_PER_FRAME,
    color_scheme: str = "classic",
    seed: int = 0,
) -> None:
    """Load a ROM and run it in a pygame window until closed.

    Raises:
        RomLoadError: the ROM cannot be read or is too large.
        MachineFault: the program hit an unrecoverable condition.
    """
    state = create_state(jax.random.PRNGKey(seed))
    state = load_rom_file(state, rom_path)
    on_color, off_color = create_color_scheme(color_scheme)

    pygame.mixer.pre_init(44100, -16, 1, 1024)
    pygame.init()
    try:
        screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
        pygame.display.set_caption(f"CHIP-8 - {rom_path}")
        clock = pygame.time.Clock()
        beep = _init_audio()
        keypad = Keypad(DEFAULT_KEY_MAP)

        logger.info(f"Running at {FPS} FPS, {instructions_per_frame} instructions per frame")
        running = True
        while running:
            clock.tick(FPS)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False

            keypad.refresh(pygame.key.get_pressed())
            state = update_input(state, keypad)
            state = emulate(state, instructions_per_frame=instructions_per_frame)
            raise_for_fault(state)

            if beep is not None and bool(state.sound_event):
                beep.play()

            frame = chip8_display_to_rgb(state.display, scale, on_color, off_color)
            # surfarray is indexed [x, y]
            pygame.surfarray.blit_array(screen, frame.transpose(1, 0, 2))
            pygame.display.flip()
    finally:
        pygame.quit()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="chip8vm", description="Run a CHIP-8 ROM.")
    parser.add_argument("rom", help="path to the ROM file")
    args = parser.parse_args(argv)

    try:
        run_emulator(args.rom)
    except RomLoadError as e:
        logger.error(str(e))
        return 1
    except MachineFault as e:
        logger.error(f"Machine stopped: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
