"""
Run a ROM headless for a few seconds and save the result as an MP4.

    python examples/record_video.py path/to/rom.ch8 [output.mp4]
"""

import sys

import jax

from chip8vm import create_state, load_rom_file, raise_for_fault, run_frames
from chip8vm.rendering import create_video

SECONDS = 10
FPS = 60


def record(rom_path: str, output: str = "chip8.mp4"):
    state = create_state(jax.random.PRNGKey(0))
    state = load_rom_file(state, rom_path)

    state, displays = run_frames(state, SECONDS * FPS, progress=True)
    raise_for_fault(state)

    create_video(displays, output, fps=FPS, color_scheme="amber")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        sys.exit(__doc__)
    record(*sys.argv[1:3])
