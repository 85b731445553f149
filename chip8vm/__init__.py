"""CHIP-8 emulator package."""

from chip8vm.state import EmulatorState, StackState, create_state, is_halted
from chip8vm.emulator import (
    execute, fetch, step, emulate, run_frames, framebuffer, load_rom, load_rom_file,
)
from chip8vm.decode import DecodedInstruction, decode
from chip8vm.timers import tick_timers
from chip8vm.keypad import Keypad, update_input
from chip8vm.errors import (
    Chip8Error, RomLoadError, RomTooLargeError, MachineFault, UnknownOpcodeError,
    StackOverflowError, StackUnderflowError, MemoryAccessError, raise_for_fault,
)
from chip8vm.constants import *
from chip8vm.rendering import chip8_display_to_rgb, create_color_scheme

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "is_halted",
    "fetch",
    "execute",
    "step",
    "emulate",
    "run_frames",
    "framebuffer",
    "load_rom",
    "load_rom_file",
    "DecodedInstruction",
    "decode",
    "tick_timers",
    "Keypad",
    "update_input",
    "Chip8Error",
    "RomLoadError",
    "RomTooLargeError",
    "MachineFault",
    "UnknownOpcodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "MemoryAccessError",
    "raise_for_fault",
    "PROGRAM_START",
    "FONT_START",
    "MEMORY_SIZE",
    "MAX_ROM_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "INSTRUCTIONS_PER_FRAME",
    "StepStatus",
    "Fault",
    "UnknownOpcodePolicy",
    "chip8_display_to_rgb",
    "create_color_scheme",
]
