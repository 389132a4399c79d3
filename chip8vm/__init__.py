"""CHIP-8 interpreter package."""

from chip8vm.state import EmulatorState, StackState, create_state
from chip8vm.emulator import execute, fetch, step, run_cycle, tick_timers, load_program, load_rom
from chip8vm.decode import DecodedInstruction, Opcode, decode, disassemble
from chip8vm.interpreter import Interpreter, InterpreterConfig
from chip8vm.errors import (
    Chip8Error, AddressOutOfBoundsError, StackOverflowError, StackUnderflowError,
    ProgramTooLargeError, UnknownOpcodeError,
)
from chip8vm.constants import *
from chip8vm.rendering import chip8_display_to_rgb, chip8_display_to_argb, create_color_scheme

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "run_cycle",
    "tick_timers",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "Opcode",
    "decode",
    "disassemble",
    "Interpreter",
    "InterpreterConfig",
    "Chip8Error",
    "AddressOutOfBoundsError",
    "StackOverflowError",
    "StackUnderflowError",
    "ProgramTooLargeError",
    "UnknownOpcodeError",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "DISPLAY_SIZE",
    "MAX_PROGRAM_SIZE",
    "chip8_display_to_rgb",
    "chip8_display_to_argb",
    "create_color_scheme",
]
