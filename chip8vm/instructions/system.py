"""CHIP-8 system instructions (0x0xxx) and the unknown-opcode handler."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.errors import UnknownOpcodeError
from chip8vm.logging import logger
from chip8vm.stack import pop


def execute_machine_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """0NNN - Call native routine at NNN; ignored by interpreters."""
    logger.debug(f"ignoring SYS 0x{instruction.nnn:03X}")
    return state


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display), needs_redraw=jnp.asarray(True))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=jnp.asarray(address, dtype=jnp.uint16))


def execute_unknown(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Undecodable word: raise in strict mode, otherwise log and move on."""
    # pc has already moved past the word, so its address is two bytes back.
    address = (int(state.pc) - 2) & 0xFFFF
    if state.strict_opcodes:
        raise UnknownOpcodeError(instruction.raw, address)
    logger.warning(f"unknown opcode 0x{instruction.raw:04X} at 0x{address:03X}, skipping")
    return state
