"""CHIP-8 control flow instructions."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.stack import push


def _jump_to(state: EmulatorState, address: int) -> EmulatorState:
    return state.replace(pc=jnp.asarray(address & 0xFFFF, dtype=jnp.uint16))


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return _jump_to(state, instruction.nnn)


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, int(state.pc)))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        if condition_fn(state, instruction):
            return _jump_to(state, int(state.pc) + 2)
        return state
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) == int(state.V[inst.y])
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) != int(state.V[inst.y])
)

# The key index uses the low nibble of VX; the keypad only has 16 keys.
execute_skip_if_key = make_skip_instruction(
    lambda state, inst: bool(state.keypad[int(state.V[inst.x]) & 0xF])
)

execute_skip_if_not_key = make_skip_instruction(
    lambda state, inst: not bool(state.keypad[int(state.V[inst.x]) & 0xF])
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0.

    The target is not wrapped to 12 bits; a target past the end of memory is
    reported by the next fetch.
    """
    return _jump_to(state, instruction.nnn + int(state.V[0]))
