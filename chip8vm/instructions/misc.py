"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FONT_START, FONT_HEIGHT, MEMORY_SIZE, ADDRESS_MASK, FLAG_REGISTER
from chip8vm.errors import AddressOutOfBoundsError


def _check_block(state: EmulatorState, length: int, what: str) -> int:
    """Return I, raising when ``length`` bytes from I would leave memory."""
    start = int(state.I)
    if start + length > MEMORY_SIZE:
        raise AddressOutOfBoundsError(start + length - 1, what)
    return start


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register, VF = overflow past 0xFFF."""
    new_i = int(state.I) + int(state.V[instruction.x])
    overflow_flag = int(new_i > ADDRESS_MASK)
    return state.replace(
        I=jnp.asarray(new_i & ADDRESS_MASK, dtype=jnp.uint16),
        V=state.V.at[FLAG_REGISTER].set(jnp.uint8(overflow_flag))
    )


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    With no key down, pc is moved back onto this instruction so the next
    cycle executes it again. With several keys down the highest-indexed one
    is stored.
    """
    if not bool(jnp.any(state.keypad)):
        return state.replace(pc=jnp.asarray((int(state.pc) - 2) & 0xFFFF, dtype=jnp.uint16))
    pressed_key = len(state.keypad) - 1 - int(jnp.argmax(state.keypad[::-1]))
    return state.replace(V=state.V.at[instruction.x].set(jnp.uint8(pressed_key)))


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + int(state.V[instruction.x]) * FONT_HEIGHT
    return state.replace(I=jnp.asarray(font_address, dtype=jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    start = _check_block(state, 3, "BCD store")
    value = int(state.V[instruction.x])

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    return state.replace(memory=state.memory.at[start:start + 3].set(digits))


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I, then I += X + 1."""
    count = instruction.x + 1
    start = _check_block(state, count, "register store")
    new_memory = state.memory.at[start:start + count].set(state.V[:count])
    return state.replace(memory=new_memory, I=jnp.asarray(start + count, dtype=jnp.uint16))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I, then I += X + 1."""
    count = instruction.x + 1
    start = _check_block(state, count, "register load")
    new_V = state.V.at[:count].set(state.memory[start:start + count])
    return state.replace(V=new_V, I=jnp.asarray(start + count, dtype=jnp.uint16))
