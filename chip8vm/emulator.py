"""Main CHIP-8 emulator execution engine."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import Opcode, decode, disassemble
from chip8vm.constants import PROGRAM_START, MEMORY_SIZE, MAX_PROGRAM_SIZE
from chip8vm.errors import AddressOutOfBoundsError, ProgramTooLargeError
from chip8vm.logging import logger
from chip8vm.instructions.system import (
    execute_machine_call, execute_clear_screen, execute_return, execute_unknown
)
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chip8vm.instructions.alu import ALU_OPERATIONS, execute_alu_operation
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)


HANDLERS = {
    Opcode.SYS: execute_machine_call,
    Opcode.CLS: execute_clear_screen,
    Opcode.RET: execute_return,
    Opcode.JP: execute_jump,
    Opcode.CALL: execute_call,
    Opcode.SE_IMM: execute_skip_if_equal_immediate,
    Opcode.SNE_IMM: execute_skip_if_not_equal_immediate,
    Opcode.SE_REG: execute_skip_if_equal_register,
    Opcode.LD_IMM: execute_set,
    Opcode.ADD_IMM: execute_add,
    **{op: execute_alu_operation for op in ALU_OPERATIONS},
    Opcode.SNE_REG: execute_skip_if_not_equal_register,
    Opcode.LD_I: execute_set_index,
    Opcode.JP_V0: execute_jump_with_offset,
    Opcode.RND: execute_random,
    Opcode.DRW: execute_display,
    Opcode.SKP: execute_skip_if_key,
    Opcode.SKNP: execute_skip_if_not_key,
    Opcode.LD_VX_DT: execute_get_delay_timer,
    Opcode.LD_VX_K: execute_wait_for_key,
    Opcode.LD_DT_VX: execute_set_delay_timer,
    Opcode.LD_ST_VX: execute_set_sound_timer,
    Opcode.ADD_I: execute_add_to_index,
    Opcode.LD_F: execute_font_character,
    Opcode.LD_B: execute_bcd_conversion,
    Opcode.LD_MEM_VX: execute_store_registers,
    Opcode.LD_VX_MEM: execute_load_registers,
    Opcode.UNKNOWN: execute_unknown,
}


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    ``pc`` is expected to already point past the instruction, as left by
    :func:`fetch`.
    """
    decoded_instruction = decode(instruction)
    return HANDLERS[decoded_instruction.op](state, decoded_instruction)


def _pack_u16(high: int, low: int) -> int:
    """Pack two bytes into a big-endian 16-bit word."""
    return (high << 8) | low


def fetch(state: EmulatorState) -> tuple[EmulatorState, int]:
    """Fetch next instruction from memory and advance pc past it."""
    pc = int(state.pc)
    if pc + 1 >= MEMORY_SIZE:
        raise AddressOutOfBoundsError(pc if pc >= MEMORY_SIZE else pc + 1, "instruction fetch")
    instruction = _pack_u16(int(state.memory[pc]), int(state.memory[pc + 1]))
    return state.replace(pc=jnp.asarray(pc + 2, dtype=jnp.uint16)), instruction


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Count both timers down by one, flagging the sound timer's 1 -> 0 edge."""
    delay = int(state.delay_timer)
    sound = int(state.sound_timer)
    return state.replace(
        delay_timer=jnp.asarray(max(delay - 1, 0), dtype=jnp.uint8),
        sound_timer=jnp.asarray(max(sound - 1, 0), dtype=jnp.uint8),
        sound_triggered=jnp.asarray(sound == 1),
    )


def run_cycle(state: EmulatorState, tick: bool = True) -> tuple[EmulatorState, int]:
    """Run one fetch-decode-execute cycle, then count the timers down.

    With ``tick=False`` the timers are left alone for hosts that drive them
    at their own fixed rate through :func:`tick_timers`; the sound edge is
    then cleared so it never outlives its tick. Returns the new
    state and the instruction word that was executed.
    """
    state, instruction = fetch(state)
    if logger.is_enabled_for("DEBUG"):
        logger.debug(f"0x{int(state.pc) - 2:03X}: {instruction:04X}  {disassemble(instruction)}")
    state = execute(state, instruction)
    if tick:
        state = tick_timers(state)
    else:
        # The sound edge belongs to the tick that produced it only.
        state = state.replace(sound_triggered=jnp.asarray(False))
    return state, instruction


def step(state: EmulatorState, tick: bool = True) -> EmulatorState:
    """Run one cycle and return the new state."""
    state, _ = run_cycle(state, tick)
    return state


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy a raw program into memory at 0x200.

    Either the whole program is copied or, when it does not fit, nothing is.
    No other part of the state changes.
    """
    program = bytes(program)
    if len(program) > MAX_PROGRAM_SIZE:
        raise ProgramTooLargeError(len(program), MAX_PROGRAM_SIZE)
    if not program:
        return state
    program_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(program_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
