"""Tests for miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
import pytest
from chip8vm import execute, FONT_START, AddressOutOfBoundsError
from conftest import set_registers


class TestTimers:
    """Test timer-related instructions."""

    def test_misc_timer_instructions(self, fresh_state):
        """Test timer set and get operations."""
        state = execute(fresh_state, 0x6030)  # V0 = 48
        state = execute(state, 0xF015)  # Set delay timer to V0
        assert state.delay_timer == 48

        state = execute(state, 0x6120)  # V1 = 32
        state = execute(state, 0xF118)  # Set sound timer to V1
        assert state.sound_timer == 32

        state = execute(state, 0xF207)  # V2 = delay timer
        assert state.V[2] == 48


class TestBCD:
    """Test BCD conversion."""

    @pytest.mark.parametrize("value,digits", [(156, (1, 5, 6)), (0, (0, 0, 0)), (255, (2, 5, 5)), (7, (0, 0, 7))])
    def test_misc_bcd_conversion(self, fresh_state, value, digits):
        """FX33 - Hundreds, tens and ones at I, I+1, I+2."""
        state = set_registers(fresh_state, V0=value)
        state = execute(state, 0xA300)
        state = execute(state, 0xF033)

        assert tuple(int(d) for d in state.memory[0x300:0x303]) == digits
        assert state.I == 0x300

    def test_bcd_past_memory(self, fresh_state):
        """FX33 - Writing past 0xFFF is fatal."""
        state = execute(fresh_state, 0xAFFE)
        with pytest.raises(AddressOutOfBoundsError):
            execute(state, 0xF033)


class TestFont:
    """Test font character addressing."""

    def test_font_all_characters(self, fresh_state):
        """FX29 - Glyph addresses are five bytes apart from the font start."""
        state = fresh_state
        for digit in range(16):
            state = execute(state, 0x6000 | digit)
            state = execute(state, 0xF029)
            assert state.I == FONT_START + digit * 5, f"Font address wrong for digit {digit:X}"

    def test_font_installed_at_start(self, fresh_state):
        """The glyph for F is the last five font bytes."""
        assert [int(b) for b in fresh_state.memory[FONT_START + 75:FONT_START + 80]] == [0xF0, 0x80, 0xF0, 0x80, 0x80]


class TestMemoryOperations:
    """Test store/load register operations."""

    def test_store_load_advances_index(self, fresh_state):
        """FX55/FX65 - I moves past the transferred block."""
        state = set_registers(fresh_state, V0=1, V1=2, V2=3, V3=0x99)
        state = execute(state, 0xA400)

        state = execute(state, 0xF255)  # Store V0-V2
        assert [int(b) for b in state.memory[0x400:0x404]] == [1, 2, 3, 0]
        assert state.I == 0x403

        state = set_registers(state, V0=0, V1=0, V2=0)
        state = execute(state, 0xA400)
        state = execute(state, 0xF165)  # Load V0-V1
        assert state.V[0] == 1
        assert state.V[1] == 2
        assert state.V[2] == 0  # Not part of the block
        assert state.I == 0x402

    def test_store_single_register(self, fresh_state):
        """FX55 with X=0 stores only V0."""
        state = set_registers(fresh_state, V0=0xAB, V1=0xCD)
        state = execute(state, 0xA300)
        state = execute(state, 0xF055)
        assert state.memory[0x300] == 0xAB
        assert state.memory[0x301] == 0
        assert state.I == 0x301

    def test_store_all_registers(self, fresh_state):
        """FX55 with X=F stores all sixteen registers."""
        state = fresh_state.replace(V=jnp.arange(16, 32, dtype=jnp.uint8))
        state = execute(state, 0xA500)
        state = execute(state, 0xFF55)
        assert [int(b) for b in state.memory[0x500:0x510]] == list(range(16, 32))
        assert state.I == 0x510

    def test_store_past_memory(self, fresh_state):
        """FX55 - A block crossing 0xFFF is fatal."""
        state = execute(fresh_state, 0xAFFE)
        with pytest.raises(AddressOutOfBoundsError):
            execute(state, 0xF255)

    def test_load_past_memory(self, fresh_state):
        """FX65 - A block crossing 0xFFF is fatal."""
        state = execute(fresh_state, 0xAFFF)
        with pytest.raises(AddressOutOfBoundsError):
            execute(state, 0xF165)


class TestKeypad:
    """Test keypad operations."""

    def test_skip_if_key_pressed(self, fresh_state):
        """EX9E - Skip if key pressed."""
        state = execute(fresh_state, 0x6005)  # V0 = 5
        state = state.replace(keypad=state.keypad.at[5].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE09E)
        assert state.pc == initial_pc + 2

    def test_skip_if_key_not_pressed(self, fresh_state):
        """EXA1 - Skip if key not pressed."""
        state = execute(fresh_state, 0x6005)
        initial_pc = state.pc

        state = execute(state, 0xE0A1)
        assert state.pc == initial_pc + 2

    def test_no_skip_if_key_pressed(self, fresh_state):
        """EXA1 - No skip while the key is down."""
        state = execute(fresh_state, 0x6005)
        state = state.replace(keypad=state.keypad.at[5].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE0A1)
        assert state.pc == initial_pc

    def test_wait_for_key_blocking(self, fresh_state):
        """FX0A - No key: pc moves back onto the instruction."""
        initial_pc = fresh_state.pc

        state = execute(fresh_state, 0xF00A)

        assert state.pc == initial_pc - 2

    def test_wait_for_key_press(self, fresh_state):
        """FX0A - A held key is stored and execution continues."""
        state = fresh_state.replace(keypad=fresh_state.keypad.at[7].set(True))
        initial_pc = state.pc

        state = execute(state, 0xF30A)

        assert state.V[3] == 7
        assert state.pc == initial_pc

    def test_wait_for_key_prefers_highest_key(self, fresh_state):
        """FX0A - With several keys down the highest index wins."""
        keypad = fresh_state.keypad.at[2].set(True).at[0xB].set(True).at[4].set(True)
        state = fresh_state.replace(keypad=keypad)

        state = execute(state, 0xF00A)

        assert state.V[0] == 0xB


class TestMiscInstructionDispatch:
    """Test misc instruction dispatch logic."""

    def test_add_to_index(self, fresh_state):
        """FX1E - Add VX to I register."""
        state = execute(fresh_state, 0x6010)
        state = execute(state, 0xA300)
        state = execute(state, 0xF01E)

        assert state.I == 0x310
        assert state.V[15] == 0

    def test_add_to_index_overflow(self, fresh_state):
        """FX1E with overflow."""
        state = execute(fresh_state, 0x60FF)
        state = execute(state, 0xAF80)
        state = execute(state, 0xF01E)

        assert state.I == 0x07F  # Wrapped to 12-bit
        assert state.V[15] == 1
