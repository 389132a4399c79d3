"""Tests for display operations (DXYN)."""

import jax.numpy as jnp
import pytest
from chip8vm import execute, AddressOutOfBoundsError
from conftest import setup_sprite_in_memory, set_registers, lit_cells


def cell(x, y):
    return (x + y * 64) % 2048


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Test basic sprite drawing without collision."""
        sprite = [0xC0, 0xC0]  # 11000000, 11000000
        state = setup_sprite_in_memory(fresh_state, 0x300, sprite)

        state = execute(state, 0x600A)  # V0 = 10
        state = execute(state, 0x6105)  # V1 = 5
        state = execute(state, 0xA300)  # I = 0x300
        state = execute(state, 0xD012)

        assert lit_cells(state) == {cell(10, 5), cell(11, 5), cell(10, 6), cell(11, 6)}
        assert state.V[15] == 0
        assert state.needs_redraw

    def test_collision_detection(self, fresh_state):
        """Test collision flag when sprite overlaps existing pixels."""
        sprite = [0x80]  # 10000000
        state = setup_sprite_in_memory(fresh_state, 0x400, sprite)

        state = execute(state, 0x6014)  # V0 = 20
        state = execute(state, 0x610A)  # V1 = 10
        state = execute(state, 0xA400)  # I = 0x400

        state = execute(state, 0xD011)
        assert state.display[cell(20, 10)]
        assert state.V[15] == 0

        state = execute(state, 0xD011)
        assert not state.display[cell(20, 10)]  # Pixel erased by XOR
        assert state.V[15] == 1

    def test_collision_is_or_across_sprite(self, fresh_state):
        """A collision in an early row survives later rows without one."""
        state = setup_sprite_in_memory(fresh_state, 0x300, [0x80, 0x80])
        state = state.replace(display=state.display.at[cell(0, 0)].set(True))
        state = set_registers(state, V0=0, V1=0)
        state = execute(state, 0xA300)

        state = execute(state, 0xD012)

        assert state.V[15] == 1
        assert lit_cells(state) == {cell(0, 1)}

    def test_draw_twice_restores_display(self, fresh_state):
        """Drawing the same sprite twice restores the previous picture."""
        state = setup_sprite_in_memory(fresh_state, 0x500, [0xF0, 0x3C, 0xA5])
        state = state.replace(display=state.display.at[cell(9, 16)].set(True).at[cell(40, 3)].set(True))
        before = state.display

        state = set_registers(state, V0=8, V1=15)
        state = execute(state, 0xA500)
        state = execute(state, 0xD013)
        assert not jnp.array_equal(state.display, before)
        state = execute(state, 0xD013)

        assert jnp.array_equal(state.display, before)


class TestScreenWrapping:
    """Test the linear modulo-2048 cell addressing."""

    def test_right_edge_wraps_to_next_row(self, fresh_state):
        """An 8-pixel row at (60, 0) covers cells 60-67."""
        state = setup_sprite_in_memory(fresh_state, 0x600, [0xFF])
        state = set_registers(state, V0=60, V1=0)
        state = execute(state, 0xA600)

        state = execute(state, 0xD011)

        assert lit_cells(state) == set(range(60, 68))
        assert lit_cells(state) == {cell(x, 0) for x in range(60, 64)} | {cell(x, 1) for x in range(4)}

    def test_bottom_edge_wraps_to_top(self, fresh_state):
        """Rows past the last line continue from the top of the display."""
        state = setup_sprite_in_memory(fresh_state, 0x700, [0x80, 0x80, 0x80])
        state = set_registers(state, V0=0, V1=30)
        state = execute(state, 0xA700)

        state = execute(state, 0xD013)

        assert lit_cells(state) == {cell(0, 30), cell(0, 31), 0}

    def test_large_coordinates_wrap_linearly(self, fresh_state):
        """Coordinates are not wrapped per axis, only the final cell index."""
        state = setup_sprite_in_memory(fresh_state, 0x800, [0x80])
        state = set_registers(state, V0=70, V1=37)
        state = execute(state, 0xA800)

        state = execute(state, 0xD011)

        # 70 + 37 * 64 = 2438, 2438 % 2048 = 390 = (6, 6)
        assert lit_cells(state) == {390}


class TestSpriteVariations:
    """Test different sprite configurations."""

    def test_different_sprite_heights(self, fresh_state):
        """Only N rows are drawn."""
        sprite = [0x80, 0x40, 0x20, 0x10, 0x08]  # Diagonal line
        state = setup_sprite_in_memory(fresh_state, 0x900, sprite)
        state = set_registers(state, V0=10, V1=8)
        state = execute(state, 0xA900)

        state = execute(state, 0xD013)

        assert lit_cells(state) == {cell(10, 8), cell(11, 9), cell(12, 10)}

    def test_vf_register_preservation(self, fresh_state):
        """VF is cleared when nothing collides."""
        state = setup_sprite_in_memory(fresh_state, 0xB00, [0x80])
        state = execute(state, 0x6F01)  # VF = 1
        state = set_registers(state, V0=5, V1=5)
        state = execute(state, 0xAB00)

        state = execute(state, 0xD011)

        assert state.V[15] == 0

    def test_font_glyph_draw(self, fresh_state):
        """The built-in "0" glyph draws as a 4x5 ring."""
        state = set_registers(fresh_state, V0=0, V1=0, V2=0)
        state = execute(state, 0xF229)  # I = glyph for V2
        state = execute(state, 0xD015)

        expected = {cell(x, 0) for x in range(4)} | {cell(x, 4) for x in range(4)}
        expected |= {cell(0, y) for y in range(1, 4)} | {cell(3, y) for y in range(1, 4)}
        assert lit_cells(state) == expected

    def test_sprite_fetch_past_memory(self, fresh_state):
        """Reading sprite rows beyond 0xFFF is fatal."""
        state = execute(fresh_state, 0xAFFE)  # I = 0xFFE

        with pytest.raises(AddressOutOfBoundsError):
            execute(state, 0xD013)

    def test_sprite_ending_at_last_byte(self, fresh_state):
        """A sprite whose last row is at 0xFFF is fine."""
        state = setup_sprite_in_memory(fresh_state, 0xFFE, [0x80, 0x80])
        state = execute(state, 0xAFFE)

        state = execute(state, 0xD012)

        assert lit_cells(state) == {cell(0, 0), cell(0, 1)}
