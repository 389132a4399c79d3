"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, DISPLAY_SIZE, MEMORY_SIZE, FLAG_REGISTER
from chip8vm.errors import AddressOutOfBoundsError

# Pre-computed sprite cell offsets: 16 rows max (N is a nibble), 8 columns each.
rows, cols = jnp.meshgrid(jnp.arange(16), jnp.arange(8), indexing='ij')


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - XOR an N-row sprite from memory[I] onto the display at (VX, VY).

    Cells are addressed linearly as ``(x + col + (y + row) * 64) % 2048``, so a
    sprite running off the right edge continues on the next row and one
    running off the bottom comes back at the top. VF is set when any lit
    pixel is switched off.
    """
    height = instruction.n
    start = int(state.I)
    if start + height > MEMORY_SIZE:
        raise AddressOutOfBoundsError(start + height - 1, "sprite fetch")
    if height == 0:
        return state.replace(V=state.V.at[FLAG_REGISTER].set(0), needs_redraw=jnp.asarray(True))

    sprite_x = int(state.V[instruction.x])
    sprite_y = int(state.V[instruction.y])

    sprite_rows = rows[:height]
    sprite_cols = cols[:height]
    sprite_bytes = state.memory[start:start + height].astype(jnp.int32)
    sprite = ((sprite_bytes[:, None] >> (7 - sprite_cols)) & 1).astype(jnp.bool_)

    cells = (sprite_x + sprite_cols + (sprite_y + sprite_rows) * SCREEN_WIDTH) % DISPLAY_SIZE
    current = state.display[cells]
    collision = jnp.any(current & sprite)

    return state.replace(
        display=state.display.at[cells].set(current ^ sprite),
        V=state.V.at[FLAG_REGISTER].set(collision.astype(jnp.uint8)),
        needs_redraw=jnp.asarray(True),
    )
