"""CHIP-8 emulator state structures."""

from typing import Optional

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8vm.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, DISPLAY_SIZE,
    NUM_REGISTERS, NUM_KEYS, STACK_SIZE,
)


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray
    pointer: int = 0


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    The display is a flat row-major array of ``SCREEN_WIDTH * SCREEN_HEIGHT``
    cells; pixel ``(x, y)`` lives at ``(x + y * SCREEN_WIDTH) % DISPLAY_SIZE``.
    """
    rng: jax.Array
    memory: jnp.ndarray
    pc: jnp.ndarray
    display: jnp.ndarray
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    keypad: jnp.ndarray
    V: jnp.ndarray
    I: jnp.ndarray
    needs_redraw: jnp.ndarray
    sound_triggered: jnp.ndarray
    strict_opcodes: bool = field(pytree_node=False, default=False)


def create_state(seed: int = 0, rng: Optional[jax.Array] = None, strict_opcodes: bool = False) -> EmulatorState:
    """Create initial emulator state with font data loaded.

    Every machine owns its random key, so independent states never share a
    random stream. Pass ``rng`` to supply the key directly instead of a seed.
    """
    if rng is None:
        rng = jax.random.PRNGKey(seed)
    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    memory = memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(jnp.array(FONT_DATA, dtype=jnp.uint8))
    return EmulatorState(
        rng=rng,
        memory=memory,
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        display=jnp.zeros(DISPLAY_SIZE, dtype=jnp.bool_),
        stack=StackState(data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16)),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        needs_redraw=jnp.asarray(False),
        sound_triggered=jnp.asarray(False),
        strict_opcodes=strict_opcodes,
    )
