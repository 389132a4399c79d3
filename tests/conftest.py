"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state, Interpreter, InterpreterConfig


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def strict_state():
    """Provide a fresh state that raises on unknown opcodes."""
    return create_state(strict_opcodes=True)


@pytest.fixture
def interpreter():
    """Provide an interpreter counting timers down every cycle."""
    return Interpreter(InterpreterConfig(seed=0))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **values):
    """Helper to set registers by name, e.g. ``set_registers(state, V1=0x10)``."""
    V = state.V
    for name, value in values.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def lit_cells(state):
    """Indices of all set display cells."""
    return set(int(i) for i in jnp.nonzero(state.display)[0])
