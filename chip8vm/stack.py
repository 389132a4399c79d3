"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chip8vm.constants import STACK_SIZE
from chip8vm.errors import StackOverflowError, StackUnderflowError
from chip8vm.state import StackState


def push(stack: StackState, address: int) -> StackState:
    """Push return address onto stack."""
    if stack.pointer >= STACK_SIZE:
        raise StackOverflowError(f"call depth exceeds {STACK_SIZE} frames")
    new_data = stack.data.at[stack.pointer].set(jnp.asarray(address & 0xFFFF, dtype=jnp.uint16))
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, int]:
    """Pop return address from stack."""
    if stack.pointer <= 0:
        raise StackUnderflowError("return with empty stack")
    new_pointer = stack.pointer - 1
    popped_address = int(stack.data[new_pointer])
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
