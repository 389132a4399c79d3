"""Stateful interpreter facade for frontends driving the emulator."""

from typing import Callable, List, Optional, Sequence

import numpy as np
import jax.numpy as jnp
from chex import dataclass

from chip8vm.constants import NUM_KEYS
from chip8vm.emulator import run_cycle, tick_timers, load_program
from chip8vm.logging import LoggingCallback
from chip8vm.state import EmulatorState, create_state

TIMER_MODES = ("cycle", "host")


@dataclass(frozen=True)
class InterpreterConfig:
    """Interpreter settings.

    Attributes:
        seed: Seed for the machine's random key (CXNN)
        strict_opcodes: Raise UnknownOpcodeError instead of logging and skipping
        timer_mode: "cycle" counts timers down after every instruction,
            "host" leaves it to the caller through ``tick_timers``
    """
    seed: int = 0
    strict_opcodes: bool = False
    timer_mode: str = "cycle"


class Interpreter:
    """A CHIP-8 machine owned by a single driving loop.

    Wraps the immutable :class:`EmulatorState` and swaps in the new state
    after every operation. Not safe for concurrent use.
    """

    def __init__(self, config: Optional[InterpreterConfig] = None):
        self.config = config if config is not None else InterpreterConfig()
        if self.config.timer_mode not in TIMER_MODES:
            raise ValueError(
                f"Unknown timer mode '{self.config.timer_mode}'. Available: {list(TIMER_MODES)}"
            )
        self._tone_listeners: List[Callable[[], None]] = []
        self._program = b""
        self.state = self._fresh_state()

    def _fresh_state(self) -> EmulatorState:
        return create_state(self.config.seed, strict_opcodes=self.config.strict_opcodes)

    def load(self, program: bytes):
        """Copy a raw program to 0x200; nothing is copied if it is too large."""
        self.state = load_program(self.state, program)
        self._program = bytes(program)

    def load_rom(self, filename: str):
        """Load a ROM file from disk."""
        with open(filename, "rb") as f:
            self.load(f.read())

    def reset(self):
        """Return to power-on state and reload the last program, if any."""
        self.state = load_program(self._fresh_state(), self._program)

    def step(self) -> None:
        """Execute one cycle.

        Errors from the emulator propagate unchanged; the state is left as it
        was before the failing cycle.
        """
        self._cycle()

    def _cycle(self) -> int:
        ticks = self.config.timer_mode == "cycle"
        self.state, instruction = run_cycle(self.state, tick=ticks)
        if ticks:
            self._emit_tone()
        return instruction

    def tick_timers(self):
        """Count the timers down once (60 Hz in host timer mode)."""
        self.state = tick_timers(self.state)
        self._emit_tone()

    def _emit_tone(self):
        if bool(self.state.sound_triggered):
            for listener in self._tone_listeners:
                listener()

    def add_tone_listener(self, callback: Callable[[], None]):
        """Register a callback fired whenever the sound timer reaches zero."""
        self._tone_listeners.append(callback)

    def set_key(self, key: int, pressed: bool):
        """Set the down state of keypad key 0x0-0xF."""
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key index must be in [0, {NUM_KEYS}), got {key}")
        self.state = self.state.replace(keypad=self.state.keypad.at[key].set(bool(pressed)))

    def set_keys(self, keys: Sequence[bool]):
        """Replace the whole keypad state at once."""
        if len(keys) != NUM_KEYS:
            raise ValueError(f"Expected {NUM_KEYS} key states, got {len(keys)}")
        self.state = self.state.replace(keypad=jnp.array(keys, dtype=jnp.bool_))

    @property
    def keypad(self) -> np.ndarray:
        return np.array(self.state.keypad)

    @property
    def framebuffer(self) -> np.ndarray:
        """Read-only copy of the 2048 display cells, row-major."""
        pixels = np.array(self.state.display, dtype=np.bool_)
        pixels.setflags(write=False)
        return pixels

    @property
    def needs_redraw(self) -> bool:
        return bool(self.state.needs_redraw)

    def consume_redraw(self) -> bool:
        """Return the redraw flag and clear it."""
        needs_redraw = self.needs_redraw
        if needs_redraw:
            self.state = self.state.replace(needs_redraw=jnp.asarray(False))
        return needs_redraw

    def run(self, cycles: int, callbacks: Optional[Sequence[LoggingCallback]] = None) -> int:
        """Execute ``cycles`` cycles, reporting to ``callbacks``.

        Returns the number of cycles completed. An emulator error stops the
        run after ``on_run_end`` has been delivered, then propagates.
        """
        callbacks = list(callbacks or [])
        config = {
            "cycles": cycles,
            "seed": self.config.seed,
            "strict_opcodes": self.config.strict_opcodes,
            "timer_mode": self.config.timer_mode,
        }
        for callback in callbacks:
            callback.on_run_start(config)

        completed = 0
        try:
            for cycle in range(cycles):
                instruction = self._cycle()
                completed += 1
                for callback in callbacks:
                    callback.on_cycle(cycle, instruction, self.state)
        finally:
            for callback in callbacks:
                callback.on_run_end(completed, self.state)
        return completed
