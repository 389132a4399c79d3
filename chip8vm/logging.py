"""Console logging utilities for the CHIP-8 interpreter.

This module provides a small levelled console logger plus callbacks that hook
into ``Interpreter.run`` for visibility into long headless runs, including a
tqdm progress bar.
"""

import time
import sys
from collections import Counter
from typing import Any, Dict, Optional

from tqdm import tqdm

from chip8vm.decode import decode


class ConsoleLogger:
    """Flexible console logger with levels, timestamps and colors."""

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream
        target = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(target, "isatty") and target.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def set_level(self, log_level: str):
        """Change the minimum level that gets printed."""
        self.log_level = log_level.upper()

    def is_enabled_for(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self.is_enabled_for(level):
            formatted = self._format_message(level, message)
            print(formatted, file=self.stream or sys.stdout, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


# Shared by the instruction handlers; frontends adjust its level from config.
logger = ConsoleLogger()


class RunLogger(ConsoleLogger):
    """Specialized logger for interpreter runs with cycle-rate tracking."""

    def __init__(self, name: str = "run", **kwargs):
        super().__init__(name, **kwargs)
        self.last_log_time = time.time()

    def log_run_start(self, config: Dict[str, Any]):
        """Log run configuration and start message."""
        self.info("=" * 60)
        self.info("Starting run with configuration:")
        for key, value in config.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)

    def log_cycle(self, cycle: int, state: Any, total_cycles: int, log_interval: int = 1000):
        """Log machine status every ``log_interval`` cycles."""
        if cycle % log_interval != 0 and cycle != total_cycles - 1:
            return
        current_time = time.time()
        elapsed = current_time - self.start_time
        rate = (cycle + 1) / elapsed if elapsed > 0 else 0.0
        self.info(
            f"Cycle {cycle + 1:6d}/{total_cycles} | "
            f"PC=0x{int(state.pc):03X} I=0x{int(state.I):03X} "
            f"DT={int(state.delay_timer)} ST={int(state.sound_timer)} | "
            f"{rate:.0f} cycles/s"
        )
        self.last_log_time = current_time

    def log_run_end(self, cycles: int, stats: Optional[Dict[str, Any]] = None):
        """Log run completion with final statistics."""
        elapsed = time.time() - self.start_time
        self.info("=" * 60)
        self.info(f"Run completed: {cycles} cycles in {elapsed:.2f}s")
        for key, value in (stats or {}).items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)


class LoggingCallback:
    """Base class for run callbacks."""

    def on_run_start(self, config: Dict[str, Any]):
        """Called before the first cycle."""
        pass

    def on_cycle(self, cycle: int, instruction: int, state: Any):
        """Called after every cycle with the word that was executed."""
        pass

    def on_run_end(self, cycles: int, state: Any):
        """Called after the last cycle, also when the run stops on an error."""
        pass


class ConsoleCallback(LoggingCallback):
    """Console logging callback."""

    def __init__(self, log_interval: int = 1000, logger: Optional[RunLogger] = None):
        self.log_interval = log_interval
        self.logger = logger or RunLogger()
        self.total_cycles = None

    def on_run_start(self, config: Dict[str, Any]):
        self.total_cycles = config.get("cycles", 0)
        self.logger.log_run_start(config)

    def on_cycle(self, cycle: int, instruction: int, state: Any):
        if self.total_cycles:
            self.logger.log_cycle(cycle, state, self.total_cycles, self.log_interval)

    def on_run_end(self, cycles: int, state: Any):
        self.logger.log_run_end(cycles)


class ProgressCallback(LoggingCallback):
    """tqdm progress bar over a fixed number of cycles."""

    def __init__(self, desc: str = None, print_rate: Optional[int] = None, **tqdm_kwargs):
        self.desc = desc
        self.print_rate = print_rate
        self.tqdm_kwargs = tqdm_kwargs
        self.bar = None
        self._pending = 0

    def on_run_start(self, config: Dict[str, Any]):
        total = config.get("cycles", 0)
        if self.print_rate is None:
            self.print_rate = max(1, min(total // 20, 50))
        desc = self.desc or f"Running ({total:,} cycles)"
        for kwarg in ("total", "mininterval", "maxinterval", "miniters"):
            self.tqdm_kwargs.pop(kwarg, None)
        self.bar = tqdm(total=total, desc=desc, unit="cycle", **self.tqdm_kwargs)

    def on_cycle(self, cycle: int, instruction: int, state: Any):
        self._pending += 1
        if self._pending >= self.print_rate:
            self.bar.update(self._pending)
            self._pending = 0

    def on_run_end(self, cycles: int, state: Any):
        if self.bar is not None:
            self.bar.update(self._pending)
            self._pending = 0
            self.bar.close()


class OpcodeStatsCallback(LoggingCallback):
    """Counts executed instruction kinds, keyed by opcode pattern."""

    def __init__(self, top: int = 10, logger: Optional[ConsoleLogger] = None):
        self.top = top
        self.logger = logger
        self.counts = Counter()

    def on_cycle(self, cycle: int, instruction: int, state: Any):
        self.counts[decode(instruction).op.value] += 1

    def get_statistics(self) -> Dict[str, int]:
        """Most frequent opcode patterns, most common first."""
        return dict(self.counts.most_common(self.top))

    def on_run_end(self, cycles: int, state: Any):
        if self.logger is not None:
            for pattern, count in self.get_statistics().items():
                self.logger.info(f"  {pattern}: {count}")
