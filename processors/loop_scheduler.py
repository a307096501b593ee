"""Fixed-interval loop scheduling with phase error measurement."""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from config.benchmark import BenchmarkSettings
from config.errors import ConfigurationError

logger = logging.getLogger(__name__)

MODE_SPIN = "spin"
MODE_HYBRID = "hybrid"
SCHEDULER_MODES = (MODE_SPIN, MODE_HYBRID)


def monotonic_micros() -> int:
    return time.monotonic_ns() // 1000


@dataclass(frozen=True)
class SchedulerResult:
    """スケジューラ実行結果"""
    iterations: int
    elapsed_us: int
    phase_error_sum_us: int

    @property
    def mean_phase_error_us(self) -> float:
        if self.iterations == 0:
            return 0.0
        return self.phase_error_sum_us / self.iterations


class LoopScheduler:
    """固定周期ループスケジューラ

    Each iteration starts once ``previous_start + loop_time_us <= now``. The
    default ``spin`` mode polls the clock continuously, burning a CPU core in
    exchange for sub-millisecond start accuracy. ``hybrid`` sleeps until the
    deadline is within ``spin_window_us`` and spins for the rest; the phase
    error is measured the same way in both modes.
    """

    def __init__(
        self,
        loop_time_us: int,
        max_iterations: int,
        clock: Callable[[], int] = monotonic_micros,
        mode: str = MODE_SPIN,
        spin_window_us: int = 1000,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if loop_time_us <= 0:
            raise ConfigurationError(f"Looptime must be greater than zero, got {loop_time_us}")
        if max_iterations < 0:
            raise ConfigurationError(f"Iteration count must not be negative, got {max_iterations}")
        if mode not in SCHEDULER_MODES:
            raise ConfigurationError(f"Unknown scheduler mode {mode!r}, expected one of {SCHEDULER_MODES}")
        self.loop_time_us = loop_time_us
        self.max_iterations = max_iterations
        self.clock = clock
        self.mode = mode
        self.spin_window_us = spin_window_us
        self.sleep = sleep

    @classmethod
    def from_settings(cls, settings: BenchmarkSettings, **kwargs) -> "LoopScheduler":
        settings.validate()
        return cls(settings.loop_time_us, settings.max_iterations, **kwargs)

    def run(self, on_iteration: Callable[[int], None]) -> SchedulerResult:
        loop_time = self.loop_time_us
        first_start = self.clock()
        # 初回はすぐに開始できるように前回開始時刻を1周期前にする
        previous_start = self.clock() - loop_time
        phase_error_sum = 0

        for iteration in range(self.max_iterations):
            now = self._wait_until(previous_start + loop_time)
            phase_error_sum += now - previous_start - loop_time
            on_iteration(iteration)
            previous_start = now

        elapsed = self.clock() - first_start
        result = SchedulerResult(self.max_iterations, elapsed, phase_error_sum)
        logger.debug(
            f"Scheduler finished {result.iterations} iterations in {elapsed} us, "
            f"mean phase error {result.mean_phase_error_us:.1f} us"
        )
        return result

    def _wait_until(self, deadline: int) -> int:
        if self.mode == MODE_HYBRID:
            remaining = deadline - self.clock()
            if remaining > self.spin_window_us:
                self.sleep((remaining - self.spin_window_us) / 1_000_000)
        while True:
            now = self.clock()
            if deadline <= now:
                return now
