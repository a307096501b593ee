"""Processors module for benchmark scheduling and reporting."""

from .benchmark_runner import BenchmarkRunner, TransmitReport
from .loop_scheduler import LoopScheduler, SchedulerResult, monotonic_micros
from .statistics import StatisticsReporter, Throughput

__all__ = [
    "BenchmarkRunner",
    "TransmitReport",
    "LoopScheduler",
    "SchedulerResult",
    "monotonic_micros",
    "StatisticsReporter",
    "Throughput",
]
