"""Throughput and frame error summaries."""

import logging
from dataclasses import dataclass
from typing import Dict, Union

from protocol.frame_analyzer import AnalysisResult
from .benchmark_runner import TransmitReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Throughput:
    bytes_per_second: float
    bits_per_second: float


class StatisticsReporter:
    """統計情報の集計（状態を持たない）"""

    @staticmethod
    def throughput(byte_count: int, elapsed_us: int) -> Throughput:
        if elapsed_us <= 0:
            return Throughput(0.0, 0.0)
        bytes_per_second = byte_count * 1_000_000 / elapsed_us
        return Throughput(bytes_per_second, bytes_per_second * 8)

    @classmethod
    def transmission_summary(cls, report: TransmitReport) -> Dict[str, Union[int, float]]:
        rate = cls.throughput(report.byte_count, report.elapsed_us)
        return {
            "byte_count": report.byte_count,
            "iterations": report.iterations,
            "elapsed_ms": report.elapsed_us / 1000,
            "bytes_per_second": rate.bytes_per_second,
            "bits_per_second": rate.bits_per_second,
            "mean_phase_error_us": report.mean_phase_error_us,
        }

    @staticmethod
    def analysis_summary(result: AnalysisResult) -> Dict[str, Union[int, bool]]:
        return {
            "good_frames": result.good_frames,
            "broken_or_missing": result.broken_or_missing,
            "expected_iterations": result.expected_iterations,
            "broken_frames": result.broken_frames,
            "iteration_jumps": len(result.anomalies),
            "degraded": result.degraded,
        }

    @classmethod
    def log_transmission(cls, report: TransmitReport) -> None:
        s = cls.transmission_summary(report)
        logger.info(
            f"Wrote {s['byte_count']} bytes ({s['bytes_per_second']:.0f} bytes/s, "
            f"{s['bits_per_second']:.0f} baud) with average frame start time error "
            f"{s['mean_phase_error_us']:.0f} us"
        )

    @classmethod
    def log_analysis(cls, result: AnalysisResult) -> None:
        s = cls.analysis_summary(result)
        logger.info(
            f"Good frames {s['good_frames']}, broken/missing iterations {s['broken_or_missing']}, "
            f"total iterations {s['expected_iterations']}"
        )
        if s["broken_frames"] or s["iteration_jumps"]:
            logger.info(
                f"Broken frames detected {s['broken_frames']}, iteration jumps {s['iteration_jumps']}"
            )
        if s["degraded"]:
            logger.warning("Benchmark header was incomplete; counts are based on default values")
