"""Generate-and-transmit benchmark run."""

import logging
from dataclasses import dataclass
from typing import Optional

from config.benchmark import BenchmarkSettings, FrameFormat
from protocol.frame_encoder import FrameEncoder, FrameKind
from protocol.header import BenchmarkHeader
from protocol.transmitter import Transmitter
from .loop_scheduler import LoopScheduler, SchedulerResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransmitReport:
    """送信結果"""
    byte_count: int
    full_frames: int
    delta_frames: int
    schedule: SchedulerResult

    @property
    def iterations(self) -> int:
        return self.schedule.iterations

    @property
    def elapsed_us(self) -> int:
        return self.schedule.elapsed_us

    @property
    def mean_phase_error_us(self) -> float:
        return self.schedule.mean_phase_error_us


class BenchmarkRunner:
    """ベンチマーク送信処理

    Writes the header, then one frame per scheduled iteration. Any write
    failure propagates as :class:`TransmitError` and ends the run.
    """

    def __init__(
        self,
        transmitter: Transmitter,
        settings: BenchmarkSettings,
        frame_format: Optional[FrameFormat] = None,
        scheduler: Optional[LoopScheduler] = None,
    ):
        self.settings = settings.validate()
        self.frame_format = (frame_format or FrameFormat()).validate()
        self.encoder = FrameEncoder(self.frame_format)
        self.transmitter = transmitter
        self.scheduler = scheduler or LoopScheduler.from_settings(self.settings)

    @property
    def header(self) -> BenchmarkHeader:
        return BenchmarkHeader.for_run(self.frame_format, self.settings)

    def run(self, settle_s: float = 0.0) -> TransmitReport:
        logger.info(
            f"Running {self.settings.duration_s} second benchmark at looptime "
            f"{self.settings.loop_time_us} us ({self.scheduler.max_iterations} iterations)..."
        )
        self.transmitter.send_header(self.header, settle_s)
        return self.write_frames()

    def write_frames(self) -> TransmitReport:
        counts = {"bytes": 0, "full": 0, "delta": 0}

        def emit(iteration: int) -> None:
            frame = self.encoder.encode(iteration)
            counts["bytes"] += self.transmitter.write_all(frame.data)
            if frame.kind is FrameKind.FULL:
                counts["full"] += 1
            else:
                counts["delta"] += 1

        schedule = self.scheduler.run(emit)
        return TransmitReport(counts["bytes"], counts["full"], counts["delta"], schedule)
