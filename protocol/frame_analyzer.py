"""Resynchronizing decoder for captured benchmark logs.

The frame stream carries no delimiters. Frame boundaries are recovered from
the marker byte, the fixed size of each frame kind and the fill bytes, which
double as an integrity check. On the first fill mismatch the frame is counted
broken and the offending byte is handed back to the marker search, so a single
corruption never hides more than the frame it landed in.
"""

import io
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Iterator, List, NamedTuple, Optional, Tuple, Union

from config.benchmark import FrameFormat
from config.errors import ConfigurationError
from .constants import ITERATION_JUMP_THRESHOLD, ITERATION_LENGTH, ITERATION_MASK, MARKER_LENGTH
from .header import BenchmarkHeader, HeaderParser, HeaderParseResult

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


class EndOfStream:
    """ストリーム終端を表す番兵（バイト値 0-255 とは衝突しない）"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "END_OF_STREAM"


END_OF_STREAM = EndOfStream()

Symbol = Union[int, EndOfStream]


class DecoderPhase(Enum):
    SEEK = "seek"
    IN_FULL = "in_full"
    IN_DELTA = "in_delta"
    DONE = "done"


class FrameEvent(Enum):
    NONE = "none"
    GOOD_FRAME = "good_frame"
    BROKEN_FRAME = "broken_frame"


class DecoderState(NamedTuple):
    phase: DecoderPhase = DecoderPhase.SEEK
    byte_count: int = 0
    iteration: int = 0


class StepResult(NamedTuple):
    state: DecoderState
    event: FrameEvent = FrameEvent.NONE
    iteration: Optional[int] = None
    consumed: bool = True


SEEK_STATE = DecoderState()
DONE_STATE = DecoderState(DecoderPhase.DONE)


def step(state: DecoderState, symbol: Symbol, frame_format: FrameFormat) -> StepResult:
    """状態遷移関数

    Advances the decoder by one symbol. ``consumed`` is False when the symbol
    must be offered again to the returned state (the resynchronization
    pushback); this never happens twice in a row because SEEK consumes
    every symbol.
    """
    if state.phase is DecoderPhase.DONE:
        return StepResult(DONE_STATE, consumed=False)

    if state.phase is DecoderPhase.SEEK:
        if symbol is END_OF_STREAM:
            return StepResult(DONE_STATE)
        if symbol == frame_format.full_marker:
            return StepResult(DecoderState(DecoderPhase.IN_FULL, MARKER_LENGTH, 0))
        if symbol == frame_format.delta_marker:
            return StepResult(DecoderState(DecoderPhase.IN_DELTA, MARKER_LENGTH, 0))
        return StepResult(SEEK_STATE)

    if symbol is END_OF_STREAM:
        # Truncated frame at the end of the log
        return StepResult(DONE_STATE, FrameEvent.BROKEN_FRAME)

    if state.phase is DecoderPhase.IN_FULL:
        size, fill = frame_format.full_size, frame_format.full_fill
    else:
        size, fill = frame_format.delta_size, frame_format.delta_fill

    position = state.byte_count
    iteration = state.iteration
    if position < MARKER_LENGTH + ITERATION_LENGTH:
        shift = 8 * (position - MARKER_LENGTH)
        iteration |= (symbol & 0xFF) << shift
    elif symbol != fill:
        return StepResult(SEEK_STATE, FrameEvent.BROKEN_FRAME, consumed=False)

    position += 1
    if position >= size:
        return StepResult(SEEK_STATE, FrameEvent.GOOD_FRAME, iteration)
    return StepResult(DecoderState(state.phase, position, iteration))


@dataclass(frozen=True)
class IterationAnomaly:
    previous: int
    iteration: int


@dataclass
class AnalysisResult:
    """解析結果"""
    header: BenchmarkHeader
    good_frames: int = 0
    broken_frames: int = 0
    degraded: bool = False
    anomalies: List[IterationAnomaly] = field(default_factory=list)
    good_iterations: List[int] = field(default_factory=list)

    @property
    def expected_iterations(self) -> int:
        return self.header.iterations

    @property
    def broken_or_missing(self) -> int:
        return self.expected_iterations - self.good_frames


class IterationTracker:
    """ループ回数の飛びを検出する（診断用途のみ、判定には影響しない）"""

    def __init__(self, threshold: int = ITERATION_JUMP_THRESHOLD):
        self.threshold = threshold
        self.last: Optional[int] = None

    def observe(self, iteration: int) -> Optional[IterationAnomaly]:
        previous, self.last = self.last, iteration
        if previous is None:
            return None
        # Forward distance modulo 2^32 so the counter wrap is not flagged
        distance = (iteration - previous) & ITERATION_MASK
        if distance > self.threshold:
            return IterationAnomaly(previous, iteration)
        return None


class FrameAnalyzer:
    """ベンチマークログ解析クラス

    ``frame_format`` supplies the markers and fill bytes; sizes and the full
    frame interval come from the log header when present.
    """

    def __init__(self, frame_format: Optional[FrameFormat] = None, debug: bool = False):
        self.frame_format = (frame_format or FrameFormat()).validate()
        self.debug = debug
        self.header_parser = HeaderParser(debug=debug)

    def analyze_bytes(self, data: bytes) -> AnalysisResult:
        return self.analyze(io.BytesIO(data))

    def analyze_file(self, path: str) -> AnalysisResult:
        with open(path, "rb") as f:
            return self.analyze(f)

    def analyze(self, stream: BinaryIO) -> AnalysisResult:
        parsed = self.header_parser.parse(stream)
        frame_format, format_ok = self._resolve_format(parsed)
        result = AnalysisResult(header=parsed.header, degraded=parsed.degraded or not format_ok)
        tracker = IterationTracker()

        state = SEEK_STATE
        symbols = self._symbols(stream)
        symbol = next(symbols)
        offset = 0
        while True:
            outcome = step(state, symbol, frame_format)
            state = outcome.state

            if outcome.event is FrameEvent.GOOD_FRAME:
                result.good_frames += 1
                result.good_iterations.append(outcome.iteration)
                anomaly = tracker.observe(outcome.iteration)
                if anomaly is not None:
                    result.anomalies.append(anomaly)
                    if self.debug:
                        logger.debug(
                            f"Iteration jump from {anomaly.previous} to {anomaly.iteration} near byte {offset}"
                        )
            elif outcome.event is FrameEvent.BROKEN_FRAME:
                result.broken_frames += 1
                if self.debug:
                    logger.debug(f"Broken frame detected near frame byte {offset}")

            if state.phase is DecoderPhase.DONE:
                break
            if outcome.consumed:
                symbol = next(symbols)
                offset += 1

        logger.info(
            f"Decoded {result.good_frames} good frames, {result.broken_frames} broken frames, "
            f"{len(result.anomalies)} iteration jumps"
        )
        return result

    def _resolve_format(self, parsed: HeaderParseResult) -> Tuple[FrameFormat, bool]:
        try:
            return parsed.header.apply_to(self.frame_format).validate(), True
        except ConfigurationError as e:
            logger.warning(f"Header describes an unusable frame format ({e}); using built-in sizes")
            return self.frame_format, False

    @staticmethod
    def _symbols(stream: BinaryIO) -> Iterator[Symbol]:
        while True:
            chunk = stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            yield from chunk
        while True:
            yield END_OF_STREAM
