"""Protocol module for benchmark frame encoding, transmission and decoding."""

from .constants import (
    HEADER_INTRO, HEADER_KEYS, ITERATION_JUMP_THRESHOLD, ITERATION_LENGTH, MARKER_LENGTH
)
from .frame_analyzer import (
    END_OF_STREAM, AnalysisResult, DecoderPhase, DecoderState, FrameAnalyzer, FrameEvent, step
)
from .frame_encoder import Frame, FrameEncoder, FrameKind, pack_iteration
from .header import BenchmarkHeader, HeaderParser, HeaderParseResult
from .transmitter import Transmitter

__all__ = [
    "HEADER_INTRO", "HEADER_KEYS", "ITERATION_JUMP_THRESHOLD", "ITERATION_LENGTH", "MARKER_LENGTH",
    "END_OF_STREAM", "AnalysisResult", "DecoderPhase", "DecoderState", "FrameAnalyzer",
    "FrameEvent", "step", "Frame", "FrameEncoder", "FrameKind", "pack_iteration",
    "BenchmarkHeader", "HeaderParser", "HeaderParseResult", "Transmitter",
]
