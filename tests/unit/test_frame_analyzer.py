import os
import sys
from dataclasses import replace

import pytest

# テストファイルからプロジェクトルートへのパス
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from config import BenchmarkSettings, FrameFormat
from protocol.frame_analyzer import (
    END_OF_STREAM, SEEK_STATE, DecoderPhase, DecoderState, FrameAnalyzer, FrameEvent,
    IterationTracker, step
)
from protocol.frame_encoder import FrameEncoder, pack_iteration
from protocol.header import BenchmarkHeader

FMT = FrameFormat()


def header_for(count: int, frame_format: FrameFormat = FMT) -> BenchmarkHeader:
    return replace(BenchmarkHeader.for_run(frame_format, BenchmarkSettings()), iterations=count)


def build_log(count: int, frame_format: FrameFormat = FMT) -> bytearray:
    return bytearray(header_for(count, frame_format).to_bytes() + FrameEncoder(frame_format).encode_range(count))


def frame_offset(log: bytes, index: int) -> int:
    """index 番目のフレームの開始位置"""
    header_length = log.index(b"\n\n") + 2
    encoder = FrameEncoder(FMT)
    return header_length + sum(len(encoder.encode(i)) for i in range(index))


class TestStep:

    def test_seek_enters_full_frame_on_full_marker(self):
        outcome = step(SEEK_STATE, ord("I"), FMT)
        assert outcome.state == DecoderState(DecoderPhase.IN_FULL, 1, 0)
        assert outcome.event is FrameEvent.NONE

    def test_seek_enters_delta_frame_on_delta_marker(self):
        outcome = step(SEEK_STATE, ord("P"), FMT)
        assert outcome.state.phase is DecoderPhase.IN_DELTA

    def test_seek_skips_other_bytes(self):
        for value in (0x00, 0xA0, 0xC7, ord("\n")):
            outcome = step(SEEK_STATE, value, FMT)
            assert outcome.state == SEEK_STATE
            assert outcome.consumed

    def test_seek_at_end_of_stream_finishes(self):
        outcome = step(SEEK_STATE, END_OF_STREAM, FMT)
        assert outcome.state.phase is DecoderPhase.DONE
        assert outcome.event is FrameEvent.NONE

    def test_end_of_stream_mid_frame_counts_broken(self):
        state = DecoderState(DecoderPhase.IN_DELTA, 7, 3)
        outcome = step(state, END_OF_STREAM, FMT)
        assert outcome.state.phase is DecoderPhase.DONE
        assert outcome.event is FrameEvent.BROKEN_FRAME

    def test_end_of_stream_is_not_a_byte_value(self):
        assert END_OF_STREAM not in range(256)

    def test_iteration_assembled_little_endian(self):
        state = step(SEEK_STATE, ord("P"), FMT).state
        for value in pack_iteration(0x12345678):
            state = step(state, value, FMT).state
        assert state.iteration == 0x12345678
        assert state.byte_count == 5

    def test_fill_mismatch_is_broken_and_not_consumed(self):
        state = DecoderState(DecoderPhase.IN_FULL, 10, 1)
        outcome = step(state, ord("P"), FMT)
        assert outcome.event is FrameEvent.BROKEN_FRAME
        assert outcome.state == SEEK_STATE
        assert outcome.consumed is False
        # 再投入されたバイトは SEEK で次のフレーム開始として扱われる
        assert step(outcome.state, ord("P"), FMT).state.phase is DecoderPhase.IN_DELTA

    def test_last_fill_byte_completes_frame(self):
        state = DecoderState(DecoderPhase.IN_DELTA, 21, 42)
        outcome = step(state, 0xC7, FMT)
        assert outcome.event is FrameEvent.GOOD_FRAME
        assert outcome.iteration == 42
        assert outcome.state == SEEK_STATE

    def test_wrong_kind_fill_is_mismatch(self):
        state = DecoderState(DecoderPhase.IN_DELTA, 5, 0)
        assert step(state, 0xA0, FMT).event is FrameEvent.BROKEN_FRAME


class TestFrameAnalyzer:

    def test_clean_log_round_trip(self):
        result = FrameAnalyzer().analyze_bytes(bytes(build_log(100)))
        assert result.good_frames == 100
        assert result.broken_frames == 0
        assert result.broken_or_missing == 0
        assert result.expected_iterations == 100
        assert result.good_iterations == list(range(100))
        assert result.anomalies == []
        assert result.degraded is False

    @pytest.mark.parametrize("index", [0, 1, 31, 32, 33, 99])
    def test_single_fill_corruption_breaks_only_that_frame(self, index):
        log = build_log(100)
        log[frame_offset(log, index) + 10] = 0x00
        result = FrameAnalyzer().analyze_bytes(bytes(log))
        assert result.broken_frames == 1
        assert result.good_frames == 99
        assert result.broken_or_missing == 1
        assert result.good_iterations == [i for i in range(100) if i != index]

    @pytest.mark.parametrize("cut", [1, 5, 17, 21])
    def test_truncated_last_frame(self, cut):
        log = build_log(100)
        # 最後のフレーム（iteration 99）は Delta（22 バイト）
        result = FrameAnalyzer().analyze_bytes(bytes(log[:-cut]))
        assert result.good_frames == 99
        assert result.broken_frames == 1
        assert result.broken_or_missing == 1

    def test_noise_between_frames_is_skipped(self):
        encoder = FrameEncoder(FMT)
        header = BenchmarkHeader(iterations=3).to_bytes()
        data = header + encoder.encode(0).data + b"\x00\x13" + encoder.encode(1).data + b"\xff" + encoder.encode(2).data
        result = FrameAnalyzer().analyze_bytes(data)
        assert result.good_frames == 3
        assert result.broken_frames == 0

    def test_dropped_bytes_resynchronize_on_next_frame(self):
        log = build_log(10)
        start = frame_offset(log, 4)
        # フレーム 4 の途中 3 バイトが欠落
        del log[start + 8:start + 11]
        result = FrameAnalyzer().analyze_bytes(bytes(log))
        assert result.good_frames == 9
        assert result.good_iterations == [0, 1, 2, 3, 5, 6, 7, 8, 9]

    def test_iteration_jump_is_flagged_but_counted(self):
        encoder = FrameEncoder(FMT)
        iterations = [0, 1, 2, 500, 501, 400]
        data = BenchmarkHeader(iterations=6).to_bytes() + b"".join(encoder.encode(i).data for i in iterations)
        result = FrameAnalyzer().analyze_bytes(data)
        assert result.good_frames == 6
        assert result.broken_or_missing == 0
        assert [(a.previous, a.iteration) for a in result.anomalies] == [(2, 500), (501, 400)]

    def test_missing_header_is_degraded_but_decodes(self):
        data = b"\n" + FrameEncoder(FMT).encode_range(40)
        result = FrameAnalyzer().analyze_bytes(data)
        assert result.degraded
        assert result.good_frames == 40
        assert result.expected_iterations == 0
        assert result.broken_or_missing == -40

    def test_header_frame_sizes_are_used(self):
        custom = FrameFormat(full_size=64, delta_size=30, full_interval=8)
        data = header_for(50, custom).to_bytes() + FrameEncoder(custom).encode_range(50)
        result = FrameAnalyzer().analyze_bytes(data)
        assert result.good_frames == 50
        assert result.broken_frames == 0

    def test_unusable_header_sizes_fall_back_to_defaults(self):
        header = b"Blackbox benchmark\nI size:3\nIterations:5\n\n"
        data = header + FrameEncoder(FMT).encode_range(5)
        result = FrameAnalyzer().analyze_bytes(data)
        assert result.degraded
        assert result.good_frames == 5

    def test_empty_stream(self):
        result = FrameAnalyzer().analyze_bytes(b"")
        assert result.good_frames == 0
        assert result.broken_frames == 0


class TestIterationTracker:

    def test_small_forward_steps_are_not_flagged(self):
        tracker = IterationTracker()
        assert [tracker.observe(i) for i in (0, 1, 5, 205)] == [None, None, None, None]

    def test_large_forward_jump_flagged(self):
        tracker = IterationTracker()
        tracker.observe(10)
        assert tracker.observe(211) is not None

    def test_backward_step_flagged(self):
        tracker = IterationTracker()
        tracker.observe(10)
        assert tracker.observe(9) is not None

    def test_counter_wrap_is_not_flagged(self):
        tracker = IterationTracker()
        tracker.observe(0xFFFFFFFF)
        assert tracker.observe(0) is None

    def test_reference_follows_ordinary_progress(self):
        tracker = IterationTracker()
        for i in range(0, 1000, 100):
            assert tracker.observe(i) is None
