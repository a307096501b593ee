"""Benchmark header rendering and parsing."""

import logging
from dataclasses import dataclass, field, replace
from typing import BinaryIO, Dict, Tuple

from config.benchmark import BenchmarkSettings, FrameFormat
from config.errors import HeaderParseError
from .constants import (
    HEADER_INTRO, HEADER_SEPARATOR, HEADER_KEYS,
    KEY_FULL_INTERVAL, KEY_FULL_SIZE, KEY_DELTA_SIZE,
    KEY_LOOP_TIME, KEY_BAUD_RATE, KEY_ITERATIONS,
)

logger = logging.getLogger(__name__)

# ヘッダーのキーと BenchmarkHeader の属性名の対応
_FIELD_NAMES = {
    KEY_FULL_INTERVAL: "full_interval",
    KEY_FULL_SIZE: "full_size",
    KEY_DELTA_SIZE: "delta_size",
    KEY_LOOP_TIME: "loop_time_us",
    KEY_BAUD_RATE: "baud_rate",
    KEY_ITERATIONS: "iterations",
}


@dataclass(frozen=True)
class BenchmarkHeader:
    """ログ先頭のベンチマークヘッダー

    Defaults are the values used when a capture is missing a field.
    """
    full_interval: int = 32
    full_size: int = 50
    delta_size: int = 22
    loop_time_us: int = 2500
    baud_rate: int = 115200
    iterations: int = 0

    @classmethod
    def for_run(cls, frame_format: FrameFormat, settings: BenchmarkSettings) -> "BenchmarkHeader":
        return cls(
            full_interval=frame_format.full_interval,
            full_size=frame_format.full_size,
            delta_size=frame_format.delta_size,
            loop_time_us=settings.loop_time_us,
            baud_rate=settings.baud_rate,
            iterations=settings.max_iterations,
        )

    def fields(self) -> Dict[str, int]:
        return {key: getattr(self, _FIELD_NAMES[key]) for key in HEADER_KEYS}

    def to_text(self) -> str:
        lines = [HEADER_INTRO]
        lines.extend(f"{key}{HEADER_SEPARATOR}{value}" for key, value in self.fields().items())
        return "\n".join(lines) + "\n\n"

    def to_bytes(self) -> bytes:
        return self.to_text().encode("ascii")

    def apply_to(self, frame_format: FrameFormat) -> FrameFormat:
        """Frame format with the sizes and interval announced by this header."""
        return replace(
            frame_format,
            full_interval=self.full_interval,
            full_size=self.full_size,
            delta_size=self.delta_size,
        )


@dataclass(frozen=True)
class HeaderParseResult:
    header: BenchmarkHeader
    saw_intro: bool = False
    missing_fields: Tuple[str, ...] = ()
    invalid_fields: Tuple[str, ...] = ()

    @property
    def degraded(self) -> bool:
        return not self.saw_intro or bool(self.missing_fields or self.invalid_fields)


@dataclass
class _HeaderState:
    saw_intro: bool = False
    values: Dict[str, int] = field(default_factory=dict)
    invalid: list = field(default_factory=list)


def parse_field(line: str) -> Tuple[str, int]:
    """``key:value`` 行を解析"""
    if HEADER_SEPARATOR not in line:
        raise HeaderParseError(f"Header line without separator: {line!r}")
    key, value = line.split(HEADER_SEPARATOR, 1)
    try:
        return key, int(value.strip())
    except ValueError as e:
        raise HeaderParseError(f"Header field {key!r} has non-numeric value {value.strip()!r}") from e


class HeaderParser:
    """ヘッダー解析クラス

    Reads text lines until the first blank line. Lines before the intro line
    are ignored, unknown keys are ignored, and fields that are missing or
    malformed keep the defaults of :class:`BenchmarkHeader`.
    """

    def __init__(self, debug: bool = False):
        self.debug = debug

    def parse(self, stream: BinaryIO) -> HeaderParseResult:
        state = _HeaderState()

        while True:
            raw = stream.readline()
            if not raw:
                logger.warning("End of log reached before the end of the benchmark header")
                break
            line = raw.decode("ascii", errors="replace").rstrip("\r\n")
            if line == "":
                # 空行でヘッダー終了
                break
            self._handle_line(state, line)

        return self._build_result(state)

    def _handle_line(self, state: _HeaderState, line: str) -> None:
        if not state.saw_intro:
            if line == HEADER_INTRO:
                state.saw_intro = True
                logger.info("Benchmark header fields:")
            elif self.debug:
                logger.debug(f"Ignoring line before header intro: {line!r}")
            return

        try:
            key, value = parse_field(line)
        except HeaderParseError as e:
            logger.warning(f"{e}; keeping default")
            key = line.split(HEADER_SEPARATOR, 1)[0]
            if key in _FIELD_NAMES:
                state.invalid.append(key)
            return

        logger.info(f"  {key}: {value}")
        if key in _FIELD_NAMES:
            state.values[key] = value
            if key in state.invalid:
                state.invalid.remove(key)
        elif self.debug:
            logger.debug(f"Ignoring unknown header field {key!r}")

    def _build_result(self, state: _HeaderState) -> HeaderParseResult:
        header = BenchmarkHeader(**{_FIELD_NAMES[key]: value for key, value in state.values.items()})
        missing = tuple(
            key for key in HEADER_KEYS if key not in state.values and key not in state.invalid
        )
        if not state.saw_intro:
            logger.warning(f"Header intro line {HEADER_INTRO!r} not found; using default header values")
        elif missing:
            logger.warning(f"Header fields missing, using defaults: {', '.join(missing)}")
        return HeaderParseResult(
            header=header,
            saw_intro=state.saw_intro,
            missing_fields=missing,
            invalid_fields=tuple(state.invalid),
        )
