"""Immutable benchmark parameters handed to each component."""

from dataclasses import dataclass

from .errors import ConfigurationError

ITERATION_FIELD_LENGTH = 4
FRAME_PREFIX_LENGTH = 1 + ITERATION_FIELD_LENGTH


@dataclass(frozen=True)
class FrameFormat:
    """フレーム形式（マーカー、サイズ、フィルバイト）"""
    full_marker: int = ord("I")
    full_size: int = 50
    full_fill: int = 0xA0
    full_interval: int = 32

    delta_marker: int = ord("P")
    delta_size: int = 22
    delta_fill: int = 0xC7

    def validate(self) -> "FrameFormat":
        if self.full_interval <= 0:
            raise ConfigurationError(f"Full frame interval must be positive, got {self.full_interval}")
        for name in ("full_size", "delta_size"):
            size = getattr(self, name)
            if size < FRAME_PREFIX_LENGTH:
                raise ConfigurationError(
                    f"{name} {size} is shorter than marker + iteration field ({FRAME_PREFIX_LENGTH})"
                )
        if self.full_size <= self.delta_size:
            raise ConfigurationError(
                f"Full frame size ({self.full_size}) must exceed delta frame size ({self.delta_size})"
            )
        for name in ("full_marker", "full_fill", "delta_marker", "delta_fill"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise ConfigurationError(f"{name} must be a single byte, got {value}")
        if self.full_marker == self.delta_marker:
            raise ConfigurationError("Full and delta markers must differ")
        # フィルバイトがマーカーと同じだと再同期できない
        markers = {self.full_marker, self.delta_marker}
        if self.full_fill in markers or self.delta_fill in markers:
            raise ConfigurationError("Fill bytes must not collide with frame markers")
        return self

    def size_of(self, marker: int) -> int:
        return self.full_size if marker == self.full_marker else self.delta_size

    def fill_of(self, marker: int) -> int:
        return self.full_fill if marker == self.full_marker else self.delta_fill


@dataclass(frozen=True)
class BenchmarkSettings:
    """ベンチマーク実行パラメータ"""
    loop_time_us: int = 2500
    duration_s: int = 15
    baud_rate: int = 115200

    def validate(self) -> "BenchmarkSettings":
        if self.loop_time_us <= 0:
            raise ConfigurationError(f"Looptime must be greater than zero, got {self.loop_time_us}")
        if self.duration_s < 0:
            raise ConfigurationError(f"Duration must not be negative, got {self.duration_s}")
        if self.baud_rate <= 0:
            raise ConfigurationError(f"Baud rate must be positive, got {self.baud_rate}")
        return self

    @property
    def max_iterations(self) -> int:
        """Number of loop iterations needed to fill the requested duration."""
        return (1_000_000 * self.duration_s) // self.loop_time_us
