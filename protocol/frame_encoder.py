"""Frame construction for the benchmark stream."""

from dataclasses import dataclass
from enum import Enum

from config.benchmark import FrameFormat
from .constants import ITERATION_LENGTH, ITERATION_MASK, MARKER_LENGTH


class FrameKind(Enum):
    FULL = "full"
    DELTA = "delta"


@dataclass(frozen=True)
class Frame:
    kind: FrameKind
    iteration: int
    data: bytes

    def __len__(self) -> int:
        return len(self.data)


def pack_iteration(iteration: int) -> bytes:
    """ループ回数を32bitリトルエンディアンに変換（上位ビットは切り捨て）"""
    value = iteration & ITERATION_MASK
    return bytes([
        value & 0xFF,
        (value >> 8) & 0xFF,
        (value >> 16) & 0xFF,
        (value >> 24) & 0xFF,
    ])


class FrameEncoder:
    """フレーム生成クラス

    Each call is a pure function of the iteration number and the frame format.
    """

    def __init__(self, frame_format: FrameFormat):
        self.frame_format = frame_format.validate()
        # Fill templates are built once; only the iteration field changes per frame
        fmt = self.frame_format
        self._full_fill = bytes([fmt.full_fill]) * (fmt.full_size - MARKER_LENGTH - ITERATION_LENGTH)
        self._delta_fill = bytes([fmt.delta_fill]) * (fmt.delta_size - MARKER_LENGTH - ITERATION_LENGTH)

    def kind_for(self, iteration: int) -> FrameKind:
        if iteration % self.frame_format.full_interval == 0:
            return FrameKind.FULL
        return FrameKind.DELTA

    def encode(self, iteration: int) -> Frame:
        kind = self.kind_for(iteration)
        if kind is FrameKind.FULL:
            marker, fill = self.frame_format.full_marker, self._full_fill
        else:
            marker, fill = self.frame_format.delta_marker, self._delta_fill
        return Frame(kind, iteration, bytes([marker]) + pack_iteration(iteration) + fill)

    def encode_range(self, count: int, start: int = 0) -> bytes:
        """Concatenated frames for ``count`` consecutive iterations."""
        return b"".join(self.encode(i).data for i in range(start, start + count))
