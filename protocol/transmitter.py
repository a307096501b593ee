"""Frame transmission to a serial port or any writable sink."""

import logging
import time
from typing import Callable, Optional, Protocol

import serial

from config.errors import DeviceNotReadyError, TransmitError
from .header import BenchmarkHeader

logger = logging.getLogger(__name__)

# 書き込みが進まない状態の許容回数
MAX_STALLED_WRITES = 1000


class Sink(Protocol):
    def write(self, data: bytes) -> Optional[int]: ...


class Transmitter:
    """送信クラス

    Every buffer handed to :meth:`write_all` is written completely or the
    call raises :class:`TransmitError`; there is no per-frame retry beyond
    finishing a short write.
    """

    def __init__(self, sink: Sink, sleep: Callable[[float], None] = time.sleep):
        self.sink = sink
        self.sleep = sleep
        self.bytes_written = 0

    def write_all(self, data: bytes) -> int:
        view = memoryview(data)
        stalled = 0
        while view:
            try:
                written = self.sink.write(view)
            except (serial.SerialException, OSError) as e:
                raise TransmitError(f"Write failed after {self.bytes_written} bytes: {e}") from e

            if written is None:
                # Buffered sinks report nothing and always take the whole buffer
                written = len(view)
            if written < 0:
                raise TransmitError(f"Sink reported write error ({written})")
            if written == 0:
                stalled += 1
                if stalled >= MAX_STALLED_WRITES:
                    raise TransmitError(f"Sink stopped accepting data after {self.bytes_written} bytes")
                continue

            stalled = 0
            self.bytes_written += written
            view = view[written:]
        return len(data)

    def wait_until_ready(self, token: bytes, timeout_s: float) -> None:
        """OpenLog の準備完了プロンプト（例: ``12<``）を待つ"""
        if not token:
            return
        logger.info("Waiting for the logger to be ready...")
        response = self._read_exactly(len(token), timeout_s)
        if response != token:
            raise DeviceNotReadyError(f"Unexpected response from logger {response!r}, expected {token!r}")
        logger.info("Logger is ready")

    def send_header(self, header: BenchmarkHeader, settle_s: float = 0.0) -> None:
        text = header.to_bytes()
        self.write_all(text)
        logger.debug(f"Sent benchmark header ({len(text)} bytes)")
        self._flush()
        if settle_s > 0:
            # ヘッダーが書き出されるのを待つ
            self.sleep(settle_s)

    def _flush(self) -> None:
        flush = getattr(self.sink, "flush", None)
        if flush is None:
            return
        try:
            flush()
        except (serial.SerialException, OSError) as e:
            raise TransmitError(f"Flush failed: {e}") from e

    def _read_exactly(self, count: int, timeout_s: float) -> bytes:
        read = getattr(self.sink, "read", None)
        if read is None:
            raise DeviceNotReadyError("Sink cannot be read from; disable the ready handshake")
        deadline = time.monotonic() + timeout_s
        received = bytearray()
        while len(received) < count:
            if time.monotonic() > deadline:
                raise DeviceNotReadyError(
                    f"Timed out after {timeout_s}s waiting for logger prompt (got {bytes(received)!r})"
                )
            try:
                chunk = read(count - len(received))
            except (serial.SerialException, OSError) as e:
                raise DeviceNotReadyError(f"Read failed while waiting for logger: {e}") from e
            if chunk:
                received.extend(chunk)
        return bytes(received)
