"""Shared test helpers."""


class FakeClock:
    """呼び出しごとに一定時間進むマイクロ秒クロック"""

    def __init__(self, step_us: int, start_us: int = 0):
        self.now = start_us
        self.step_us = step_us
        self.calls = 0

    def __call__(self) -> int:
        value = self.now
        self.now += self.step_us
        self.calls += 1
        return value

    def sleep(self, seconds: float) -> None:
        self.now += int(round(seconds * 1_000_000))


class ShortWriteSink:
    """一度に最大 chunk バイトしか受け付けない書き込み先"""

    def __init__(self, chunk: int):
        self.chunk = chunk
        self.data = bytearray()
        self.write_calls = 0

    def write(self, data) -> int:
        self.write_calls += 1
        accepted = bytes(data[:self.chunk])
        self.data.extend(accepted)
        return len(accepted)
