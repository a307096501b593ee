"""Application configuration settings."""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Config:
    """アプリケーション設定"""
    # Serial communication settings
    SERIAL_PORT: str = os.environ.get("SERIAL_PORT", "/dev/ttyUSB0")
    BAUD_RATE: int = int(os.environ.get("BAUD_RATE", "115200"))

    # Benchmark run settings
    LOOP_TIME_US: int = int(os.environ.get("LOOP_TIME_US", "2500"))
    DURATION_S: int = int(os.environ.get("DURATION_S", "15"))
    HEADER_SETTLE_S: float = 1.0  # ヘッダー送信後、ロガーの準備待ち
    FLUSH_WAIT_S: float = 6.0  # SDカードへの書き込み完了待ち

    # OpenLog readiness prompt (empty disables the handshake)
    READY_TOKEN: str = os.environ.get("READY_TOKEN", "12<")
    READY_TIMEOUT_S: float = 10.0

    # Scheduler settings: "spin" or "hybrid"
    SCHEDULER_MODE: str = os.environ.get("SCHEDULER_MODE", "spin")
    SPIN_WINDOW_US: int = 1000

    # Debug settings
    DEBUG_FRAME_PARSING: bool = os.environ.get("DEBUG_FRAME_PARSING", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL


# Global configuration instance
config = Config()
