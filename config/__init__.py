"""Configuration module."""

from .benchmark import BenchmarkSettings, FrameFormat
from .errors import (
    BenchmarkError, ConfigurationError, DeviceNotReadyError, HeaderParseError, TransmitError
)
from .settings import Config, config

__all__ = [
    "BenchmarkSettings", "FrameFormat", "Config", "config",
    "BenchmarkError", "ConfigurationError", "DeviceNotReadyError",
    "HeaderParseError", "TransmitError",
]
