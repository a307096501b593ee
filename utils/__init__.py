"""Utility functions."""

from .logging_setup import setup_logging
from .serial_port import open_serial

__all__ = ["setup_logging", "open_serial"]
