"""Serial device access."""

import logging

import serial

from config.errors import TransmitError

logger = logging.getLogger(__name__)


def open_serial(port: str, baud_rate: int, timeout: float = 1.0) -> serial.Serial:
    """シリアルポートを 8N1・フロー制御なしで開く"""
    logger.info(f"Opening {port} at {baud_rate} baud...")
    try:
        return serial.Serial(
            port=port,
            baudrate=baud_rate,
            bytesize=serial.EIGHTBITS,
            parity=serial.PARITY_NONE,
            stopbits=serial.STOPBITS_ONE,
            xonxoff=False,
            rtscts=False,
            timeout=timeout,
        )
    except (serial.SerialException, ValueError) as e:
        raise TransmitError(f"Failed to open serial port {port}, maybe try a different baud rate? ({e})") from e
