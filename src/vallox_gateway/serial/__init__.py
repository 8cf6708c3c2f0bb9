"""Serial communication layer."""

from vallox_gateway.serial.connection import SerialConnection, Transport
from vallox_gateway.serial.reader import FrameReader

__all__ = ["SerialConnection", "Transport", "FrameReader"]
