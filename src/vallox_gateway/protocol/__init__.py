"""Vallox RS-485 protocol implementation."""

from vallox_gateway.protocol.codec import decode_flags, decode_value, speed_to_value, value_to_speed
from vallox_gateway.protocol.constants import FRAME_LEN, MSG_MAINBOARD_1, MSG_PANELS, Register
from vallox_gateway.protocol.frames import Frame, calculate_checksum
from vallox_gateway.protocol.policy import WritePolicy

# BusSession imported lazily to avoid a circular import
# (session -> serial.connection -> protocol.constants -> protocol.__init__ -> session)


def __getattr__(name: str):
    if name in ("BusSession", "open_session"):
        from vallox_gateway.protocol import session

        return getattr(session, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "BusSession",
    "Frame",
    "FRAME_LEN",
    "MSG_MAINBOARD_1",
    "MSG_PANELS",
    "Register",
    "WritePolicy",
    "calculate_checksum",
    "decode_flags",
    "decode_value",
    "open_session",
    "speed_to_value",
    "value_to_speed",
]
