"""Exceptions raised by the Vallox bus gateway."""


class ValloxError(Exception):
    """Base class for all gateway exceptions."""


class InvalidAddressError(ValloxError, ValueError):
    """The client bus address is outside the remote panel range."""


class FrameError(ValloxError):
    """A 6-byte window could not be parsed as a frame."""


class FrameLengthError(FrameError):
    """The buffer is not exactly one frame long."""


class ChecksumMismatchError(FrameError):
    """The checksum byte does not match the sum of the other fields."""


class TransportReadError(ValloxError, ConnectionError):
    """The underlying byte stream failed while reading."""
