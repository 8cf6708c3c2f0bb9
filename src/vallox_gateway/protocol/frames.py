"""Frame construction and parsing for the Vallox RS-485 protocol."""

import struct
from dataclasses import dataclass

from vallox_gateway.exceptions import ChecksumMismatchError, FrameLengthError
from vallox_gateway.protocol.constants import FRAME_LEN, MSG_DOMAIN

# Every field is a single byte, so the layout has no byte order to get wrong.
# The same struct is used for outgoing and incoming frames.
_FRAME_STRUCT = struct.Struct("6B")


def calculate_checksum(system: int, source: int, destination: int, register: int, value: int) -> int:
    """Sum of the first five frame bytes, truncated to 8 bits."""
    return (system + source + destination + register + value) & 0xFF


@dataclass(frozen=True)
class Frame:
    """
    Represents a single Vallox bus frame.

    Frame structure:
    [SYSTEM][SOURCE][DESTINATION][REGISTER][VALUE][CHECKSUM]

    Attributes:
        source: Originating bus address
        destination: Target bus address or broadcast group
        register: Register id, 0 for a query (the value then names the register)
        value: Raw payload byte
        system: Protocol domain, always 1 for this device family
    """

    source: int
    destination: int
    register: int
    value: int
    system: int = MSG_DOMAIN

    def __post_init__(self) -> None:
        for name in ("system", "source", "destination", "register", "value"):
            field_value = getattr(self, name)
            if not 0 <= field_value <= 0xFF:
                raise ValueError(f"{name} must fit in one byte, got {field_value!r}")

    @property
    def checksum(self) -> int:
        return calculate_checksum(self.system, self.source, self.destination, self.register, self.value)

    @property
    def is_query(self) -> bool:
        return self.register == 0

    def to_bytes(self) -> bytes:
        """
        Convert frame to bytes for transmission.

        Example:
            >>> Frame(source=0x27, destination=0x11, register=0, value=0x29).to_bytes().hex()
            '012711002962'
        """
        return _FRAME_STRUCT.pack(self.system, self.source, self.destination, self.register, self.value, self.checksum)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Frame":
        """
        Parse exactly one frame from received bytes.

        Args:
            data: Six raw bytes

        Returns:
            Parsed Frame

        Raises:
            FrameLengthError: If data is not exactly six bytes
            ChecksumMismatchError: If the checksum byte does not match
        """
        if len(data) != FRAME_LEN:
            raise FrameLengthError(f"Frame must be {FRAME_LEN} bytes, got {len(data)}")

        system, source, destination, register, value, checksum = _FRAME_STRUCT.unpack(data)
        expected = calculate_checksum(system, source, destination, register, value)
        if checksum != expected:
            raise ChecksumMismatchError(f"Checksum 0x{checksum:02X} != 0x{expected:02X} for {bytes(data).hex()}")

        return cls(source=source, destination=destination, register=register, value=value, system=system)

    def __repr__(self) -> str:
        return (
            f"Frame(src=0x{self.source:02X}, dst=0x{self.destination:02X}, "
            f"reg=0x{self.register:02X}, value=0x{self.value:02X})"
        )


def encode(system: int, source: int, destination: int, register: int, value: int) -> bytes:
    """Build the wire bytes for a frame with the given fields."""
    return Frame(source=source, destination=destination, register=register, value=value, system=system).to_bytes()


def decode(data: bytes) -> Frame:
    """Parse six wire bytes, raising ChecksumMismatchError on a bad checksum."""
    return Frame.from_bytes(data)
