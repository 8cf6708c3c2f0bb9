"""Frame extraction with checksum-based resynchronisation."""

import logging

from vallox_gateway.exceptions import FrameError
from vallox_gateway.protocol.constants import FRAME_LEN
from vallox_gateway.protocol.frames import Frame

logger = logging.getLogger(__name__)


class FrameReader:
    """Extracts frames from an append-only byte buffer.

    The bus has no start-of-frame marker, so the only way to find a frame
    boundary is a valid checksum over a 6-byte window. On a mismatch the
    window slides forward by one byte.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._stats = {
            "frames_read": 0,
            "frames_invalid": 0,
            "bytes_read": 0,
        }

    @property
    def stats(self) -> dict:
        """Get reader statistics."""
        return self._stats.copy()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet part of a frame."""
        return len(self._buffer)

    def feed(self, data: bytes) -> list[Frame]:
        """
        Append received bytes and extract every complete frame.

        Args:
            data: Bytes read from the transport

        Returns:
            Frames in the order they appear in the stream
        """
        self._buffer.extend(data)
        self._stats["bytes_read"] += len(data)

        frames = []
        while True:
            frame = self._extract_frame()
            if frame is None:
                break
            frames.append(frame)
        return frames

    def _extract_frame(self) -> Frame | None:
        while len(self._buffer) >= FRAME_LEN:
            window = bytes(self._buffer[:FRAME_LEN])
            try:
                frame = Frame.from_bytes(window)
            except FrameError:
                logger.debug("No frame at 0x%02X, discarding one byte", self._buffer[0])
                del self._buffer[0]
                self._stats["frames_invalid"] += 1
                continue

            del self._buffer[:FRAME_LEN]
            self._stats["frames_read"] += 1
            return frame

        return None

    def reset_buffer(self) -> None:
        """Clear the read buffer."""
        self._buffer.clear()
