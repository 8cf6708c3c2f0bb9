"""Serial port connection using direct pyserial.

Reads block in a single worker thread via run_in_executor() so the event
loop stays free for the outbound side of the bus.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol, runtime_checkable

import serial
from serial import SerialException

from vallox_gateway.protocol.constants import BAUDRATE

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Byte-oriented duplex stream consumed by a bus session."""

    async def read(self, n: int = -1) -> bytes: ...

    async def write(self, data: bytes) -> None: ...

    async def disconnect(self) -> None: ...


class SerialConnection:
    """RS-485 serial port at 9600 baud, 8N1.

    There is no reconnect loop: when a read fails the session that owns
    this connection stops.
    """

    def __init__(self, port: str, baudrate: int = BAUDRATE, timeout: float = 0.2):
        """
        Initialize serial connection.

        Args:
            port: Serial port path (e.g., '/dev/ttyUSB0')
            baudrate: Communication speed (default: 9600)
            timeout: Read timeout in seconds; an empty read just loops again
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout

        self._serial: serial.Serial | None = None
        self._connected = False
        self._lock = asyncio.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="serial")

    @property
    def connected(self) -> bool:
        """Check if currently connected."""
        return self._connected and self._serial is not None and self._serial.is_open

    async def connect(self) -> None:
        """
        Open serial port connection.

        Raises:
            SerialException: If the port cannot be opened
        """
        async with self._lock:
            if self.connected:
                logger.debug("Already connected to %s", self.port)
                return

            logger.info("Connecting to serial port %s at %d baud", self.port, self.baudrate)

            port = serial.Serial()
            port.port = self.port
            port.baudrate = self.baudrate
            port.bytesize = serial.EIGHTBITS
            port.parity = serial.PARITY_NONE
            port.stopbits = serial.STOPBITS_ONE
            port.timeout = self.timeout
            port.open()

            self._serial = port
            self._connected = True
            logger.info("Successfully connected to %s", self.port)

    async def disconnect(self) -> None:
        """Close serial port connection."""
        async with self._lock:
            if not self._connected:
                return

            logger.info("Disconnecting from %s", self.port)

            if self._serial and self._serial.is_open:
                try:
                    self._serial.close()
                except (OSError, SerialException) as e:
                    logger.error("Error closing serial port: %s", e)

            self._serial = None
            self._connected = False

    def _blocking_read(self, n: int) -> bytes:
        """Blocking read for use with run_in_executor.

        Waits up to the timeout for the first byte, then takes whatever
        else the OS has already buffered, capped at n.
        """
        if not self._serial or not self._serial.is_open:
            raise ConnectionError("Not connected to serial port")

        first = self._serial.read(1)
        if not first:
            return b""

        available = min(self._serial.in_waiting, n - 1)
        if available > 0:
            return first + self._serial.read(available)

        return first

    async def read(self, n: int = -1) -> bytes:
        """
        Read from serial port.

        Args:
            n: Maximum number of bytes to read (-1 for up to 4096)

        Returns:
            Bytes read, empty on timeout

        Raises:
            ConnectionError: If not connected or the port fails
        """
        if not self.connected:
            raise ConnectionError("Not connected to serial port")

        try:
            read_size = 4096 if n == -1 else n
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self._executor, self._blocking_read, read_size)

        except (OSError, SerialException) as e:
            logger.error("Read error: %s", e)
            self._connected = False
            raise ConnectionError(str(e)) from e

    async def write(self, data: bytes) -> None:
        """
        Write to serial port.

        Raises:
            ConnectionError: If not connected or the port fails
        """
        if not self.connected or not self._serial:
            raise ConnectionError("Not connected to serial port")

        try:
            self._serial.write(data)
        except (OSError, SerialException) as e:
            logger.error("Write error: %s", e)
            self._connected = False
            raise ConnectionError(str(e)) from e

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.disconnect()
