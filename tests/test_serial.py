"""Unit tests for the serial connection."""

from unittest.mock import MagicMock, patch

import pytest
import serial
from serial import SerialException

from vallox_gateway.serial.connection import SerialConnection, Transport


@pytest.fixture
def mock_serial():
    with patch("vallox_gateway.serial.connection.serial.Serial") as mock_serial_class:
        port = MagicMock()
        port.is_open = True
        mock_serial_class.return_value = port
        yield port


class TestSerialConnection:
    """Tests for SerialConnection."""

    def test_init(self):
        connection = SerialConnection("/dev/ttyUSB0")

        assert connection.port == "/dev/ttyUSB0"
        assert connection.baudrate == 9600
        assert not connection.connected

    def test_satisfies_transport_protocol(self):
        assert isinstance(SerialConnection("/dev/ttyUSB0"), Transport)

    @pytest.mark.asyncio
    async def test_connect_configures_8n1(self, mock_serial):
        connection = SerialConnection("/dev/ttyUSB0")

        await connection.connect()

        assert connection.connected
        mock_serial.open.assert_called_once()
        assert mock_serial.port == "/dev/ttyUSB0"
        assert mock_serial.baudrate == 9600
        assert mock_serial.bytesize == serial.EIGHTBITS
        assert mock_serial.parity == serial.PARITY_NONE
        assert mock_serial.stopbits == serial.STOPBITS_ONE

    @pytest.mark.asyncio
    async def test_connect_failure_propagates(self, mock_serial):
        mock_serial.open.side_effect = SerialException("Port not found")
        connection = SerialConnection("/dev/ttyUSB0")

        with pytest.raises(SerialException):
            await connection.connect()

        assert not connection.connected

    @pytest.mark.asyncio
    async def test_read_returns_buffered_bytes(self, mock_serial):
        mock_serial.read.side_effect = [b"\x01", b"\x11\x20"]
        mock_serial.in_waiting = 2
        connection = SerialConnection("/dev/ttyUSB0")
        await connection.connect()

        data = await connection.read(6)

        assert data == b"\x01\x11\x20"

    @pytest.mark.asyncio
    async def test_read_caps_at_n(self, mock_serial):
        mock_serial.read.side_effect = [b"\x01", b"\x02\x03\x04\x05\x06"]
        mock_serial.in_waiting = 50
        connection = SerialConnection("/dev/ttyUSB0")
        await connection.connect()

        await connection.read(6)

        mock_serial.read.assert_called_with(5)

    @pytest.mark.asyncio
    async def test_read_timeout_returns_empty(self, mock_serial):
        mock_serial.read.return_value = b""
        connection = SerialConnection("/dev/ttyUSB0")
        await connection.connect()

        assert await connection.read(6) == b""

    @pytest.mark.asyncio
    async def test_read_error_raises_connection_error(self, mock_serial):
        mock_serial.read.side_effect = SerialException("device disconnected")
        connection = SerialConnection("/dev/ttyUSB0")
        await connection.connect()

        with pytest.raises(ConnectionError):
            await connection.read(6)

        assert not connection.connected

    @pytest.mark.asyncio
    async def test_read_when_disconnected(self):
        with pytest.raises(ConnectionError):
            await SerialConnection("/dev/ttyUSB0").read(6)

    @pytest.mark.asyncio
    async def test_write(self, mock_serial):
        connection = SerialConnection("/dev/ttyUSB0")
        await connection.connect()

        await connection.write(b"\x01\x27\x11\x00\x29\x62")

        mock_serial.write.assert_called_once_with(b"\x01\x27\x11\x00\x29\x62")

    @pytest.mark.asyncio
    async def test_disconnect(self, mock_serial):
        connection = SerialConnection("/dev/ttyUSB0")
        await connection.connect()

        await connection.disconnect()

        mock_serial.close.assert_called_once()
        assert not connection.connected
        with pytest.raises(ConnectionError):
            await connection.read(6)

    @pytest.mark.asyncio
    async def test_context_manager(self, mock_serial):
        async with SerialConnection("/dev/ttyUSB0") as connection:
            assert connection.connected

        mock_serial.close.assert_called_once()
