"""Shared test fixtures."""

import asyncio
import time

import pytest

from vallox_gateway.protocol.frames import Frame

# Address used by all tests
TEST_CLIENT_ADDRESS = 0x27


class FakeTransport:
    """In-memory duplex stream.

    Chunks queued with ``feed()`` are returned one per ``read()``. An
    exception queued with ``fail()`` is raised by the read that takes it.
    Writes are recorded with their monotonic timestamp.
    """

    def __init__(self) -> None:
        self._chunks: asyncio.Queue[bytes | Exception] = asyncio.Queue()
        self.writes: list[tuple[float, bytes]] = []
        self.reads = 0
        self.closed = False

    def feed(self, *chunks: bytes) -> None:
        for chunk in chunks:
            self._chunks.put_nowait(chunk)

    def fail(self, error: Exception) -> None:
        self._chunks.put_nowait(error)

    @property
    def pending(self) -> int:
        return self._chunks.qsize()

    @property
    def written(self) -> list[bytes]:
        return [data for _, data in self.writes]

    async def read(self, n: int = -1) -> bytes:
        item = await self._chunks.get()
        self.reads += 1
        if isinstance(item, Exception):
            raise item
        return item

    async def write(self, data: bytes) -> None:
        if self.closed:
            raise ConnectionError("closed")
        self.writes.append((time.monotonic(), data))

    async def disconnect(self) -> None:
        self.closed = True
        self.fail(ConnectionError("Transport closed"))


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll until predicate() is true or fail the test."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


def frame_bytes(source: int = 0x11, destination: int = 0x20, register: int = 0x32, value: int = 0x70) -> bytes:
    return Frame(source=source, destination=destination, register=register, value=value).to_bytes()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
