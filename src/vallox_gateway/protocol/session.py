"""Bus session for the Vallox RS-485 line.

Owns the transport and runs two loops: the inbound loop turns bytes into
events, the outbound loop sends queued commands while keeping a minimum
gap after any bus activity.
"""

import asyncio
import logging
import threading
import time

from vallox_gateway.core.config import SessionConfig
from vallox_gateway.core.models import CommandResult, Event
from vallox_gateway.exceptions import InvalidAddressError, TransportReadError
from vallox_gateway.protocol.codec import decode_value, speed_to_value
from vallox_gateway.protocol.commands import build_query, build_write, send_init
from vallox_gateway.protocol.constants import (
    COMMAND_QUEUE_SIZE,
    EVENT_QUEUE_SIZE,
    FAN_SPEED_MAX,
    FAN_SPEED_MIN,
    MIN_FRAME_GAP,
    MSG_MAINBOARD_1,
    MSG_PANELS,
    PANEL_ADDRESS_MAX,
    PANEL_ADDRESS_MIN,
    READ_CHUNK_SIZE,
    Register,
)
from vallox_gateway.protocol.frames import Frame
from vallox_gateway.protocol.policy import WritePolicy
from vallox_gateway.serial.connection import Transport
from vallox_gateway.serial.reader import FrameReader

logger = logging.getLogger(__name__)

_IDLE_CHECK = 0.1  # how often a blocked outbound loop re-checks the running flag
_CLOSE_TIMEOUT = 2.0


class BusActivity:
    """Last bus activity time and the running flag, shared by both loops.

    Every access goes through one lock. ``running`` goes from True to False
    once and is never reset.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_activity: float | None = None
        self._running = True

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    @property
    def last_activity(self) -> float | None:
        """Monotonic time of the last read or write, None before the first."""
        with self._lock:
            return self._last_activity

    def touch(self) -> None:
        with self._lock:
            self._last_activity = time.monotonic()

    def stop(self) -> bool:
        """Clear the running flag. Returns True only for the call that cleared it."""
        with self._lock:
            was_running = self._running
            self._running = False
            return was_running

    def delay_needed(self, gap: float) -> float:
        """Seconds to wait until ``gap`` has passed since the last activity."""
        with self._lock:
            if self._last_activity is None:
                # Nothing heard yet, we may have attached mid-frame
                return gap
            return max(0.0, gap - (time.monotonic() - self._last_activity))


class BusSession:
    """One client on the Vallox bus.

    Created by :func:`open_session`. Commands are fire-and-forget: they
    return a :class:`CommandResult` and never raise for per-message
    problems. The only end-of-life signal is ``running`` turning False.
    """

    def __init__(
        self,
        transport: Transport,
        client_address: int,
        policy: WritePolicy,
        log: logging.Logger | None = None,
        event_queue_size: int = EVENT_QUEUE_SIZE,
        command_queue_size: int = COMMAND_QUEUE_SIZE,
        min_frame_gap: float = MIN_FRAME_GAP,
    ):
        if not PANEL_ADDRESS_MIN <= client_address <= PANEL_ADDRESS_MAX:
            raise InvalidAddressError(
                f"Invalid client address 0x{client_address:02X}, "
                f"must be 0x{PANEL_ADDRESS_MIN:02X}-0x{PANEL_ADDRESS_MAX:02X}"
            )

        self._transport = transport
        self._client_address = client_address
        self._policy = policy
        self._log = log or logger
        self._min_frame_gap = min_frame_gap

        self._activity = BusActivity()
        self._reader = FrameReader()
        self._events: asyncio.Queue[Event] = asyncio.Queue(maxsize=event_queue_size)
        self._commands: asyncio.Queue[Frame] = asyncio.Queue(maxsize=command_queue_size)

        self._inbound_task: asyncio.Task | None = None
        self._outbound_task: asyncio.Task | None = None
        self._last_error: TransportReadError | None = None
        self._stats = {
            "frames_written": 0,
            "frames_denied": 0,
            "frames_delayed": 0,
            "frames_failed": 0,
        }

    # -- properties ----------------------------------------------------------

    @property
    def client_address(self) -> int:
        return self._client_address

    @property
    def events(self) -> asyncio.Queue[Event]:
        """Decoded events in bus order. Holds at most 100 before the reader stalls."""
        return self._events

    @property
    def running(self) -> bool:
        return self._activity.running

    @property
    def last_activity(self) -> float | None:
        return self._activity.last_activity

    @property
    def last_error(self) -> TransportReadError | None:
        """The read failure that stopped the session, if any."""
        return self._last_error

    @property
    def pending_commands(self) -> int:
        return self._commands.qsize()

    @property
    def stats(self) -> dict:
        """Reader and writer counters combined."""
        return {**self._reader.stats, **self._stats}

    # -- public API ----------------------------------------------------------

    def for_me(self, event: Event) -> bool:
        """Whether an event is addressed to all panels or to this client."""
        return event.destination == MSG_PANELS or event.destination == self._client_address

    async def query(self, register: int) -> CommandResult:
        """Ask the main board to report a register."""
        return await self._enqueue(build_query(self._client_address, register))

    async def write_register(self, destination: int, register: int, value: int) -> CommandResult:
        return await self._enqueue(build_write(self._client_address, destination, register, value))

    async def set_speed(self, speed: int) -> CommandResult:
        """Change the current fan speed (1-8)."""
        return await self._set_fan_speed(Register.CURRENT_FAN_SPEED, speed)

    async def set_default_fan_speed(self, speed: int) -> CommandResult:
        return await self._set_fan_speed(Register.DEFAULT_FAN_SPEED, speed)

    async def set_max_fan_speed(self, speed: int) -> CommandResult:
        return await self._set_fan_speed(Register.MAX_FAN_SPEED, speed)

    async def _set_fan_speed(self, register: Register, speed: int) -> CommandResult:
        if not FAN_SPEED_MIN <= speed <= FAN_SPEED_MAX:
            self._log.warning("Received invalid speed %s for %s", speed, register.name)
            return CommandResult.INVALID_SPEED

        value = speed_to_value(speed)
        self._log.debug("Setting %s to speed %d (0x%02X)", register.name, speed, value)

        # The main board acts on the value, the panels only display it
        result = await self.write_register(MSG_MAINBOARD_1, register, value)
        if result is not CommandResult.QUEUED:
            return result
        return await self.write_register(MSG_PANELS, register, value)

    def enqueue_nowait(self, frame: Frame) -> CommandResult:
        """Queue a frame without waiting.

        Raises:
            asyncio.QueueFull: If the command queue is full
        """
        if not self._check_gate(frame):
            return CommandResult.DENIED
        self._commands.put_nowait(frame)
        return CommandResult.QUEUED

    async def _enqueue(self, frame: Frame) -> CommandResult:
        if not self._check_gate(frame):
            return CommandResult.DENIED
        await self._commands.put(frame)
        return CommandResult.QUEUED

    def _check_gate(self, frame: Frame) -> bool:
        if self._policy.is_write_allowed(frame.register):
            return True
        self._log.debug("Outgoing not allowed for 0x%02X = 0x%02X", frame.register, frame.value)
        return False

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Start the inbound and outbound loops."""
        if self._inbound_task is not None:
            return

        self._inbound_task = asyncio.create_task(self._inbound_loop(), name="vallox-inbound")
        self._outbound_task = asyncio.create_task(self._outbound_loop(), name="vallox-outbound")
        self._log.info("Bus session started as 0x%02X", self._client_address)

    async def wait_closed(self) -> None:
        """Wait until both loops have finished."""
        tasks = [t for t in (self._inbound_task, self._outbound_task) if t is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def close(self) -> None:
        """Close the transport and wait for the loops to notice.

        The inbound loop stops on the resulting read failure. A loop still
        blocked after a short grace period (for example on a full event
        queue) is cancelled. Queued commands are not sent.
        """
        await self._transport.disconnect()

        tasks = [t for t in (self._inbound_task, self._outbound_task) if t is not None and not t.done()]
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=_CLOSE_TIMEOUT)
            for task in pending:
                task.cancel()
            await self.wait_closed()

        if self._activity.stop():
            self._log.info("Bus session closed")

    # -- loops ---------------------------------------------------------------

    async def _inbound_loop(self) -> None:
        while self._activity.running:
            try:
                data = await self._transport.read(READ_CHUNK_SIZE)
            except Exception as e:
                self._fatal_error(e)
                return

            if not data:
                await asyncio.sleep(0.01)
                continue

            self._activity.touch()
            for frame in self._reader.feed(data):
                # Blocks while the consumer is behind, which stalls further reads
                await self._events.put(self._to_event(frame))

    async def _outbound_loop(self) -> None:
        while self._activity.running:
            try:
                frame = await asyncio.wait_for(self._commands.get(), timeout=_IDLE_CHECK)
            except TimeoutError:
                continue

            if not self._check_gate(frame):
                self._stats["frames_denied"] += 1
                continue

            # One wait of at most the gap; traffic during it must not postpone the send
            delay = self._activity.delay_needed(self._min_frame_gap)
            if delay > 0:
                self._log.debug(
                    "Delay outgoing to 0x%02X 0x%02X = 0x%02X by %.0f ms",
                    frame.destination,
                    frame.register,
                    frame.value,
                    delay * 1000,
                )
                self._stats["frames_delayed"] += 1
                await asyncio.sleep(delay)
                if not self._activity.running:
                    break

            self._activity.touch()
            try:
                await self._transport.write(frame.to_bytes())
            except Exception as e:
                self._log.error("Failed to write %r: %s", frame, e)
                self._stats["frames_failed"] += 1
                continue
            # The frame occupies the bus until the write returns
            self._activity.touch()
            self._stats["frames_written"] += 1
            self._log.debug("Frame written: %r", frame)

    def _fatal_error(self, error: Exception) -> None:
        self._last_error = TransportReadError(f"Transport read failed: {error}")
        self._last_error.__cause__ = error
        if self._activity.stop():
            self._log.error("Stopping bus session: %s", error)

    def _to_event(self, frame: Frame) -> Event:
        return Event(
            source=frame.source,
            destination=frame.destination,
            register=frame.register,
            raw_value=frame.value,
            value=decode_value(frame.register, frame.value),
        )

    def __repr__(self) -> str:
        return f"BusSession(client=0x{self._client_address:02X}, running={self.running}, {self._policy!r})"


async def open_session(config: SessionConfig) -> BusSession:
    """
    Open a session on an already connected transport.

    Queues the init queries for every known register, then starts both
    loops.

    Raises:
        InvalidAddressError: If the client address is outside 0x20-0x2F
    """
    session = BusSession(
        transport=config.transport,
        client_address=config.client_address,
        policy=WritePolicy(enable_write=config.enable_write),
        log=config.logger,
    )
    send_init(session)
    session.start()
    return session
