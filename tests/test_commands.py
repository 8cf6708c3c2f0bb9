"""Unit tests for outgoing frame builders and the init burst."""

from vallox_gateway.core.models import CommandResult
from vallox_gateway.protocol.commands import build_query, build_write, send_init
from vallox_gateway.protocol.constants import INIT_REGISTERS, MSG_MAINBOARD_1, MSG_PANELS, Register
from vallox_gateway.protocol.policy import WritePolicy
from vallox_gateway.protocol.session import BusSession


class TestBuilders:
    """Tests for build_query and build_write."""

    def test_query_layout(self):
        """A query carries the poll byte as register and the target as value."""
        frame = build_query(0x27, Register.OUTDOOR_TEMP)

        assert frame.source == 0x27
        assert frame.destination == MSG_MAINBOARD_1
        assert frame.register == 0
        assert frame.value == Register.OUTDOOR_TEMP

    def test_write_layout(self):
        frame = build_write(0x27, MSG_PANELS, Register.CURRENT_FAN_SPEED, 0x0F)

        assert frame.to_bytes() == bytes([0x01, 0x27, 0x20, 0x29, 0x0F, 0x80])


class TestSendInit:
    """Tests for the startup query burst."""

    def test_queues_every_register_in_order(self, transport):
        session = BusSession(transport, 0x27, WritePolicy())

        count = send_init(session)

        assert count == len(INIT_REGISTERS) == 40
        queued = [session._commands.get_nowait() for _ in range(count)]
        assert [f.value for f in queued] == list(INIT_REGISTERS)
        assert all(f.register == 0 for f in queued)

    def test_init_fits_command_queue(self, transport):
        session = BusSession(transport, 0x27, WritePolicy())

        send_init(session)

        assert session.pending_commands == len(INIT_REGISTERS)
        assert session.enqueue_nowait(build_query(0x27, Register.STATUS)) is CommandResult.QUEUED

    def test_undocumented_registers_not_polled(self):
        assert Register.REGISTER_8F not in INIT_REGISTERS
        assert Register.REGISTER_91 not in INIT_REGISTERS
        assert INIT_REGISTERS[0] == Register.IO07
        assert INIT_REGISTERS[-1] == Register.PROGRAM2
