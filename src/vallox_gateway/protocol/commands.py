"""Outgoing frame builders and the startup query burst."""

import logging
from typing import TYPE_CHECKING

from vallox_gateway.protocol.constants import INIT_REGISTERS, MSG_MAINBOARD_1, MSG_POLL_BYTE
from vallox_gateway.protocol.frames import Frame

if TYPE_CHECKING:
    from vallox_gateway.protocol.session import BusSession

logger = logging.getLogger(__name__)


def build_query(source: int, register: int) -> Frame:
    """Ask the main board for the value of a register.

    The poll byte goes in the register field, the queried register in the
    value field.
    """
    return Frame(source=source, destination=MSG_MAINBOARD_1, register=MSG_POLL_BYTE, value=register)


def build_write(source: int, destination: int, register: int, value: int) -> Frame:
    return Frame(source=source, destination=destination, register=register, value=value)


def send_init(session: "BusSession") -> int:
    """Queue one query per known register, in catalog order.

    Must run before the outbound loop starts; the command queue is sized to
    hold the whole burst so this never blocks.

    Returns:
        Number of queued queries
    """
    for register in INIT_REGISTERS:
        session.enqueue_nowait(build_query(session.client_address, register))
    logger.debug("Queued %d init queries", len(INIT_REGISTERS))
    return len(INIT_REGISTERS)
