"""Write-safety policy for outgoing frames."""

import logging

from vallox_gateway.protocol.constants import MSG_POLL_BYTE, WRITE_ALLOWED

logger = logging.getLogger(__name__)


class WritePolicy:
    """Decides which registers this client may modify.

    Queries are always allowed. A write needs both the global
    ``enable_write`` switch and a register in the allow list.
    """

    def __init__(self, enable_write: bool = False, allowed: frozenset[int] = WRITE_ALLOWED):
        self.enable_write = enable_write
        self.allowed = allowed

    def is_write_allowed(self, register: int) -> bool:
        if register == MSG_POLL_BYTE:
            return True

        if not self.enable_write:
            return False

        return register in self.allowed

    def __repr__(self) -> str:
        return f"WritePolicy(enable_write={self.enable_write}, allowed={sorted(self.allowed)})"
