"""Core application functionality."""

from vallox_gateway.core.cache import RegisterCache
from vallox_gateway.core.config import SessionConfig, Settings, setup_logging
from vallox_gateway.core.models import CommandResult, Event

__all__ = [
    "CommandResult",
    "Event",
    "RegisterCache",
    "SessionConfig",
    "Settings",
    "setup_logging",
]
