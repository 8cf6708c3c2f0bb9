"""FastAPI dependency injection for shared application state."""

import asyncio

from vallox_gateway.core.cache import RegisterCache
from vallox_gateway.core.config import Settings
from vallox_gateway.protocol.session import BusSession
from vallox_gateway.serial.connection import SerialConnection


class AppState:
    """Holds shared application state instances.

    Created during app startup and accessed via FastAPI dependencies.
    """

    def __init__(self) -> None:
        self.settings: Settings | None = None
        self.connection: SerialConnection | None = None
        self.cache: RegisterCache | None = None
        self.session: BusSession | None = None
        self.consumer: asyncio.Task | None = None


# Global app state singleton
app_state = AppState()


def get_cache() -> RegisterCache:
    """Get the register cache instance."""
    assert app_state.cache is not None, "App not initialized"
    return app_state.cache


def get_session() -> BusSession:
    """Get the bus session instance."""
    assert app_state.session is not None, "App not initialized"
    return app_state.session
