"""Application configuration using pydantic-settings."""

import logging
import sys
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vallox_gateway.protocol.constants import BAUDRATE, DEFAULT_CLIENT_ADDRESS, PANEL_ADDRESS_MAX, PANEL_ADDRESS_MIN


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables
    prefixed with VALLOX_ (e.g., VALLOX_SERIAL_PORT).
    """

    serial_port: str = "/dev/ttyUSB0"
    serial_baud: int = BAUDRATE
    client_address: int = Field(DEFAULT_CLIENT_ADDRESS, ge=PANEL_ADDRESS_MIN, le=PANEL_ADDRESS_MAX)
    enable_write: bool = False
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="VALLOX_")


class SessionConfig(BaseModel):
    """Inputs for opening a bus session.

    The client address is checked by ``open_session`` so that a bad value
    surfaces as InvalidAddressError rather than a validation error.
    """

    transport: Any
    client_address: int = DEFAULT_CLIENT_ADDRESS
    enable_write: bool = False
    logger: logging.Logger | None = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def from_settings(cls, settings: Settings, transport: Any) -> "SessionConfig":
        return cls(
            transport=transport,
            client_address=settings.client_address,
            enable_write=settings.enable_write,
        )


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
