"""Unit tests for configuration module."""

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from vallox_gateway.core.config import SessionConfig, Settings, setup_logging


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self):
        """Test settings have sensible defaults."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.serial_port == "/dev/ttyUSB0"
        assert settings.serial_baud == 9600
        assert settings.client_address == 0x27
        assert settings.enable_write is False
        assert settings.api_host == "0.0.0.0"
        assert settings.api_port == 8000
        assert settings.log_level == "INFO"

    def test_env_override_serial_port(self):
        with patch.dict(os.environ, {"VALLOX_SERIAL_PORT": "/dev/ttyACM0"}):
            settings = Settings()

        assert settings.serial_port == "/dev/ttyACM0"

    def test_env_override_enable_write(self):
        with patch.dict(os.environ, {"VALLOX_ENABLE_WRITE": "true"}):
            settings = Settings()

        assert settings.enable_write is True

    def test_env_override_client_address(self):
        with patch.dict(os.environ, {"VALLOX_CLIENT_ADDRESS": "33"}):
            settings = Settings()

        assert settings.client_address == 0x21

    @pytest.mark.parametrize("address", ["31", "48"])
    def test_env_client_address_out_of_range(self, address):
        """Addresses outside 0x20-0x2F are rejected at load time."""
        with patch.dict(os.environ, {"VALLOX_CLIENT_ADDRESS": address}):
            with pytest.raises(ValidationError):
                Settings()

    def test_env_prefix(self):
        """Test that non-prefixed env vars are ignored."""
        with patch.dict(os.environ, {"SERIAL_PORT": "/dev/other"}, clear=True):
            settings = Settings()

        assert settings.serial_port == "/dev/ttyUSB0"


class TestSessionConfig:
    """Tests for SessionConfig."""

    def test_defaults(self):
        config = SessionConfig(transport=object())

        assert config.client_address == 0x27
        assert config.enable_write is False
        assert config.logger is None

    def test_from_settings(self):
        transport = object()
        with patch.dict(os.environ, {"VALLOX_CLIENT_ADDRESS": "44", "VALLOX_ENABLE_WRITE": "1"}, clear=True):
            config = SessionConfig.from_settings(Settings(), transport)

        assert config.transport is transport
        assert config.client_address == 44
        assert config.enable_write is True

    def test_accepts_logger(self):
        sink = logging.getLogger("test.sink")

        assert SessionConfig(transport=None, logger=sink).logger is sink


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_info(self):
        setup_logging("INFO")

    def test_setup_logging_case_insensitive(self):
        setup_logging("debug")

    def test_setup_logging_invalid_defaults_to_info(self):
        setup_logging("INVALID")
