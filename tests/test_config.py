"""Tests for environment-driven settings."""

import pytest

from sharp_aquos_mcp.config import DEFAULT_PORT, Settings
from sharp_aquos_mcp.protocol.commands import ProtocolVariant


def test_defaults():
    settings = Settings.from_env({})
    assert settings.port == DEFAULT_PORT
    assert settings.baudrate == 9600
    assert settings.timeout == 1.0
    assert settings.protocol is ProtocolVariant.LEGACY


def test_from_env():
    settings = Settings.from_env({
        "AQUOS_PORT": "/dev/ttyUSB1",
        "AQUOS_BAUDRATE": "19200",
        "AQUOS_TIMEOUT": "2.5",
        "AQUOS_PROTOCOL": "Extended",
    })
    assert settings.port == "/dev/ttyUSB1"
    assert settings.baudrate == 19200
    assert settings.timeout == 2.5
    assert settings.protocol is ProtocolVariant.EXTENDED


@pytest.mark.parametrize("env", [
    {"AQUOS_PROTOCOL": "2012"},
    {"AQUOS_TIMEOUT": "soon"},
    {"AQUOS_TIMEOUT": "0"},
    {"AQUOS_BAUDRATE": "fast"},
])
def test_invalid_values(env):
    with pytest.raises(ValueError):
        Settings.from_env(env)


def test_to_dict():
    assert Settings().to_dict()["protocol"] == "legacy"
