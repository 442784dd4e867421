"""Runtime settings: serial port, line speed, response deadline, protocol table.

Defaults can be overridden with environment variables::

    AQUOS_PORT=/dev/ttyUSB0
    AQUOS_BAUDRATE=9600
    AQUOS_TIMEOUT=1.0
    AQUOS_PROTOCOL=extended
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .protocol.commands import ProtocolVariant

DEFAULT_PORT = "/dev/ttyS0"
DEFAULT_BAUDRATE = 9600
DEFAULT_TIMEOUT = 1.0
DEFAULT_PROTOCOL = ProtocolVariant.LEGACY

ENV_PORT = "AQUOS_PORT"
ENV_BAUDRATE = "AQUOS_BAUDRATE"
ENV_TIMEOUT = "AQUOS_TIMEOUT"
ENV_PROTOCOL = "AQUOS_PROTOCOL"


@dataclass
class Settings:
    port: str = DEFAULT_PORT
    baudrate: int = DEFAULT_BAUDRATE
    timeout: float = DEFAULT_TIMEOUT
    protocol: ProtocolVariant = DEFAULT_PROTOCOL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Raises:
            ValueError: If a numeric value or the protocol name is invalid.
        """
        env = os.environ if environ is None else environ
        settings = cls()
        if env.get(ENV_PORT):
            settings.port = env[ENV_PORT]
        if env.get(ENV_BAUDRATE):
            settings.baudrate = int(env[ENV_BAUDRATE])
        if env.get(ENV_TIMEOUT):
            settings.timeout = float(env[ENV_TIMEOUT])
        if env.get(ENV_PROTOCOL):
            settings.protocol = ProtocolVariant(env[ENV_PROTOCOL].lower())
        if settings.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {settings.timeout}")
        return settings

    def to_dict(self) -> dict:
        return {
            "port": self.port,
            "baudrate": self.baudrate,
            "timeout": self.timeout,
            "protocol": self.protocol.value,
        }
