"""Serial transport to the television."""

from .serial_connection import SerialConnection
