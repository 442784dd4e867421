"""Exception hierarchy for command validation, transport and device errors."""

from __future__ import annotations


class AquosError(Exception):
    """Base class for all errors raised by this package."""


class UnknownCommandError(AquosError, LookupError):
    """The command name is not in the active command table."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"bad command '{command}'")


class ArgumentValidationError(AquosError, ValueError):
    """An argument failed its command's domain check."""

    def __init__(self, command: str, argument: str, reason: str) -> None:
        self.command = command
        self.argument = argument
        self.reason = reason
        super().__init__(
            f'Invalid parameter "{argument}" for command {command}: {reason}'
        )


class TransportOpenError(AquosError, ConnectionError):
    """The serial port could not be opened."""

    def __init__(self, port: str, reason: str) -> None:
        self.port = port
        self.reason = reason
        super().__init__(f"cannot open {port}: {reason}")


class TransportError(AquosError, ConnectionError):
    """Reading from or writing to an open port failed."""

    def __init__(self, port: str, reason: str) -> None:
        self.port = port
        self.reason = reason
        super().__init__(f"I/O error on {port}: {reason}")


class DeviceError(AquosError):
    """The device answered a frame with something other than ``OK``."""

    def __init__(self, frame_text: str, message: str) -> None:
        self.frame_text = frame_text
        super().__init__(message)


class CommandRejectedError(DeviceError):
    """The device replied with its ``ERR`` marker."""

    def __init__(self, frame_text: str) -> None:
        super().__init__(frame_text, f"Error: command/param '{frame_text}'")


class UnexpectedResponseError(DeviceError):
    """The device reply matched neither ``OK`` nor ``ERR``."""

    def __init__(self, frame_text: str, payload: str) -> None:
        self.payload = payload
        super().__init__(
            frame_text,
            f"Error: unexpected response '{payload}' to command/param '{frame_text}'",
        )


class NoResponseError(AquosError, TimeoutError):
    """No terminated reply arrived before the deadline.

    ``result`` holds the steps completed before the timeout, when known.
    """

    def __init__(self, frame_text: str, timeout: float, result=None) -> None:
        self.frame_text = frame_text
        self.timeout = timeout
        self.result = result
        super().__init__(
            f"No response to command/param '{frame_text}' within {timeout:g}s"
        )
