"""Command dispatcher: lookup, validation, transmission and acknowledgement.

One :meth:`Dispatcher.dispatch` call handles one user command, which may
expand to several frames (``dcabl1`` sends the major then the minor channel).
Frames are sent strictly in order and the sequence stops at the first reply
that is not ``OK``. A missing reply is fatal and raised as
:class:`NoResponseError`; rejected or garbled replies are returned as a failed
:class:`DispatchResult`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from .config import DEFAULT_TIMEOUT
from .exceptions import (
    CommandRejectedError,
    NoResponseError,
    TransportError,
    UnexpectedResponseError,
    UnknownCommandError,
)
from .protocol.commands import CommandSpec, CommandTable
from .protocol.framing import Frame
from .protocol.parser import Response, ResponseOutcome, parse_response
from .transport.serial_connection import SerialConnection

logger = logging.getLogger(__name__)


class DispatchState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    TRANSMITTING = "transmitting"
    AWAITING_RESPONSE = "awaiting_response"
    DONE = "done"
    FAILED = "failed"


@dataclass
class DispatchContext:
    """Per-invocation I/O state passed to the dispatcher.

    ``connection`` may be None only in dry-run mode.
    """

    connection: SerialConnection | None = None
    dry_run: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.connection is None and not self.dry_run:
            raise ValueError("A connection is required unless dry_run is set")


@dataclass
class StepResult:
    """One frame and the reply it received."""

    frame: Frame
    response: Response
    sent: bool = True

    def to_dict(self) -> dict:
        return {
            "opcode": self.frame.opcode,
            "parameter": self.frame.parameter,
            "frame": self.frame.to_bytes().decode("ascii"),
            "sent": self.sent,
            "outcome": self.response.outcome.value,
            "payload": self.response.payload,
        }


@dataclass
class DispatchResult:
    """Outcome of a complete command."""

    command: str
    args: tuple[str, ...]
    frames: list[Frame] = field(default_factory=list)
    steps: list[StepResult] = field(default_factory=list)
    state: DispatchState = DispatchState.IDLE
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return self.state is DispatchState.DONE

    @property
    def failed_step(self) -> StepResult | None:
        for step in self.steps:
            if not step.response.ok:
                return step
        return None

    def raise_for_status(self) -> None:
        """Raise the matching :class:`DeviceError` if a step failed."""
        step = self.failed_step
        if step is None:
            return
        outcome = step.response.outcome
        if outcome is ResponseOutcome.PROTOCOL_ERROR:
            raise CommandRejectedError(step.frame.text)
        raise UnexpectedResponseError(step.frame.text, step.response.payload)

    def to_dict(self) -> dict:
        return {
            "command": self.command,
            "args": list(self.args),
            "ok": self.ok,
            "state": self.state.value,
            "dry_run": self.dry_run,
            "steps": [step.to_dict() for step in self.steps],
        }


class Dispatcher:
    """Runs commands from a :class:`CommandTable` against a context."""

    def __init__(self, table: CommandTable, context: DispatchContext) -> None:
        self.table = table
        self.context = context
        self.state = DispatchState.IDLE

    def resolve(self, name: str) -> CommandSpec:
        """Return the spec for ``name``.

        Raises:
            UnknownCommandError: If the name is not in the table.
        """
        spec = self.table.lookup(name)
        if spec is None:
            raise UnknownCommandError(name)
        return spec

    def prepare(self, name: str, args: Sequence[str] = ()) -> list[Frame]:
        """Resolve and validate a command without any I/O.

        Raises:
            UnknownCommandError: Unknown command name.
            ArgumentValidationError: Argument outside the command's domain.
        """
        self._enter(DispatchState.VALIDATING)
        try:
            return self.resolve(name).frames(args)
        except Exception:
            self._enter(DispatchState.FAILED)
            raise

    def dispatch(self, name: str, args: Sequence[str] = ()) -> DispatchResult:
        """Validate, send and acknowledge every frame of a command.

        Raises:
            UnknownCommandError: Unknown command name; nothing was sent.
            ArgumentValidationError: Invalid argument; nothing was sent.
            NoResponseError: A frame got no terminated reply in time. The
                steps sent so far are on its ``result``.
            TransportError: The port failed mid-command.
        """
        self.state = DispatchState.IDLE
        args = tuple(args)
        result = DispatchResult(command=name, args=args, dry_run=self.context.dry_run)
        result.frames = self.prepare(name, args)

        for frame in result.frames:
            try:
                self._enter(DispatchState.TRANSMITTING)
                self.transmit(frame)

                self._enter(DispatchState.AWAITING_RESPONSE)
                response = self.await_response(frame)
            except TransportError:
                self._enter(DispatchState.FAILED)
                result.state = self.state
                raise
            result.steps.append(
                StepResult(frame=frame, response=response, sent=not self.context.dry_run)
            )

            if response.outcome is ResponseOutcome.TIMEOUT:
                self._enter(DispatchState.FAILED)
                result.state = self.state
                raise NoResponseError(frame.text, self.context.timeout, result=result)

            if not response.ok:
                logger.info("%s: %r for %r", name, response, frame.text)
                self._enter(DispatchState.FAILED)
                result.state = self.state
                return result

        self._enter(DispatchState.DONE)
        result.state = self.state
        return result

    def transmit(self, frame: Frame) -> bytes:
        """Write ``frame`` to the transport, or only log it in dry-run mode."""
        data = frame.to_bytes()
        if self.context.dry_run:
            logger.info("Dry run, not sending %r", data)
            return data
        self.context.connection.write(data)
        return data

    def await_response(self, frame: Frame) -> Response:
        if self.context.dry_run:
            return Response(ResponseOutcome.SUCCESS)
        line = self.context.connection.read_line(self.context.timeout)
        response = parse_response(line)
        logger.debug("%s -> %r", frame.text, response)
        return response

    def _enter(self, state: DispatchState) -> None:
        logger.debug("Dispatcher %s -> %s", self.state.value, state.value)
        self.state = state
