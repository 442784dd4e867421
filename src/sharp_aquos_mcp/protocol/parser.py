"""Response parsing for device acknowledgements.

The television answers every frame with a single ASCII line terminated by
``\\r`` (some firmware uses ``\\n``): ``OK`` on success, ``ERR`` when the
command or parameter was rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SUCCESS_MARKER = b"OK"
ERROR_MARKER = b"ERR"
LINE_TERMINATORS = b"\r\n"


class ResponseOutcome(Enum):
    """Classification of one reply."""

    SUCCESS = "success"
    PROTOCOL_ERROR = "protocol_error"
    UNEXPECTED_PAYLOAD = "unexpected_payload"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class Response:
    """Parsed reply to a single frame."""

    outcome: ResponseOutcome
    payload: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is ResponseOutcome.SUCCESS

    def __repr__(self) -> str:
        if self.payload:
            return f"Response({self.outcome.name}, payload={self.payload!r})"
        return f"Response({self.outcome.name})"


def strip_terminator(line: bytes) -> bytes:
    """Remove trailing CR/LF bytes."""
    return line.rstrip(LINE_TERMINATORS)


def parse_response(line: bytes | None) -> Response:
    """Classify a raw reply line.

    Args:
        line: Bytes read up to and including the terminator, or ``None``
            when the deadline expired first.

    Returns:
        A :class:`Response`. Prefix matches are exact and case-sensitive.
    """
    if line is None:
        return Response(ResponseOutcome.TIMEOUT)

    body = strip_terminator(line)
    if body.startswith(SUCCESS_MARKER):
        return Response(ResponseOutcome.SUCCESS)
    if body.startswith(ERROR_MARKER):
        return Response(ResponseOutcome.PROTOCOL_ERROR)
    return Response(
        ResponseOutcome.UNEXPECTED_PAYLOAD,
        payload=body.decode("ascii", errors="replace"),
    )
