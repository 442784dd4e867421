"""Argument domains: validation and parameter encoding for each command shape.

Every command in the table binds one domain object. A domain turns the raw
argument strings typed by the user into a :class:`ParsedArgument` (or raises
:class:`ArgumentValidationError`) and then renders that value into one or more
:class:`Frame` objects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

from ..exceptions import ArgumentValidationError
from .framing import Frame, pad_parameter, zero_pad

TOGGLE_VALUE = 0

# Numbers longer than six digits are out of range for every command.
_INTEGER = re.compile(r"-?[0-9]{1,6}")
_DIGITS = re.compile(r"[0-9]{1,6}")
_DOTTED = re.compile(r"([0-9]{1,6})(?:\.([0-9]{1,6}))?")


@dataclass(frozen=True)
class ParsedArgument:
    """A validated, protocol-ready argument.

    ``minor`` is only set for dotted pairs. ``opcode`` overrides the
    domain's default opcode when the argument itself selects the operation
    (input selection).
    """

    value: int
    minor: int | None = None
    opcode: str | None = None


def _frozen(choices: Mapping[str, int]) -> Mapping[str, int]:
    return MappingProxyType(dict(choices))


class ArgumentDomain:
    """Base class for command argument shapes."""

    arity: int = 1

    @property
    def opcodes(self) -> tuple[str, ...]:
        raise NotImplementedError

    def usage(self) -> str:
        raise NotImplementedError

    def parse(self, command: str, args: Sequence[str]) -> ParsedArgument:
        raise NotImplementedError

    def encode(self, parsed: ParsedArgument) -> list[Frame]:
        raise NotImplementedError

    def frames(self, command: str, args: Sequence[str]) -> list[Frame]:
        """Validate ``args`` and return the frames to transmit, in order."""
        return self.encode(self.parse(command, args))

    def _check_arity(self, command: str, args: Sequence[str]) -> None:
        if len(args) > self.arity:
            expected = "no arguments" if self.arity == 0 else f"at most {self.arity} argument(s)"
            raise ArgumentValidationError(command, " ".join(args), f"expected {expected}")

    def _single(self, command: str, args: Sequence[str]) -> str:
        self._check_arity(command, args)
        return args[0] if args else ""


@dataclass(frozen=True)
class Fixed(ArgumentDomain):
    """Zero-argument command that always sends a constant parameter."""

    opcode: str
    value: int = TOGGLE_VALUE
    arity = 0

    @property
    def opcodes(self) -> tuple[str, ...]:
        return (self.opcode,)

    def usage(self) -> str:
        return "<none>"

    def parse(self, command: str, args: Sequence[str]) -> ParsedArgument:
        self._check_arity(command, args)
        return ParsedArgument(self.value)

    def encode(self, parsed: ParsedArgument) -> list[Frame]:
        return [Frame(self.opcode, pad_parameter(parsed.value))]


@dataclass(frozen=True)
class Choice(ArgumentDomain):
    """Argument must be exactly one of a fixed set of tokens.

    Several tokens may share a value (aliases such as ``off``/``0``).
    """

    opcode: str
    choices: Mapping[str, int]

    def __post_init__(self) -> None:
        object.__setattr__(self, "choices", _frozen(self.choices))

    @property
    def opcodes(self) -> tuple[str, ...]:
        return (self.opcode,)

    @property
    def tokens(self) -> list[str]:
        return list(self.choices)

    def usage(self) -> str:
        return "{ " + " | ".join(self.choices) + " }"

    def parse(self, command: str, args: Sequence[str]) -> ParsedArgument:
        arg = self._single(command, args)
        return ParsedArgument(self._lookup(command, arg))

    def encode(self, parsed: ParsedArgument) -> list[Frame]:
        return [Frame(self.opcode, pad_parameter(parsed.value))]

    def _lookup(self, command: str, arg: str) -> int:
        try:
            return self.choices[arg]
        except KeyError:
            raise ArgumentValidationError(
                command, arg, f"expected one of: {', '.join(self.choices)}"
            ) from None


@dataclass(frozen=True)
class ToggleChoice(Choice):
    """Blank argument sends the toggle value; otherwise a :class:`Choice`."""

    toggle: int = TOGGLE_VALUE

    def usage(self) -> str:
        return "[ " + " | ".join(self.choices) + " ]"

    def parse(self, command: str, args: Sequence[str]) -> ParsedArgument:
        arg = self._single(command, args)
        if arg == "":
            return ParsedArgument(self.toggle)
        return ParsedArgument(self._lookup(command, arg))


@dataclass(frozen=True)
class InputSelect(ArgumentDomain):
    """Input selection: blank toggles, ``tv`` picks the tuner, ``1..N`` an input.

    Each form is sent under its own opcode.
    """

    toggle_opcode: str
    tv_opcode: str
    input_opcode: str
    inputs: int

    @property
    def opcodes(self) -> tuple[str, ...]:
        return (self.toggle_opcode, self.tv_opcode, self.input_opcode)

    def usage(self) -> str:
        return f"[ tv | 1 - {self.inputs} ]"

    def parse(self, command: str, args: Sequence[str]) -> ParsedArgument:
        arg = self._single(command, args)
        if arg == "":
            return ParsedArgument(TOGGLE_VALUE, opcode=self.toggle_opcode)
        if arg == "tv":
            return ParsedArgument(TOGGLE_VALUE, opcode=self.tv_opcode)
        if _DIGITS.fullmatch(arg) and 1 <= int(arg) <= self.inputs:
            return ParsedArgument(int(arg), opcode=self.input_opcode)
        raise ArgumentValidationError(
            command, arg, f"expected 'tv' or an input number 1-{self.inputs}"
        )

    def encode(self, parsed: ParsedArgument) -> list[Frame]:
        return [Frame(parsed.opcode or self.input_opcode, pad_parameter(parsed.value))]


@dataclass(frozen=True)
class BoundedInt(ArgumentDomain):
    """Base-10 integer within a closed range, sent left-justified."""

    opcode: str
    low: int
    high: int

    @property
    def opcodes(self) -> tuple[str, ...]:
        return (self.opcode,)

    def usage(self) -> str:
        return f"{{ {self.low} - {self.high} }}"

    def parse(self, command: str, args: Sequence[str]) -> ParsedArgument:
        arg = self._single(command, args)
        return ParsedArgument(_parse_int(command, arg, self.low, self.high))

    def encode(self, parsed: ParsedArgument) -> list[Frame]:
        return [Frame(self.opcode, pad_parameter(parsed.value))]


@dataclass(frozen=True)
class SplitRange(ArgumentDomain):
    """One logical range encoded under two opcodes split at ``threshold``.

    Values at or above the threshold are sent on ``high_opcode`` with the
    threshold subtracted. Both halves are zero-padded to ``digits``.
    """

    low_opcode: str
    high_opcode: str
    threshold: int
    maximum: int
    digits: int = 4

    @property
    def opcodes(self) -> tuple[str, ...]:
        return (self.low_opcode, self.high_opcode)

    def usage(self) -> str:
        return f"{{ 0 - {self.maximum} }}"

    def parse(self, command: str, args: Sequence[str]) -> ParsedArgument:
        arg = self._single(command, args)
        value = _parse_int(command, arg, 0, self.maximum)
        if value < self.threshold:
            return ParsedArgument(value, opcode=self.low_opcode)
        return ParsedArgument(value - self.threshold, opcode=self.high_opcode)

    def encode(self, parsed: ParsedArgument) -> list[Frame]:
        opcode = parsed.opcode or self.low_opcode
        return [Frame(opcode, zero_pad(parsed.value, self.digits))]


@dataclass(frozen=True)
class DottedPair(ArgumentDomain):
    """``major.minor`` channel numbers.

    Accepts ``"major.minor"``, ``"major"`` (minor defaults to 0) or the two
    fields as separate arguments. With one opcode both fields are packed
    into a single zero-padded parameter; with two opcodes the major and
    minor fields are sent as consecutive frames.
    """

    major_opcode: str
    major_range: tuple[int, int]
    minor_range: tuple[int, int]
    digits: int
    minor_opcode: str | None = None
    arity = 2

    @property
    def opcodes(self) -> tuple[str, ...]:
        if self.minor_opcode is None:
            return (self.major_opcode,)
        return (self.major_opcode, self.minor_opcode)

    @property
    def combined(self) -> bool:
        return self.minor_opcode is None

    def usage(self) -> str:
        width = "x" * self.digits
        sub = "y" * self.digits
        return f"{{ {width}.{sub} }} or {{ {width} }}"

    def parse(self, command: str, args: Sequence[str]) -> ParsedArgument:
        self._check_arity(command, args)
        text = ".".join(args)
        if len(args) == 2:
            if not (_DIGITS.fullmatch(args[0]) and _DIGITS.fullmatch(args[1])):
                raise ArgumentValidationError(command, text, "expected major.minor")
            major, minor = int(args[0]), int(args[1])
        else:
            match = _DOTTED.fullmatch(text)
            if match is None:
                raise ArgumentValidationError(command, text, "expected major.minor")
            major = int(match.group(1))
            minor = int(match.group(2) or 0)

        low, high = self.major_range
        if not low <= major <= high:
            raise ArgumentValidationError(
                command, text, f"major channel must be {low}-{high}"
            )
        low, high = self.minor_range
        if not low <= minor <= high:
            raise ArgumentValidationError(
                command, text, f"minor channel must be {low}-{high}"
            )
        return ParsedArgument(major, minor=minor)

    def encode(self, parsed: ParsedArgument) -> list[Frame]:
        minor = parsed.minor or 0
        if self.combined:
            return [
                Frame(
                    self.major_opcode,
                    zero_pad(parsed.value, self.digits) + zero_pad(minor, self.digits),
                )
            ]
        return [
            Frame(self.major_opcode, zero_pad(parsed.value, self.digits)),
            Frame(self.minor_opcode, zero_pad(minor, self.digits)),
        ]


def _parse_int(command: str, arg: str, low: int, high: int) -> int:
    if not _INTEGER.fullmatch(arg):
        raise ArgumentValidationError(command, arg, f"expected a number {low}-{high}")
    value = int(arg)
    if not low <= value <= high:
        raise ArgumentValidationError(command, arg, f"must be {low}-{high}")
    return value
