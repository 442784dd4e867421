"""Frame builder for the Aquos RS-232C command format.

Frame layout::

    +-----------+-----------+------------+
    |  Opcode   | Parameter | Terminator |
    |  4 bytes  |  4 bytes  |  1 byte    |
    +-----------+-----------+------------+

- Opcode: four upper-case ASCII characters (e.g. ``POWR``)
- Parameter: ASCII digits, left-justified and space-padded, or zero-padded
  where the command mandates a fixed digit count
- Terminator: carriage return (0x0D)

Every frame on the wire is therefore exactly 9 bytes long.
"""

from __future__ import annotations

from dataclasses import dataclass

OPCODE_SIZE = 4
PARAMETER_WIDTH = 4
TERMINATOR = b"\r"
FRAME_SIZE = OPCODE_SIZE + PARAMETER_WIDTH + len(TERMINATOR)


def pad_parameter(value: str | int, width: int = PARAMETER_WIDTH) -> str:
    """Left-justify ``value`` in a space-padded field of ``width`` characters.

    Longer values are truncated so the field width never changes.
    """
    return str(value).ljust(width)[:width]


def zero_pad(value: int, digits: int) -> str:
    """Render ``value`` as exactly ``digits`` zero-padded decimal digits."""
    return f"{value:0{digits}d}"[-digits:]


@dataclass(frozen=True)
class Frame:
    """A single opcode/parameter pair ready for transmission."""

    opcode: str
    parameter: str

    def __post_init__(self) -> None:
        if len(self.opcode) != OPCODE_SIZE or not self.opcode.isascii():
            raise ValueError(
                f"Opcode must be {OPCODE_SIZE} ASCII characters, got {self.opcode!r}"
            )
        # Normalize to the fixed field width.
        object.__setattr__(self, "parameter", pad_parameter(self.parameter))

    def to_bytes(self) -> bytes:
        return build_frame(self.opcode, self.parameter)

    @property
    def text(self) -> str:
        """Opcode and parameter without the terminator, e.g. ``'POWR1   '``."""
        return self.opcode + self.parameter

    def __repr__(self) -> str:
        return f"Frame(opcode={self.opcode!r}, parameter={self.parameter!r})"


def build_frame(opcode: str, parameter: str | int = "0") -> bytes:
    """Build the 9-byte wire representation of a command.

    Args:
        opcode: Four-character protocol opcode.
        parameter: Parameter value; padded or truncated to 4 characters.

    Returns:
        ``opcode + parameter + b"\\r"`` as ASCII bytes.
    """
    if len(opcode) != OPCODE_SIZE:
        raise ValueError(f"Opcode must be {OPCODE_SIZE} characters, got {opcode!r}")
    field = pad_parameter(parameter)
    return opcode.encode("ascii") + field.encode("ascii") + TERMINATOR
