"""Protocol layer: frame building, command table, argument domains, response parsing."""

from .framing import Frame, build_frame
from .commands import CommandSpec, CommandTable, ProtocolVariant, get_command_table
from .parser import Response, ResponseOutcome, parse_response
