"""Sharp Aquos RS-232C control: command table, serial transport, CLI and MCP server."""

__version__ = "0.1.0"
