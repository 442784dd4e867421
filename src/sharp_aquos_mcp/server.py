"""MCP server entry point for Sharp Aquos televisions.

Exposes the RS-232C command table as tools, resources, and prompts via the
Model Context Protocol using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import Settings
from .dispatcher import DispatchContext, Dispatcher
from .exceptions import AquosError, NoResponseError, TransportError
from .protocol.commands import CommandTable, get_command_table
from .transport.serial_connection import SerialConnection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "sharp-aquos",
    instructions="MCP server for Sharp Aquos televisions over RS-232C",
)

# Global connection state
_settings: Settings | None = None
_connection: SerialConnection | None = None


def _get_settings() -> Settings:
    """Resolve settings from the environment on first use."""
    global _settings
    if _settings is None:
        try:
            _settings = Settings.from_env()
        except ValueError as e:
            logger.error("Ignoring invalid environment settings: %s", e)
            _settings = Settings()
    return _settings


def _get_connection() -> SerialConnection:
    """Get the open serial connection, raising if not connected."""
    if _connection is None or not _connection.connected:
        raise RuntimeError(
            "Not connected to the television. Use the 'connect' tool first."
        )
    return _connection


def _get_table() -> CommandTable:
    return get_command_table(_get_settings().protocol)


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(port: str = "") -> dict[str, Any]:
    """Open the serial port wired to the television's RS-232C input.

    Args:
        port: Serial device path. Defaults to $AQUOS_PORT or /dev/ttyS0.
    """
    global _connection
    if _connection is not None and _connection.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "port": _connection.port_info.port,
        }

    settings = _get_settings()
    connection = SerialConnection(port or settings.port, settings.baudrate)
    try:
        info = connection.open()
    except AquosError as e:
        return {"connected": False, "error": str(e)}

    _connection = connection
    return {
        "connected": True,
        "port": info.port,
        "baudrate": info.baudrate,
        "protocol": settings.protocol.value,
    }


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial port."""
    global _connection
    if _connection is None:
        return {"disconnected": True}
    _connection.close()
    _connection = None
    return {"disconnected": True}


# ─── COMMAND TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def list_commands() -> dict[str, Any]:
    """List every command supported by the configured protocol revision."""
    table = _get_table()
    return {
        "protocol": table.variant.value,
        "revision": table.variant.revision,
        "commands": [spec.to_dict() for spec in table],
    }


@mcp.tool()
def describe_command(name: str) -> dict[str, Any]:
    """Show the opcodes, arguments and description of one command.

    Args:
        name: Command name, e.g. "vol" or "input".
    """
    spec = _get_table().lookup(name)
    if spec is None:
        return {"error": f"Unknown command '{name}'"}
    return spec.to_dict()


@mcp.tool()
def preview_command(command: str, args: list[str] | None = None) -> dict[str, Any]:
    """Validate a command and show the frames it would send, without sending.

    Args:
        command: Command name, e.g. "power".
        args: Command arguments, e.g. ["on"]. Omit for toggle commands.
    """
    context = DispatchContext(dry_run=True, timeout=_get_settings().timeout)
    try:
        result = Dispatcher(_get_table(), context).dispatch(command, args or [])
    except AquosError as e:
        return {"error": str(e)}
    return result.to_dict()


@mcp.tool()
def send_command(command: str, args: list[str] | None = None) -> dict[str, Any]:
    """Send a command to the television and report each acknowledgement.

    Multi-frame commands stop at the first frame that is not acknowledged
    with OK.

    Args:
        command: Command name, e.g. "vol".
        args: Command arguments, e.g. ["20"]. Omit for toggle commands.
    """
    conn = _get_connection()
    context = DispatchContext(connection=conn, timeout=_get_settings().timeout)
    try:
        result = Dispatcher(_get_table(), context).dispatch(command, args or [])
    except NoResponseError as e:
        # The link state is unknown after a timeout.
        disconnect()
        return {"error": "No response from television", "detail": str(e)}
    except TransportError as e:
        disconnect()
        return {"error": str(e)}
    except AquosError as e:
        return {"error": str(e)}

    response = result.to_dict()
    if not result.ok:
        try:
            result.raise_for_status()
        except AquosError as e:
            response["error"] = str(e)
    return response


@mcp.tool()
def get_protocol_info() -> dict[str, Any]:
    """Report the active protocol revision and serial settings."""
    table = _get_table()
    return {
        "protocol": table.variant.value,
        "revision": table.variant.revision,
        "models": table.variant.models,
        "command_count": len(table),
        "settings": _get_settings().to_dict(),
        "connected": _connection is not None and _connection.connected,
    }


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("aquos://commands")
def resource_commands() -> str:
    """Command catalog for the configured protocol revision."""
    return json.dumps(list_commands())


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def control_tv(goal: str) -> str:
    """Guide the AI to reach a viewing setup using the command tools.

    Args:
        goal: What the viewer wants, e.g. "watch a movie on HDMI 2 quietly".
    """
    return f"""Help the viewer with: {goal}

Steps:
- Call list_commands to see what this television supports
- Use preview_command to check each command's frames before sending
- Send commands one at a time with send_command and check every result
- Stop and report if a command returns an error; do not retry blindly

Remember that power must be on before most other commands are accepted."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    _get_settings()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
