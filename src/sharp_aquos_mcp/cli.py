"""``aquosctl`` command-line entry point.

    aquosctl [-n] [-v] [-p PORT] [--protocol {legacy,extended}] command [arg ...]

Exit status is 0 only when every frame of the command was acknowledged
with ``OK`` (or, with ``-n``, when the command validated).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence, TextIO

from .config import Settings
from .dispatcher import DispatchContext, Dispatcher, DispatchResult
from .exceptions import AquosError, NoResponseError
from .protocol.commands import CommandTable, ProtocolVariant, get_command_table
from .transport.serial_connection import SerialConnection

logger = logging.getLogger(__name__)

PROG = "aquosctl"
EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Control Sharp Aquos televisions via the RS-232C interface.",
    )
    parser.add_argument(
        "-n", "--no-send",
        action="store_true",
        help="show commands being sent, but don't send them",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="verbose mode",
    )
    parser.add_argument(
        "-p", "--port",
        help="serial port to use (default: $AQUOS_PORT or /dev/ttyS0)",
    )
    parser.add_argument(
        "--protocol",
        choices=[variant.value for variant in ProtocolVariant],
        help="command table revision (default: $AQUOS_PROTOCOL or legacy)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="seconds to wait for each reply (default: 1)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="list the supported commands and exit",
    )
    parser.add_argument("command", nargs="?", help="command name, see --list")
    parser.add_argument("args", nargs="*", help="command arguments")
    return parser


def format_command_list(table: CommandTable) -> str:
    """Render the command table the way the usage screen shows it."""
    lines = [
        f"{PROG} (command protocol revision {table.variant.revision})",
        "",
        "command    args",
        "--------------------",
    ]
    for spec in table:
        lines.append(f"{spec.name:<10} {spec.usage}")
        lines.append(f"{'':<10} {spec.description}")
        lines.append("")
    return "\n".join(lines)


def _resolve_settings(ns: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if ns.port:
        settings.port = ns.port
    if ns.protocol:
        settings.protocol = ProtocolVariant(ns.protocol)
    if ns.timeout is not None:
        if ns.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {ns.timeout}")
        settings.timeout = ns.timeout
    return settings


def run_command(
    table: CommandTable,
    settings: Settings,
    command: str,
    args: Sequence[str],
    dry_run: bool = False,
    serial_cls: type | None = None,
) -> DispatchResult:
    """Validate and run one command, opening the port only if needed."""
    if dry_run:
        context = DispatchContext(dry_run=True, timeout=settings.timeout)
        return Dispatcher(table, context).dispatch(command, args)

    # Validate before touching the port.
    Dispatcher(table, DispatchContext(dry_run=True)).prepare(command, args)

    with SerialConnection(settings.port, settings.baudrate, serial_cls=serial_cls) as conn:
        context = DispatchContext(connection=conn, timeout=settings.timeout)
        return Dispatcher(table, context).dispatch(command, args)


def _report(result: DispatchResult, verbose: bool, out: TextIO) -> None:
    for step in result.steps:
        if verbose or result.dry_run:
            print(
                f"command='{step.frame.opcode}', parameter='{step.frame.parameter}'",
                file=out,
            )
        if verbose and step.sent and step.response.ok:
            print("Success.", file=out)


def main(argv: Sequence[str] | None = None, serial_cls: type | None = None) -> int:
    """Run the CLI and return the process exit status."""
    parser = build_parser()
    ns = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = _resolve_settings(ns)
    except ValueError as e:
        print(f"{PROG}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    table = get_command_table(settings.protocol)

    if ns.list or ns.command is None:
        print(format_command_list(table), file=sys.stdout if ns.list else sys.stderr)
        return EXIT_SUCCESS if ns.list else EXIT_FAILURE

    if ns.verbose:
        print(f"port={settings.port}")

    try:
        result = run_command(
            table,
            settings,
            ns.command,
            ns.args,
            dry_run=ns.no_send,
            serial_cls=serial_cls,
        )
    except NoResponseError as e:
        logger.debug("%s", e)
        if e.result is not None:
            _report(e.result, ns.verbose, sys.stdout)
        print("No response.")
        return EXIT_FAILURE
    except AquosError as e:
        print(f"{PROG}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    _report(result, ns.verbose, sys.stdout)

    if not result.ok:
        try:
            result.raise_for_status()
        except AquosError as e:
            print(e, file=sys.stderr)
        return EXIT_FAILURE

    return EXIT_SUCCESS


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
