"""CLI application entry point and command routing for lpass-wrap.

This module is the **sole error boundary** for the entire application.
It catches :class:`~lpass_wrap.exceptions.LpassWrapError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages via Rich and returning well-defined exit codes.

Architecture notes
------------------
* No parsing or command building lives here — all work is delegated to
  :class:`~lpass_wrap.core.client.LastPassClient`.
* Failed results are rendered like errors and mapped to
  :data:`exit_codes.GENERAL_ERROR`.
* Command results go to stdout; diagnostics go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from lpass_wrap.cli import exit_codes
from lpass_wrap.cli.console import console, emit
from lpass_wrap.core.client import LastPassClient
from lpass_wrap.core.models import Result
from lpass_wrap.core.parsers import MULTIPLE_MATCHES
from lpass_wrap.exceptions import LpassWrapError
from lpass_wrap.settings import DEFAULT_EXECUTABLE, load_settings
from lpass_wrap.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Supported commands:
    * ``lpass-wrap doctor``
    * ``lpass-wrap status``
    * ``lpass-wrap ls [GROUP] [--long] [--last-use]``
    * ``lpass-wrap show QUERY [--password | --field NAME | ...]``
    * ``lpass-wrap generate NAME [LENGTH] [--no-symbols]``
    """
    parser = argparse.ArgumentParser(
        prog="lpass-wrap",
        description="Structured front-end for the LastPass CLI.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--executable",
        default=DEFAULT_EXECUTABLE,
        help="Path or name of the lpass executable (default: lpass).",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="Log lpass invocations.",
    )
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Only log errors.",
    )

    commands = parser.add_subparsers(dest="command")

    commands.add_parser("doctor", help="Run environment diagnostics.")
    commands.add_parser("status", help="Show the logged-in user.")

    ls_parser = commands.add_parser("ls", help="List entries.")
    ls_parser.add_argument("group", nargs="?", default="", help="Only list this group.")
    ls_parser.add_argument("-l", "--long", action="store_true", help="Include dates and usernames.")
    ls_parser.add_argument(
        "-u", "--last-use", action="store_true", help="Show last-use instead of modification dates.",
    )

    show_parser = commands.add_parser("show", help="Show one entry.")
    show_parser.add_argument("query", help="Entry name or unique id.")
    field_group = show_parser.add_mutually_exclusive_group()
    for field_name in ("username", "password", "url", "notes"):
        field_group.add_argument(
            f"--{field_name}", action="store_true", help=f"Print only the {field_name}.",
        )
    field_group.add_argument("--field", metavar="NAME", help="Print only this custom field.")
    show_parser.add_argument(
        "-G", "--basic-regexp", action="store_true", help="Treat QUERY as a regular expression.",
    )
    show_parser.add_argument(
        "-F", "--fixed-strings", action="store_true", help="Match QUERY as a substring.",
    )

    generate_parser = commands.add_parser("generate", help="Generate and store a password.")
    generate_parser.add_argument("name", help="Entry name or unique id.")
    generate_parser.add_argument("length", nargs="?", type=int, default=32, help="Password length.")
    generate_parser.add_argument("--username", help="Username to store with the entry.")
    generate_parser.add_argument("--url", help="URL to store with the entry.")
    generate_parser.add_argument("--no-symbols", action="store_true", help="Letters and digits only.")

    return parser


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif quiet:
        logging.basicConfig(level=logging.ERROR)
    else:
        logging.basicConfig(level=logging.WARNING)


def _build_client(executable: str) -> LastPassClient:
    from lpass_wrap.infra.lpass_runner import create_client

    return create_client(load_settings(executable))


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _report_failure(result: Result) -> int:
    console.error(result.message or "lpass failed without an error message.")
    return exit_codes.GENERAL_ERROR


def _handle_status(client: LastPassClient) -> int:
    result = asyncio.run(client.status())
    if not result.success:
        return _report_failure(result)
    if result.data is None:
        emit(result.raw or "")
    else:
        emit(result.data["username"])
    return exit_codes.SUCCESS


def _handle_ls(client: LastPassClient, args: argparse.Namespace) -> int:
    from lpass_wrap.cli.listing import render_listing

    result = asyncio.run(
        client.ls(args.group, long=args.long, last_use=args.last_use),
    )
    if not result.success:
        return _report_failure(result)
    render_listing(result.data, long=args.long, last_use=args.last_use)
    return exit_codes.SUCCESS


def _handle_show(client: LastPassClient, args: argparse.Namespace) -> int:
    """Show one entry, prompting for a choice when the query is ambiguous."""
    options: dict[str, Any] = {
        "username": args.username,
        "password": args.password,
        "url": args.url,
        "notes": args.notes,
        "field": args.field,
        "basic_regexp": args.basic_regexp,
        "fixed_strings": args.fixed_strings,
    }
    result = asyncio.run(client.show(args.query, **options))

    if not result.success and result.message == MULTIPLE_MATCHES:
        from lpass_wrap.cli.match_prompt import prompt_match_selection

        selected_id = prompt_match_selection(args.query, result.data)
        options.update(basic_regexp=False, fixed_strings=False)
        result = asyncio.run(client.show(selected_id, **options))

    if not result.success:
        return _report_failure(result)

    if isinstance(result.data, dict):
        emit(next(iter(result.data.values())))
    else:
        emit(json.dumps([entry.to_dict() for entry in result.data], indent=2))
    return exit_codes.SUCCESS


def _handle_generate(client: LastPassClient, args: argparse.Namespace) -> int:
    result = asyncio.run(
        client.generate(
            args.name,
            args.length,
            username=args.username,
            url=args.url,
            no_symbols=args.no_symbols,
        ),
    )
    if not result.success:
        return _report_failure(result)
    emit(result.data["password"])
    return exit_codes.SUCCESS


def _handle_doctor(executable: str) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from lpass_wrap.cli.doctor import run_doctor

    return run_doctor(executable)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the lpass-wrap CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    _configure_logging(verbose=args.verbose, quiet=args.quiet)

    if args.command == "doctor":
        return _handle_doctor(args.executable)

    client = _build_client(args.executable)
    if args.command == "status":
        return _handle_status(client)
    if args.command == "ls":
        return _handle_ls(client, args)
    if args.command == "show":
        return _handle_show(client, args)
    return _handle_generate(client, args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except LpassWrapError as exc:
        console.error(str(exc), exc.hint)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
