"""CLI console helpers with optional Rich support.

Diagnostics and errors go to stderr through :data:`console`; command
results (passwords, JSON, listings) go to stdout through
:func:`emit` so they can be piped.  Rich is imported lazily so that
``--help`` and ``--version`` keep working when it is not installed.
"""

from __future__ import annotations

import sys
from typing import Any

from lpass_wrap.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(*, stderr: bool = True) -> Any:
	"""Create a Rich console on stderr, or stdout with ``stderr=False``."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr)


def escape_markup(text: str) -> str:
	"""Escape Rich markup in *text*; unchanged when Rich is missing."""
	try:
		from rich.markup import escape
	except ModuleNotFoundError:
		return text
	return escape(text)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(*objects, file=sys.stderr)
			return
		rich_console.print(*objects)

	def error(self, message: str, hint: str | None = None) -> None:
		"""Render an error line and its optional hint.

		lpass messages may contain ``[id: ...]`` which Rich would read as
		markup, so both strings are escaped.
		"""
		self.print(f"[bold red]Error:[/bold red] {escape_markup(message)}")
		if hint:
			self.print(f"[yellow]Hint:[/yellow] {escape_markup(hint)}")


console = _ConsoleProxy()


def emit(text: str) -> None:
	"""Write a command result verbatim to stdout, without markup."""
	sys.stdout.write(text)
	if not text.endswith("\n"):
		sys.stdout.write("\n")
