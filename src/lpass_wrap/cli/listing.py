"""Rendering of ``ls`` results for the terminal.

Uses a Rich table when Rich is installed and falls back to aligned
plain text on stdout otherwise, mirroring how ``doctor`` degrades.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from lpass_wrap.cli.console import emit, get_rich_console
from lpass_wrap.core.models import ListedEntry, Match
from lpass_wrap.exceptions import EnvironmentError


def _format_date(value: datetime | None) -> str:
    """Render a listing date, or ``"—"`` when the entry has none."""
    if value is None:
        return "—"
    return value.strftime("%Y-%m-%d %H:%M")


def _row(item: Match | ListedEntry) -> tuple[str, ...]:
    if isinstance(item, ListedEntry):
        date = item.last_touch or item.last_modified_gmt
        return (item.name, item.id, item.username or "", _format_date(date))
    return (item.name, item.id)


def _columns(*, long: bool, last_use: bool) -> tuple[str, ...]:
    if long:
        return ("Name", "ID", "Username", "Last used" if last_use else "Modified (UTC)")
    return ("Name", "ID")


def render_listing(
    items: Sequence[Match | ListedEntry],
    *,
    long: bool = False,
    last_use: bool = False,
) -> None:
    """Print listing rows as a table; *long* selects the four-column layout."""
    columns = _columns(long=long, last_use=last_use)
    rows = [_row(item) for item in items]

    try:
        from rich.markup import escape
        from rich.table import Table

        rich_console = get_rich_console(stderr=False)
    except (ModuleNotFoundError, EnvironmentError):
        for row in rows:
            emit("  ".join(row))
        return

    table = Table(show_header=True, header_style="bold cyan", border_style="dim")
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*(escape(cell) for cell in row))
    rich_console.print(table)
