"""Interactive disambiguation UI for the CLI layer.

When ``lpass show`` reports multiple matches this module:

* Renders a Rich table of the candidate entries.
* Prompts the user to pick one via questionary arrow keys.
* Returns the selected entry id as a string.

All display-related logic lives here — no lpass invocation and no
output parsing.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from lpass_wrap.cli.console import console, escape_markup
from lpass_wrap.core.models import Match
from lpass_wrap.exceptions import EnvironmentError, SelectionCancelledError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for candidate rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


def _build_choice_label(index: int, match: Match) -> str:
    """Build the single-line label shown in the questionary selector.

    Format: ``"  1.  github                    [id: 111]"``
    """
    return f"  {index + 1}.  {match.name:<24} [id: {match.id}]"


def _display_match_table(query: str, matches: Sequence[Match]) -> None:
    """Print a Rich table of the ambiguous candidates."""
    table_class = _import_rich_table()

    console.print()
    console.print(f"[bold cyan]Multiple entries match[/bold cyan]  {escape_markup(query)}")
    console.print()

    table = table_class(
        title="Matching Entries",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Name", justify="left", min_width=16)
    table.add_column("ID", justify="right", min_width=10)

    for i, match in enumerate(matches, start=1):
        table.add_row(str(i), escape_markup(match.name), match.id)

    console.print(table)
    console.print()


def prompt_match_selection(query: str, matches: Sequence[Match]) -> str:
    """Display the candidates and ask the user to pick one.

    Returns
    -------
    str
        The ``id`` of the chosen entry.

    Raises
    ------
    KeyboardInterrupt
        If the user presses Ctrl+C during selection.
    SelectionCancelledError
        If the user cancels the prompt (Esc / None return).
    """
    questionary = _import_questionary()

    _display_match_table(query, matches)

    choices = [
        questionary.Choice(title=_build_choice_label(i, match), value=match.id)
        for i, match in enumerate(matches)
    ]

    selected: str | None = questionary.select(
        "Select entry:",
        choices=choices,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()  # Returns None on Ctrl+C / Esc

    if selected is None:
        raise SelectionCancelledError(
            "No entry selected.",
            hint="Use arrow keys to pick an entry, or query by its unique id.",
        )

    return selected
