"""``lpass-wrap doctor`` — environment diagnostics command.

Collects one :class:`CheckResult` per requirement and renders them as a
Rich table, or as aligned plain text on stderr when Rich is missing.
No lpass command is executed; the executable is only located on PATH.
"""

from __future__ import annotations

import platform
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from lpass_wrap.cli import exit_codes
from lpass_wrap.cli.console import console
from lpass_wrap.infra.lpass_detector import LpassStatus, detect_lpass
from lpass_wrap.settings import DEFAULT_EXECUTABLE
from lpass_wrap.version import __version__

MIN_PYTHON: tuple[int, int] = (3, 10)

OK = "OK"
WARN = "WARN"
FAIL = "FAIL"

_LEVEL_COLOURS: dict[str, str] = {OK: "green", WARN: "yellow", FAIL: "red"}

_OS_NAMES: dict[str, str] = {"Darwin": "macOS"}


@dataclass(frozen=True, slots=True)
class CheckResult:
    """One row of the doctor table."""

    component: str
    value: str
    level: str
    note: str = ""

    @property
    def failed(self) -> bool:
        return self.level == FAIL

    def status_markup(self) -> str:
        text = f"{self.level} ({self.note})" if self.note else self.level
        colour = _LEVEL_COLOURS[self.level]
        return f"[{colour}]{text}[/{colour}]"

    def status_plain(self) -> str:
        return f"{self.level} ({self.note})" if self.note else self.level


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def _python_check() -> CheckResult:
    supported = sys.version_info[:2] >= MIN_PYTHON
    minimum = ".".join(str(part) for part in MIN_PYTHON)
    return CheckResult(
        "Python",
        platform.python_version(),
        OK if supported else FAIL,
        "" if supported else f">={minimum} required",
    )


def _lpass_check(status: LpassStatus) -> CheckResult:
    if status.found:
        return CheckResult("lpass", str(status.path) if status.path else "found", OK)
    return CheckResult("lpass", "not found", FAIL)


def _questionary_check() -> CheckResult:
    """questionary only powers the multiple-match prompt, so it is a warning."""
    try:
        import questionary
    except ImportError:
        return CheckResult("questionary", "NOT INSTALLED", WARN)
    return CheckResult("questionary", getattr(questionary, "__version__", "unknown"), OK)


def _os_check() -> CheckResult:
    system = platform.system()
    name = _OS_NAMES.get(system, system)
    return CheckResult("OS", f"{name} {platform.release()} ({platform.machine()})", OK)


def _version_check() -> CheckResult:
    return CheckResult("lpass-wrap", __version__, OK)


def collect_checks(executable: str = DEFAULT_EXECUTABLE) -> tuple[list[CheckResult], LpassStatus]:
    """Run every check; also return the lpass probe for install guidance."""
    lpass_status = detect_lpass(executable)
    checks = [
        _version_check(),
        _python_check(),
        _lpass_check(lpass_status),
        _questionary_check(),
        _os_check(),
    ]
    return checks, lpass_status


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _render_rich(table_class: type, checks: Sequence[CheckResult]) -> None:
    table = table_class(
        title="lpass-wrap doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for check in checks:
        table.add_row(check.component, check.value, check.status_markup())

    console.print()
    console.print(table)
    console.print()


def _render_plain(checks: Sequence[CheckResult]) -> None:
    lines = [
        "",
        "lpass-wrap doctor",
        "=" * 56,
        f"{'Component':<12} {'Value':<32} {'Status':<8}",
        "-" * 56,
    ]
    lines.extend(
        f"{check.component:<12} {check.value:<32} {check.status_plain():<8}"
        for check in checks
    )
    print("\n".join(lines), file=sys.stderr)
    print(file=sys.stderr)


def _install_guidance(executable: str, commands: Sequence[str], *, rich: bool) -> list[str]:
    header = f"{executable} is not installed."
    if rich:
        header = f"[yellow]{header}[/yellow]"
        items = [f"  [bold]{cmd}[/bold]" for cmd in commands]
    else:
        items = [f"  {cmd}" for cmd in commands]
    return [header, "Install using one of the following commands:\n", *items, ""]


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(executable: str = DEFAULT_EXECUTABLE) -> int:
    """Execute all diagnostic checks and render a summary.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check failed,
        :data:`exit_codes.GENERAL_ERROR` otherwise.
    """
    checks, lpass_status = collect_checks(executable)

    table_class: type | None
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        table_class = None
    else:
        table_class = Table

    rich = table_class is not None
    if table_class is not None:
        _render_rich(table_class, checks)
    else:
        _render_plain(checks)

    footer: list[str] = []
    if not lpass_status.found and lpass_status.install_commands:
        footer.extend(_install_guidance(executable, lpass_status.install_commands, rich=rich))

    failed = any(check.failed for check in checks)
    if failed:
        footer.append("[bold red]Some checks failed.[/bold red]" if rich else "Some checks failed.")
    else:
        footer.append(
            "[bold green]All checks passed.[/bold green]" if rich else "All checks passed.",
        )

    for line in footer:
        if rich:
            console.print(line)
        else:
            print(line, file=sys.stderr)

    return exit_codes.GENERAL_ERROR if failed else exit_codes.SUCCESS
