"""Infrastructure: lpass detection and platform guidance.

This module is responsible for locating the lpass executable on the
system PATH and providing platform-specific installation guidance when
it is missing.

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from lpass_wrap.exceptions import LpassNotFoundError
from lpass_wrap.settings import DEFAULT_EXECUTABLE


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class LpassStatus:
    """Result of an lpass detection probe.

    Attributes
    ----------
    found : bool
        Whether lpass was located on PATH.
    path : Path | None
        Absolute path to the lpass binary, or ``None``.
    version_hint : str
        Human-readable status string (e.g. ``"found at …"`` or ``"not found"``).
    install_commands : tuple[str, ...]
        Suggested shell commands for installing lpass on the current
        platform.  Empty when lpass is already present.
    """

    found: bool
    path: Path | None
    version_hint: str
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_lpass(executable: str = DEFAULT_EXECUTABLE) -> LpassStatus:
    """Probe the system for the lpass binary.

    Returns an :class:`LpassStatus` regardless of whether lpass is
    present; the caller decides whether to abort or merely warn.
    """
    result = shutil.which(executable)

    if result is not None:
        resolved = Path(result).resolve()
        return LpassStatus(
            found=True,
            path=resolved,
            version_hint=f"found at {resolved}",
            install_commands=(),
        )

    return LpassStatus(
        found=False,
        path=None,
        version_hint="not found",
        install_commands=_platform_install_commands(),
    )


def require_lpass(executable: str = DEFAULT_EXECUTABLE) -> Path:
    """Locate lpass or raise :class:`LpassNotFoundError`."""
    status = detect_lpass(executable)
    if not status.found or status.path is None:
        hint_lines: list[str] = []
        if status.install_commands:
            hint_lines.append("Install lpass using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        raise LpassNotFoundError(
            f"{executable} is not installed or not on PATH.",
            hint="\n".join(hint_lines) if hint_lines else None,
        )
    return status.path


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def _platform_install_commands() -> tuple[str, ...]:
    """Return install commands appropriate for the current OS."""
    system = platform.system().lower()
    if system == "windows":
        # No native build; lpass runs under WSL or Cygwin.
        return (
            "wsl sudo apt install lastpass-cli",
            "Cygwin setup: select the lastpass-cli package",
        )
    if system == "linux":
        return (
            "sudo apt install lastpass-cli",
            "sudo dnf install lastpass-cli",
            "sudo pacman -S lastpass-cli",
        )
    if system == "darwin":
        return ("brew install lastpass-cli",)
    return ("Build from source: https://github.com/lastpass/lastpass-cli",)
