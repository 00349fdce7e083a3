"""Pure construction of ``lpass`` command lines.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic, and trivially unit-testable.

Flag rules (enforced by :func:`serialize_flags`):

1. **Filter** — keep only names in the allow-list or the alias table.
2. **Suppress** — drop ``False`` and ``None`` values entirely.
3. **Render** — ``--kebab-name`` / ``--kebab-name=value``, or the short
   alias ``-x`` / ``-x value``, in parameter iteration order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from lpass_wrap.core.models import Invocation
from lpass_wrap.settings import DEFAULT_EXECUTABLE


# ---------------------------------------------------------------------------
# Flag serialization
# ---------------------------------------------------------------------------

def flag_name(name: str) -> str:
    """Convert a snake_case option name to its kebab-case flag form."""
    return name.replace("_", "-")


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _render_one(name: str, value: Any, alias: str | None) -> list[str]:
    if value is None or value is False:
        return []
    if value is True:
        return [f"-{alias}" if alias else f"--{flag_name(name)}"]
    if alias:
        return [f"-{alias}", _render_value(value)]
    return [f"--{flag_name(name)}={_render_value(value)}"]


def serialize_flags(
    parameters: Mapping[str, Any],
    allowed: Iterable[str] = (),
    aliases: Mapping[str, str] | None = None,
) -> list[str]:
    """Turn a parameter mapping into ordered CLI tokens.

    Parameters
    ----------
    parameters:
        Option names (snake_case) mapped to their values.  Iteration
        order is preserved in the output.
    allowed:
        Names rendered in long form.
    aliases:
        Names rendered with a single-letter short flag instead.

    Returns
    -------
    list[str]
        Tokens such as ``["--sync=now", "-u", "--long"]``.
    """
    alias_map = dict(aliases or {})
    accepted = set(allowed) | set(alias_map)
    tokens: list[str] = []
    for name, value in parameters.items():
        if name not in accepted:
            continue
        alias = alias_map.get(name)
        values = value if isinstance(value, (list, tuple)) else (value,)
        for item in values:
            tokens.extend(_render_one(name, item, alias))
    return tokens


# ---------------------------------------------------------------------------
# Invocation assembly
# ---------------------------------------------------------------------------

def build_invocation(
    subcommand: str,
    positionals: Sequence[str] = (),
    parameters: Mapping[str, Any] | None = None,
    allowed: Iterable[str] = (),
    aliases: Mapping[str, str] | None = None,
    *,
    stdin: str | None = None,
    env: Mapping[str, str] | None = None,
    executable: str = DEFAULT_EXECUTABLE,
) -> Invocation:
    """Assemble the argv for ``lpass <subcommand> <positionals> <flags>``.

    *subcommand* may hold several words (``"share useradd"``); each word
    becomes its own argv item.  Positional values are appended verbatim,
    one argv item each.
    """
    flags = serialize_flags(parameters or {}, allowed, aliases)
    argv = (executable, *subcommand.split(), *positionals, *flags)
    return Invocation(argv=argv, stdin=stdin, env=dict(env or {}))
