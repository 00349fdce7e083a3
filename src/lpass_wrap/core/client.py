"""Operation facade — one coroutine per ``lpass`` sub-command.

This is the central class consumed by library users and by the CLI
layer.  It depends on a :class:`~lpass_wrap.core.protocols.CommandRunner`
injected at construction time (dependency inversion), keeping the core
free of any process-management imports.

Guarantees
----------
* Every operation runs at most one ``lpass`` process.
* Every operation except :meth:`LastPassClient.scan` resolves to a
  :class:`~lpass_wrap.core.models.Result` and never raises for invalid
  input or tool failures.
* :meth:`LastPassClient.scan` resolves to a tuple of matches, returns an
  empty tuple when nothing was found, and raises
  :class:`~lpass_wrap.exceptions.LastPassCommandError` for any other
  failure.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from lpass_wrap.core.command_builder import build_invocation
from lpass_wrap.core.invoker import invoke
from lpass_wrap.core.models import CallOutcome, Match, Result
from lpass_wrap.core.parsers import (
    MULTIPLE_MATCHES,
    parse_entries,
    parse_long_lines,
    parse_multiple_matches,
    parse_name_id_lines,
    parse_selected_field,
    parse_status,
)
from lpass_wrap.core.protocols import CommandRunner
from lpass_wrap.exceptions import InvalidArgumentError, LastPassCommandError, OutputParseError
from lpass_wrap.settings import ClientSettings

TOO_MANY_FIELDS: str = "Too many selected fields."
FIELD_WITH_MULTIPLE_ENTRIES: str = "Selected field and multiple entries are not supported."

GENERATE_MIN_LENGTH: int = 4
GENERATE_MAX_LENGTH: int = 100

_NOT_FOUND = re.compile(r"Could not find specified account")

# argv strings cannot carry NUL bytes.
_NUL = "\x00"

_SELECTABLE_FIELDS: tuple[str, ...] = ("username", "password", "url", "notes", "id", "name")

_OPTION_CHOICES: dict[str, tuple[str, ...]] = {
    "sync": ("auto", "now", "no"),
    "color": ("auto", "never", "always"),
}

# Allow-lists per sub-command, in lpass usage order.
_LOGIN_OPTIONS = ("trust", "plaintext_key", "force", "color")
_LOGOUT_OPTIONS = ("force", "color")
_SHOW_OPTIONS = (
    "sync", "clip", "expand_multi", "all", "username", "password", "url",
    "notes", "field", "id", "name", "basic_regexp", "fixed_strings", "color", "json",
)
_LS_OPTIONS = ("sync", "long", "color")
_LS_ALIASES = {"last_use": "u"}
_SYNC_COLOR = ("sync", "color")
_ADD_OPTIONS = (
    "sync", "non_interactive", "name", "username", "password", "url", "notes",
    "field", "note_type", "color",
)
_EDIT_OPTIONS = (
    "sync", "non_interactive", "name", "username", "password", "url", "notes",
    "field", "color",
)
_GENERATE_OPTIONS = ("sync", "clip", "username", "url", "no_symbols", "color")
_STATUS_OPTIONS = ("quiet", "color")
_SYNC_OPTIONS = ("background", "color")
_SHARE_USER_OPTIONS = ("read_only", "hidden", "admin")
_SHARE_LIMIT_OPTIONS = ("deny", "allow", "add", "rm", "clear")
_SCAN_OPTIONS = ("sync", "basic_regexp", "fixed_strings", "json")

_Op = TypeVar("_Op", bound=Callable[..., Awaitable[Result]])


def _reports_invalid_arguments(method: _Op) -> _Op:
    """Turn :class:`InvalidArgumentError` into a failed :class:`Result`."""

    @functools.wraps(method)
    async def wrapper(*args: Any, **kwargs: Any) -> Result:
        try:
            return await method(*args, **kwargs)
        except InvalidArgumentError as exc:
            return Result.fail(str(exc))

    return wrapper  # type: ignore[return-value]


class LastPassClient:
    """Stateless facade over the ``lpass`` executable.

    Parameters
    ----------
    runner:
        Any object satisfying the :class:`CommandRunner` protocol.
    settings:
        Executable name and stdin behaviour.  Defaults to
        :class:`~lpass_wrap.settings.ClientSettings`.

    Options are passed as snake_case keyword arguments and translated to
    lpass flags (``expand_multi=True`` becomes ``--expand-multi``).
    Options an operation does not recognize are ignored; ``False`` and
    ``None`` values are never rendered.
    """

    def __init__(
        self,
        runner: CommandRunner,
        *,
        settings: ClientSettings | None = None,
    ) -> None:
        self._runner: CommandRunner = runner
        self._settings: ClientSettings = settings or ClientSettings()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @_reports_invalid_arguments
    async def login(
        self,
        username: str,
        password: str | None = None,
        **options: Any,
    ) -> Result:
        """``lpass login [--trust] [--plaintext-key [--force]] USERNAME``.

        When *password* is given it is written to the tool's stdin with
        pinentry disabled; it never appears among the command arguments.
        """
        self._validate_identifier(username, "username")
        if password is not None and not isinstance(password, str):
            raise InvalidArgumentError("Expected password to be a string.")
        self._validate_options(options)

        if password is None:
            return await self._passthrough("login", (username,), options, _LOGIN_OPTIONS)
        return await self._passthrough(
            "login",
            (username,),
            options,
            _LOGIN_OPTIONS,
            stdin=f"{password}\n",
        )

    @_reports_invalid_arguments
    async def logout(self, **options: Any) -> Result:
        """``lpass logout [--force]``."""
        self._validate_options(options)
        return await self._passthrough("logout", (), options, _LOGOUT_OPTIONS)

    @_reports_invalid_arguments
    async def passwd(self) -> Result:
        """``lpass passwd``: change the master password interactively."""
        return await self._passthrough("passwd")

    @_reports_invalid_arguments
    async def status(self, **options: Any) -> Result:
        """``lpass status [--quiet]``.

        ``data`` is ``{"username": ...}`` when the tool reports a logged-in
        user.  A successful call without that line (for instance with
        ``quiet=True``) carries only ``raw``.
        """
        self._validate_options(options)
        outcome = await self._call("status", (), options, _STATUS_OPTIONS)
        if not outcome.success:
            return Result.fail(outcome.text)
        username = parse_status(outcome.text)
        if username is None:
            return Result.ok(outcome.text)
        return Result.ok(outcome.text, {"username": username})

    @_reports_invalid_arguments
    async def sync(self, **options: Any) -> Result:
        """``lpass sync [--background]``."""
        self._validate_options(options)
        return await self._passthrough("sync", (), options, _SYNC_OPTIONS)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @_reports_invalid_arguments
    async def show(self, names: str | Sequence[str], **options: Any) -> Result:
        """``lpass show [options] {NAME|UNIQUEID}*``.

        Without a selected field the entries are fetched as JSON and
        ``data`` is a tuple of :class:`~lpass_wrap.core.models.Entry`.
        With exactly one selected field (``password=True``,
        ``field="Hostname"``, ...) ``data`` is ``{field: raw_text}``.

        When the query is ambiguous the result is a failure whose
        ``message`` is :data:`MULTIPLE_MATCHES` and whose ``data`` holds
        the candidate :class:`~lpass_wrap.core.models.Match` records.
        """
        entries = self._validate_names(names, "names")
        self._validate_options(options)

        selected = [name for name in _SELECTABLE_FIELDS if options.get(name) is True]
        field = options.get("field")
        if field not in (None, False):
            self._validate_identifier(field, "field")
            selected.append(field)
        if len(selected) > 1:
            return Result.fail(TOO_MANY_FIELDS)
        if selected and len(entries) > 1:
            return Result.fail(FIELD_WITH_MULTIPLE_ENTRIES)

        as_json = not selected
        outcome = await self._call(
            "show", entries, {**options, "json": as_json}, _SHOW_OPTIONS,
        )

        ambiguous = self._ambiguity(outcome)
        if ambiguous is not None:
            return ambiguous
        if not outcome.success:
            return Result.fail(outcome.text)

        if as_json:
            try:
                data: Any = parse_entries(outcome.text)
            except OutputParseError as exc:
                return Result.fail(str(exc), raw=outcome.text)
        else:
            data = parse_selected_field(selected[0], outcome.text)
        return Result.ok(outcome.text, data)

    @_reports_invalid_arguments
    async def ls(self, group: str = "", **options: Any) -> Result:
        """``lpass ls [--long] [-u] [GROUP]``.

        ``data`` is a tuple of :class:`~lpass_wrap.core.models.Match`, or
        of :class:`~lpass_wrap.core.models.ListedEntry` with ``long=True``.
        With ``last_use=True`` long-listing dates land in ``last_touch``
        instead of ``last_modified_gmt``.
        """
        if not isinstance(group, str):
            raise InvalidArgumentError("Expected group to be a string.")
        if group:
            self._validate_identifier(group, "group")
        self._validate_options(options)

        positionals = (group,) if group else ()
        outcome = await self._call("ls", positionals, options, _LS_OPTIONS, _LS_ALIASES)
        if not outcome.success:
            return Result.fail(outcome.text)

        if options.get("long"):
            data: Any = parse_long_lines(outcome.text, last_use=bool(options.get("last_use")))
        else:
            data = parse_name_id_lines(outcome.text)
        return Result.ok(outcome.text, data)

    async def scan(self, query: str, **options: Any) -> tuple[Match, ...]:
        """Look up entries matching *query* and return their names and ids.

        Unlike every other operation this one raises instead of returning
        a failed :class:`Result`.

        Returns
        -------
        tuple[Match, ...]
            All matching entries; empty when lpass reports that nothing
            matched.

        Raises
        ------
        InvalidArgumentError
            If *query* is empty or an option value is malformed.
        LastPassCommandError
            When lpass fails for any reason other than "not found"
            (for instance an expired session).
        OutputParseError
            When lpass succeeds but prints something that is not JSON.
        """
        self._validate_identifier(query, "query")
        self._validate_options(options)

        outcome = await self._call(
            "show", (query,), {**options, "json": True}, _SCAN_OPTIONS,
        )
        matches = parse_multiple_matches(outcome.text)
        if matches is not None:
            return matches
        if not outcome.success:
            if _NOT_FOUND.search(outcome.text):
                return ()
            raise LastPassCommandError(
                outcome.text,
                raw=outcome.text,
                hint="Check the session with `lpass status`.",
            )
        return tuple(Match(name=entry.name, id=entry.id) for entry in parse_entries(outcome.text))

    # ------------------------------------------------------------------
    # Entry management
    # ------------------------------------------------------------------

    @_reports_invalid_arguments
    async def mv(self, name: str, group: str, **options: Any) -> Result:
        """``lpass mv {UNIQUENAME|UNIQUEID} GROUP``."""
        self._validate_identifier(name, "name")
        self._validate_identifier(group, "group")
        self._validate_options(options)
        return await self._passthrough("mv", (name, group), options, _SYNC_COLOR)

    @_reports_invalid_arguments
    async def add(self, name: str, content: str | None = None, **options: Any) -> Result:
        """``lpass add [--non-interactive] {--username|--password|...} NAME``.

        *content* is written to stdin and implies ``non_interactive``;
        lpass stores it in the field chosen by the flags.
        """
        return await self._write_entry("add", name, content, options, _ADD_OPTIONS)

    @_reports_invalid_arguments
    async def edit(self, name: str, content: str | None = None, **options: Any) -> Result:
        """``lpass edit [--non-interactive] {--username|--password|...} NAME``."""
        return await self._write_entry("edit", name, content, options, _EDIT_OPTIONS)

    @_reports_invalid_arguments
    async def generate(self, name: str, length: int = 32, **options: Any) -> Result:
        """``lpass generate [--no-symbols] NAME LENGTH``.

        ``data`` is ``{"password": generated}``.
        """
        self._validate_identifier(name, "name")
        if (
            isinstance(length, bool)
            or not isinstance(length, int)
            or not GENERATE_MIN_LENGTH <= length <= GENERATE_MAX_LENGTH
        ):
            raise InvalidArgumentError(
                f"Expected length to be an integer in range "
                f"[{GENERATE_MIN_LENGTH}..{GENERATE_MAX_LENGTH}], got {length!r}."
            )
        self._validate_options(options)

        outcome = await self._call("generate", (name, str(length)), options, _GENERATE_OPTIONS)
        if not outcome.success:
            return Result.fail(outcome.text)
        return Result.ok(outcome.text, {"password": outcome.text})

    @_reports_invalid_arguments
    async def duplicate(self, name: str, **options: Any) -> Result:
        """``lpass duplicate {UNIQUENAME|UNIQUEID}``."""
        self._validate_identifier(name, "name")
        self._validate_options(options)
        return await self._passthrough("duplicate", (name,), options, _SYNC_COLOR)

    @_reports_invalid_arguments
    async def rm(self, name: str, **options: Any) -> Result:
        """``lpass rm {UNIQUENAME|UNIQUEID}``."""
        self._validate_identifier(name, "name")
        self._validate_options(options)
        return await self._passthrough("rm", (name,), options, _SYNC_COLOR)

    @_reports_invalid_arguments
    async def import_file(self, filename: str, **options: Any) -> Result:
        """``lpass import FILENAME``."""
        self._validate_identifier(filename, "filename")
        self._validate_options(options)
        return await self._passthrough("import", (filename,), options, ("sync",))

    @_reports_invalid_arguments
    async def export(self, **options: Any) -> Result:
        """``lpass export`` — ``data`` is the CSV text."""
        self._validate_options(options)
        return await self._passthrough("export", (), options, _SYNC_COLOR)

    # ------------------------------------------------------------------
    # Shared folders
    # ------------------------------------------------------------------

    @_reports_invalid_arguments
    async def share_userls(self, share: str) -> Result:
        """``lpass share userls SHARE``."""
        self._validate_identifier(share, "share")
        return await self._passthrough("share userls", (share,))

    @_reports_invalid_arguments
    async def share_useradd(self, share: str, username: str, **options: Any) -> Result:
        """``lpass share useradd [--read-only] [--hidden] [--admin] SHARE USERNAME``."""
        return await self._share_user("share useradd", share, username, options)

    @_reports_invalid_arguments
    async def share_usermod(self, share: str, username: str, **options: Any) -> Result:
        """``lpass share usermod [--read-only] [--hidden] [--admin] SHARE USERNAME``."""
        return await self._share_user("share usermod", share, username, options)

    @_reports_invalid_arguments
    async def share_userdel(self, share: str, username: str) -> Result:
        """``lpass share userdel SHARE USERNAME``."""
        self._validate_identifier(share, "share")
        self._validate_identifier(username, "username")
        return await self._passthrough("share userdel", (share, username))

    @_reports_invalid_arguments
    async def share_create(self, share: str) -> Result:
        """``lpass share create SHARE``."""
        self._validate_identifier(share, "share")
        return await self._passthrough("share create", (share,))

    @_reports_invalid_arguments
    async def share_rm(self, share: str) -> Result:
        """``lpass share rm SHARE``."""
        self._validate_identifier(share, "share")
        return await self._passthrough("share rm", (share,))

    @_reports_invalid_arguments
    async def share_limit(
        self,
        share: str,
        username: str,
        sites: str | Sequence[str] = (),
        **options: Any,
    ) -> Result:
        """``lpass share limit [--deny|--allow] [--add|--rm|--clear] SHARE USERNAME [SITE...]``."""
        self._validate_identifier(share, "share")
        self._validate_identifier(username, "username")
        site_list = self._validate_names(sites, "sites", allow_empty=True)
        self._validate_options(options)
        return await self._passthrough(
            "share limit", (share, username, *site_list), options, _SHARE_LIMIT_OPTIONS,
        )

    # ------------------------------------------------------------------
    # Shared plumbing
    # ------------------------------------------------------------------

    async def _call(
        self,
        subcommand: str,
        positionals: Sequence[str] = (),
        options: Mapping[str, Any] | None = None,
        allowed: Iterable[str] = (),
        aliases: Mapping[str, str] | None = None,
        *,
        stdin: str | None = None,
    ) -> CallOutcome:
        invocation = build_invocation(
            subcommand,
            positionals,
            options,
            allowed,
            aliases,
            stdin=stdin,
            env=self._settings.stdin_env if stdin is not None else None,
            executable=self._settings.executable,
        )
        return await invoke(self._runner, invocation)

    async def _passthrough(
        self,
        subcommand: str,
        positionals: Sequence[str] = (),
        options: Mapping[str, Any] | None = None,
        allowed: Iterable[str] = (),
        *,
        stdin: str | None = None,
    ) -> Result:
        """Run a command whose output needs no parsing."""
        outcome = await self._call(subcommand, positionals, options, allowed, stdin=stdin)
        if not outcome.success:
            return Result.fail(outcome.text)
        return Result.ok(outcome.text, outcome.text)

    async def _write_entry(
        self,
        subcommand: str,
        name: str,
        content: str | None,
        options: dict[str, Any],
        allowed: tuple[str, ...],
    ) -> Result:
        self._validate_identifier(name, "name")
        if content is not None and not isinstance(content, str):
            raise InvalidArgumentError("Expected content to be a string.")
        self._validate_options(options)
        if content is None:
            return await self._passthrough(subcommand, (name,), options, allowed)
        return await self._passthrough(
            subcommand,
            (name,),
            {**options, "non_interactive": True},
            allowed,
            stdin=content,
        )

    async def _share_user(
        self,
        subcommand: str,
        share: str,
        username: str,
        options: dict[str, Any],
    ) -> Result:
        self._validate_identifier(share, "share")
        self._validate_identifier(username, "username")
        self._validate_options(options)
        return await self._passthrough(subcommand, (share, username), options, _SHARE_USER_OPTIONS)

    @staticmethod
    def _ambiguity(outcome: CallOutcome) -> Result | None:
        matches = parse_multiple_matches(outcome.text)
        if matches is None:
            return None
        return Result.fail(MULTIPLE_MATCHES, data=matches, raw=outcome.text)

    # ------------------------------------------------------------------
    # Input validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_identifier(value: object, label: str) -> None:
        """Raise :class:`InvalidArgumentError` unless *value* is a non-empty string."""
        if not isinstance(value, str) or not value:
            raise InvalidArgumentError(f"Expected {label} to be a non-empty string.")
        if _NUL in value:
            raise InvalidArgumentError(f"Expected {label} not to contain NUL characters.")

    @classmethod
    def _validate_names(
        cls,
        value: object,
        label: str,
        *,
        allow_empty: bool = False,
    ) -> tuple[str, ...]:
        """Accept one name or a sequence of names; return them as a tuple."""
        if isinstance(value, str):
            cls._validate_identifier(value, label)
            return (value,)
        if not isinstance(value, (list, tuple)):
            raise InvalidArgumentError(
                f"Expected {label} to be a string or a list of strings.",
            )
        if not value and not allow_empty:
            raise InvalidArgumentError(f"Expected {label} to contain at least one name.")
        for item in value:
            cls._validate_identifier(item, label)
        return tuple(value)

    @staticmethod
    def _validate_options(options: Mapping[str, Any]) -> None:
        """Reject option values lpass cannot receive as flags."""
        for name, value in options.items():
            items = value if isinstance(value, (list, tuple)) else (value,)
            for item in items:
                if item is not None and not isinstance(item, (bool, str, int)):
                    raise InvalidArgumentError(
                        f"Option '{name}' must be a bool, str or int, "
                        f"got {type(item).__name__}.",
                    )
                if isinstance(item, str) and _NUL in item:
                    raise InvalidArgumentError(
                        f"Option '{name}' must not contain NUL characters.",
                    )
            choices = _OPTION_CHOICES.get(name)
            if choices and value not in (None, False) and value not in choices:
                raise InvalidArgumentError(
                    f"Option '{name}' must be one of {', '.join(choices)}, got {value!r}.",
                )
