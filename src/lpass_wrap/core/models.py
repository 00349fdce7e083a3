"""Domain models for lpass-wrap.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and small constructors.  They carry zero
I/O and no dependencies on external packages.
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


# ---------------------------------------------------------------------------
# Result envelope
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Result:
    """Uniform outcome of one ``lpass`` operation.

    Callers must check :attr:`success` before trusting :attr:`data`.
    On failure :attr:`message` is the only guaranteed explanation; the
    one wording worth matching on is :data:`MULTIPLE_MATCHES`, which comes
    with the ambiguous candidates in :attr:`data`.
    """

    success: bool
    data: Any = None
    raw: str | None = None
    message: str | None = None

    @classmethod
    def ok(cls, raw: str, data: Any = None) -> Result:
        """Build a successful result."""
        return cls(success=True, data=data, raw=raw)

    @classmethod
    def fail(
        cls,
        message: str,
        *,
        data: Any = None,
        raw: str | None = None,
    ) -> Result:
        """Build a failed result."""
        return cls(success=False, data=data, raw=raw, message=message)


# ---------------------------------------------------------------------------
# Command invocation
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Invocation:
    """One fully built ``lpass`` command, ready to hand to a runner.

    Positional values live in :attr:`argv` as separate items and are
    never joined into a shell string, so quote characters inside names
    cannot change the command.
    """

    argv: tuple[str, ...]
    """Executable followed by sub-command, positionals and flags."""

    stdin: str | None = None
    """Text written to the child's standard input, if any."""

    env: Mapping[str, str] = field(default_factory=dict)
    """Environment variables added on top of the parent environment."""

    def render(self) -> str:
        """Return a shell-quoted display form with stdin redacted."""
        command = shlex.join(self.argv)
        if self.stdin is not None:
            return f"<stdin redacted> | {command}"
        return command


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    """Raw capture of one finished child process."""

    returncode: int
    stdout: str
    stderr: str


@dataclass(frozen=True, slots=True)
class CallOutcome:
    """Normalized outcome of invoking the tool once.

    :attr:`text` holds stdout on success and the best available error
    text on failure, with empty lines removed in both cases.
    """

    success: bool
    text: str


# ---------------------------------------------------------------------------
# Parsed records
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Match:
    """A ``name [id: id]`` pair from a short listing or ambiguity report."""

    name: str
    id: str


@dataclass(frozen=True, slots=True)
class ListedEntry:
    """One line of ``lpass ls --long`` output.

    At most one of the two timestamps is set: ``last_touch`` when the
    listing was asked for last-use times, ``last_modified_gmt``
    otherwise.  ``last_touch`` is naive local wall time while
    ``last_modified_gmt`` is timezone-aware UTC.
    """

    name: str
    id: str
    username: str | None = None
    last_modified_gmt: datetime | None = None
    last_touch: datetime | None = None


@dataclass(frozen=True, slots=True)
class Entry:
    """A stored LastPass entry decoded from ``lpass show --json``.

    The note is a tagged variant: either :attr:`note` holds the raw text,
    or the note was a structured ``NoteType:`` note and has been expanded
    into :attr:`note_type` and :attr:`note_fields`.  Never both.
    """

    id: str
    name: str = ""
    fullname: str = ""
    username: str = ""
    password: str = ""
    url: str = ""
    group: str = ""
    share: str | None = None
    last_modified_gmt: datetime | None = None
    last_touch: datetime | None = None
    note: str | None = None
    note_type: str | None = None
    note_fields: Mapping[str, str] | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)
    """JSON keys the model does not know about, kept verbatim."""

    def __post_init__(self) -> None:
        if self.note is not None and self.note_fields is not None:
            raise ValueError("Entry cannot carry both a raw and an expanded note.")

    @property
    def is_expanded(self) -> bool:
        """``True`` when the note has been split into fields."""
        return self.note_fields is not None

    def to_dict(self) -> dict[str, Any]:
        """Flatten into a JSON-friendly dict, expanded fields inlined."""
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "fullname": self.fullname,
            "username": self.username,
            "password": self.password,
            "url": self.url,
            "group": self.group,
        }
        if self.share is not None:
            out["share"] = self.share
        for key in ("last_modified_gmt", "last_touch"):
            value: datetime | None = getattr(self, key)
            out[key] = value.isoformat() if value is not None else None
        if self.note_fields is not None:
            if self.note_type is not None:
                out["NoteType"] = self.note_type
            out.update(self.note_fields)
        elif self.note is not None:
            out["note"] = self.note
        out.update(self.extra)
        return out
