"""Pure parsers for the text shapes printed by ``lpass``.

Every function in this module is a **pure** transformation from
normalized tool output to domain models, with no I/O and no side effects
beyond DEBUG logging of lines that do not match their contract.

Shapes handled
--------------
* ``Logged in as user@example.com.``                       (status)
* ``lorem-ipsum [id: 1234567890]``                         (short listing)
* ``2019-01-02 03:04 lorem [id: 123] [username: john]``    (long listing)
* ``Multiple matches found.`` followed by short-listing lines
* JSON arrays from ``--json``, including ``NoteType:`` notes
"""

from __future__ import annotations

import dataclasses
import json
import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from lpass_wrap.core.models import Entry, ListedEntry, Match
from lpass_wrap.exceptions import OutputParseError

logger = logging.getLogger(__name__)

MULTIPLE_MATCHES: str = "Multiple matches found."
"""First line printed by lpass when a lookup is ambiguous."""

NOTE_TYPE_PREFIX: str = "NoteType:"
NOTE_TYPE_FIELD: str = "NoteType"
IMPLICIT_NOTE_FIELD: str = "Notes"
"""Field that receives note text appearing before any ``field:value`` line."""

_LOGGED_IN = re.compile(r"^Logged in as (?P<username>.+)\.$")

_NAME_ID = re.compile(r"^(?P<name>.+) \[id: (?P<id>[^\]]+)\]$")

_LONG_LINE = re.compile(
    r"^(?:(?P<date>\d{4}-\d{2}-\d{2} \d{2}:\d{2}))? ?"
    r"(?P<name>.+) \[id: (?P<id>[^\]]+)\] "
    r"\[username: (?P<username>.*)\]$"
)

# Field names never contain ':' while values (URLs) often do.
_NOTE_FIELD = re.compile(r"^(?P<field>[^:]+):(?P<value>.*)$")

_LONG_DATE_FORMAT = "%Y-%m-%d %H:%M"

_ENTRY_KEYS: tuple[str, ...] = (
    "id",
    "name",
    "fullname",
    "username",
    "password",
    "url",
    "group",
    "share",
    "last_modified_gmt",
    "last_touch",
    "note",
)


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

def parse_status(text: str) -> str | None:
    """Return the logged-in username, or ``None`` when not reported."""
    for line in text.split("\n"):
        match = _LOGGED_IN.match(line)
        if match:
            return match.group("username")
    return None


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

def parse_name_id(line: str) -> Match | None:
    """Parse one ``<name> [id: <id>]`` line.

    The name may itself contain brackets; it binds to everything before
    the **last** ``[id: ...]`` suffix.
    """
    match = _NAME_ID.match(line)
    if match is None:
        return None
    return Match(name=match.group("name"), id=match.group("id"))


def parse_name_id_lines(text: str) -> tuple[Match, ...]:
    """Parse every ``<name> [id: <id>]`` line, skipping the rest."""
    matches: list[Match] = []
    for line in text.split("\n"):
        if not line:
            continue
        parsed = parse_name_id(line)
        if parsed is None:
            logger.debug("Skipping unrecognized listing line: %r", line)
            continue
        matches.append(parsed)
    return tuple(matches)


def parse_listing_date(date: str, *, last_use: bool) -> datetime:
    """Interpret a ``YYYY-MM-DD HH:MM`` listing date.

    Last-use times are local wall-clock values and come back naive.
    Modification times are printed in GMT and come back aware (UTC).
    """
    parsed = datetime.strptime(date, _LONG_DATE_FORMAT)
    if last_use:
        return parsed
    return parsed.replace(tzinfo=timezone.utc)


def parse_long_line(line: str, *, last_use: bool = False) -> ListedEntry | None:
    """Parse one line of ``lpass ls --long`` output.

    The leading date is optional: entries that were never modified or
    used print without one.
    """
    match = _LONG_LINE.match(line)
    if match is None:
        return None
    raw_date = match.group("date")
    date = parse_listing_date(raw_date, last_use=last_use) if raw_date else None
    return ListedEntry(
        name=match.group("name"),
        id=match.group("id"),
        username=match.group("username") or None,
        last_touch=date if last_use else None,
        last_modified_gmt=None if last_use else date,
    )


def parse_long_lines(text: str, *, last_use: bool = False) -> tuple[ListedEntry, ...]:
    """Parse a full long listing, skipping lines that do not match."""
    entries: list[ListedEntry] = []
    for line in text.split("\n"):
        if not line:
            continue
        parsed = parse_long_line(line, last_use=last_use)
        if parsed is None:
            logger.debug("Skipping unrecognized long listing line: %r", line)
            continue
        entries.append(parsed)
    return tuple(entries)


def parse_multiple_matches(text: str) -> tuple[Match, ...] | None:
    """Return the candidates when *text* is an ambiguity report.

    Returns ``None`` for any other output, so callers can distinguish
    "not ambiguous" from "ambiguous with no parseable candidates".
    """
    first, _, rest = text.partition("\n")
    if first != MULTIPLE_MATCHES:
        return None
    return parse_name_id_lines(rest)


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

def parse_note_fields(body: str) -> dict[str, str]:
    """Split a structured note body into an ordered field map.

    A ``field:value`` line starts a new field; any other line is appended
    to the current field after a newline.  Text before the first field
    line is collected under :data:`IMPLICIT_NOTE_FIELD`.
    """
    fields: dict[str, str] = {}
    current: str | None = None
    for line in body.split("\n"):
        match = _NOTE_FIELD.match(line)
        if match:
            current = match.group("field")
            fields[current] = match.group("value")
            continue
        if current is None:
            current = IMPLICIT_NOTE_FIELD
            fields[current] = line
            continue
        fields[current] += f"\n{line}"
    return fields


def expand_entry(entry: Entry) -> Entry:
    """Replace a ``NoteType:`` note with its expanded fields.

    Entries whose note is absent, plain, or already expanded are
    returned unchanged, so applying this twice is a no-op.
    """
    if entry.note is None or not entry.note.startswith(NOTE_TYPE_PREFIX):
        return entry
    fields = parse_note_fields(entry.note)
    note_type = fields.pop(NOTE_TYPE_FIELD, None)
    return dataclasses.replace(
        entry,
        note=None,
        note_type=note_type,
        note_fields=fields,
    )


# ---------------------------------------------------------------------------
# JSON entries
# ---------------------------------------------------------------------------

def to_timestamp(value: Any) -> datetime | None:
    """Convert epoch seconds (``str`` or number) to an aware UTC datetime.

    ``datetime`` values pass through untouched; blanks and unparseable
    values yield ``None``.
    """
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        logger.debug("Ignoring unparseable timestamp: %r", value)
        return None


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def parse_entry(raw: Mapping[str, Any]) -> Entry:
    """Build an :class:`Entry` from one element of ``lpass show --json``."""
    note = raw.get("note")
    share = raw.get("share")
    entry = Entry(
        id=_as_text(raw.get("id")),
        name=_as_text(raw.get("name")),
        fullname=_as_text(raw.get("fullname")),
        username=_as_text(raw.get("username")),
        password=_as_text(raw.get("password")),
        url=_as_text(raw.get("url")),
        group=_as_text(raw.get("group")),
        share=None if share is None else str(share),
        last_modified_gmt=to_timestamp(raw.get("last_modified_gmt")),
        last_touch=to_timestamp(raw.get("last_touch")),
        note=None if note is None else str(note),
        extra={key: value for key, value in raw.items() if key not in _ENTRY_KEYS},
    )
    return expand_entry(entry)


def parse_entries(text: str) -> tuple[Entry, ...]:
    """Decode the JSON array printed by ``lpass show --json``.

    Raises
    ------
    OutputParseError
        If *text* is not a JSON array of objects.
    """
    try:
        decoded: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise OutputParseError(f"lpass returned invalid JSON: {exc}") from exc

    if not isinstance(decoded, list):
        raise OutputParseError("lpass returned JSON that is not a list of entries.")
    if not all(isinstance(item, dict) for item in decoded):
        raise OutputParseError("lpass returned a JSON entry that is not an object.")
    return tuple(parse_entry(item) for item in decoded)


# ---------------------------------------------------------------------------
# Selected field
# ---------------------------------------------------------------------------

def parse_selected_field(field_name: str, text: str) -> dict[str, str]:
    """Wrap single-field output verbatim under its field name."""
    return {field_name: text}
