"""Core / service layer — command building, output parsing, orchestration.

Rules
-----
* No ``print()`` calls.
* No process management; execution goes through ``CommandRunner``.
* No imports from ``cli`` or ``infra``.
* Parsers and the command builder must be pure and deterministic.
"""

from lpass_wrap.core.client import LastPassClient
from lpass_wrap.core.models import (
    CallOutcome,
    Entry,
    Invocation,
    ListedEntry,
    Match,
    ProcessOutput,
    Result,
)
from lpass_wrap.core.parsers import MULTIPLE_MATCHES
from lpass_wrap.core.protocols import CommandRunner

__all__: list[str] = [
    "MULTIPLE_MATCHES",
    "CallOutcome",
    "CommandRunner",
    "Entry",
    "Invocation",
    "LastPassClient",
    "ListedEntry",
    "Match",
    "ProcessOutput",
    "Result",
]
