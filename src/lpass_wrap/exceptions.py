"""Custom exception hierarchy for lpass-wrap.

Most operational failures of the ``lpass`` tool are reported through
:class:`~lpass_wrap.core.models.Result` envelopes rather than raised.
The exceptions below cover the remaining cases: unrecognized failures
of the scan lookup, output that breaks its contract, and problems with
the local environment.

Hierarchy
---------
LpassWrapError
├── InvalidArgumentError
├── SelectionCancelledError
├── OutputParseError
├── LastPassCommandError
├── EnvironmentError
└── LpassNotFoundError
"""

from __future__ import annotations


class LpassWrapError(Exception):
    """Base exception for all lpass-wrap errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Caller input ----------------------------------------------------------

class InvalidArgumentError(LpassWrapError):
    """Raised when caller input is rejected before lpass is run.

    :class:`~lpass_wrap.core.client.LastPassClient` turns this into a
    failed result for every operation except the scan lookup.
    """


class SelectionCancelledError(LpassWrapError):
    """Raised when the user dismisses an interactive selection prompt."""


# --- Tool output -----------------------------------------------------------

class OutputParseError(LpassWrapError):
    """Raised when lpass output does not match the expected shape."""


class LastPassCommandError(LpassWrapError):
    """Raised when the scan lookup fails for an unrecognized reason.

    The normalized error text reported by the tool is kept on
    :attr:`raw` so callers can log or display it.
    """

    def __init__(
        self,
        message: str,
        *,
        raw: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.raw: str | None = raw


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(LpassWrapError):
    """Raised when a required runtime dependency is not available."""


class LpassNotFoundError(LpassWrapError):
    """Raised when the lpass executable cannot be located on PATH."""
