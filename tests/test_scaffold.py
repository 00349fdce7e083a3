"""Smoke tests — verify package wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from lpass_wrap import __version__
from lpass_wrap.cli import exit_codes
from lpass_wrap.cli.app import main
from lpass_wrap.exceptions import (
    EnvironmentError,
    InvalidArgumentError,
    LastPassCommandError,
    LpassNotFoundError,
    LpassWrapError,
    OutputParseError,
    SelectionCancelledError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            InvalidArgumentError,
            SelectionCancelledError,
            OutputParseError,
            LastPassCommandError,
            EnvironmentError,
            LpassNotFoundError,
        ],
    )
    def test_all_exceptions_inherit_from_base(
        self, exc_class: type[LpassWrapError]
    ) -> None:
        assert issubclass(exc_class, LpassWrapError)

    def test_base_inherits_from_exception(self) -> None:
        assert issubclass(LpassWrapError, Exception)

    def test_hint_is_stored(self) -> None:
        err = LpassWrapError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        err = LpassWrapError("boom")
        assert err.hint is None

    def test_command_error_keeps_raw_text(self) -> None:
        err = LastPassCommandError("Error: session expired", raw="Error: session expired")
        assert err.raw == "Error: session expired"
        assert err.hint is None


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130

    def test_unexpected_error_is_two(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 2


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestCLIRouting:
    def test_no_args_returns_success(self, capsys: pytest.CaptureFixture[str]) -> None:
        """No arguments should print help and exit 0."""
        code = main([])
        assert code == exit_codes.SUCCESS

    def test_version_flag(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0

    @patch("lpass_wrap.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_returns_success(self, _mock_doc: object) -> None:
        code = main(["doctor"])
        assert code == exit_codes.SUCCESS

    def test_unknown_command_exits_with_usage_error(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["frobnicate"])
        assert exc_info.value.code == 2
