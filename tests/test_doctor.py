"""Tests for the ``lpass-wrap doctor`` command (cli/doctor.py).

lpass detection is mocked — no system dependency and no lpass command
is run.

Coverage:
* Individual checks produce the right component, value and level.
* Doctor returns SUCCESS when lpass is present.
* Doctor returns GENERAL_ERROR when lpass is missing.
* Plain-text rendering when Rich is unavailable.
* CLI routing dispatches to ``run_doctor``.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from lpass_wrap.cli import exit_codes
from lpass_wrap.cli.doctor import (
    FAIL,
    OK,
    WARN,
    CheckResult,
    _lpass_check,
    _os_check,
    _python_check,
    _questionary_check,
    _version_check,
    collect_checks,
    run_doctor,
)
from lpass_wrap.infra.lpass_detector import LpassStatus


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _lpass_found() -> LpassStatus:
    return LpassStatus(
        found=True,
        path=Path("/usr/bin/lpass"),
        version_hint="found at /usr/bin/lpass",
        install_commands=(),
    )


def _lpass_missing(*commands: str) -> LpassStatus:
    return LpassStatus(
        found=False,
        path=None,
        version_hint="not found",
        install_commands=commands or ("sudo apt install lastpass-cli",),
    )


# ---------------------------------------------------------------------------
# CheckResult
# ---------------------------------------------------------------------------

class TestCheckResult:
    def test_markup_uses_level_colour(self) -> None:
        assert CheckResult("x", "y", WARN).status_markup() == "[yellow]WARN[/yellow]"

    def test_note_is_appended(self) -> None:
        check = CheckResult("Python", "3.9.1", FAIL, ">=3.10 required")
        assert check.status_plain() == "FAIL (>=3.10 required)"
        assert check.failed is True


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------

class TestChecks:
    def test_python(self) -> None:
        check = _python_check()
        assert check.component == "Python"
        assert check.level == OK

    @patch("lpass_wrap.cli.doctor.sys.version_info", (3, 9, 0))
    def test_old_python_fails(self) -> None:
        check = _python_check()
        assert check.level == FAIL
        assert check.note == ">=3.10 required"

    def test_lpass_found(self) -> None:
        check = _lpass_check(_lpass_found())
        assert check.value == str(Path("/usr/bin/lpass"))
        assert check.level == OK

    def test_lpass_missing_is_failure(self) -> None:
        check = _lpass_check(_lpass_missing())
        assert check.value == "not found"
        assert check.level == FAIL

    def test_questionary_installed(self) -> None:
        assert _questionary_check().level == OK

    @patch.dict("sys.modules", {"questionary": None})
    def test_questionary_missing_is_warning(self) -> None:
        check = _questionary_check()
        assert check.value == "NOT INSTALLED"
        assert check.level == WARN

    @patch("lpass_wrap.cli.doctor.platform.machine", return_value="arm64")
    @patch("lpass_wrap.cli.doctor.platform.release", return_value="23.4.0")
    @patch("lpass_wrap.cli.doctor.platform.system", return_value="Darwin")
    def test_darwin_is_displayed_as_macos(
        self,
        _mock_system: MagicMock,
        _mock_release: MagicMock,
        _mock_machine: MagicMock,
    ) -> None:
        assert _os_check().value == "macOS 23.4.0 (arm64)"

    def test_version(self) -> None:
        from lpass_wrap.version import __version__

        check = _version_check()
        assert check.component == "lpass-wrap"
        assert check.value == __version__

    @patch("lpass_wrap.cli.doctor.detect_lpass")
    def test_collect_uses_configured_executable(self, mock_detect: MagicMock) -> None:
        mock_detect.return_value = _lpass_found()
        checks, status = collect_checks("/opt/bin/lpass")
        mock_detect.assert_called_once_with("/opt/bin/lpass")
        assert status.found is True
        assert [check.component for check in checks] == [
            "lpass-wrap", "Python", "lpass", "questionary", "OS",
        ]


# ---------------------------------------------------------------------------
# run_doctor integration
# ---------------------------------------------------------------------------

class TestRunDoctor:
    @patch("lpass_wrap.cli.doctor.detect_lpass")
    def test_all_pass_returns_success(self, mock_detect: MagicMock) -> None:
        mock_detect.return_value = _lpass_found()
        assert run_doctor() == exit_codes.SUCCESS

    @patch("lpass_wrap.cli.doctor.detect_lpass")
    def test_lpass_missing_fails(self, mock_detect: MagicMock) -> None:
        mock_detect.return_value = _lpass_missing()
        assert run_doctor() == exit_codes.GENERAL_ERROR

    @patch("lpass_wrap.cli.doctor.detect_lpass")
    @patch.dict("sys.modules", {"rich": None, "rich.console": None, "rich.table": None})
    def test_plain_output_shows_install_guidance(
        self,
        mock_detect: MagicMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_detect.return_value = _lpass_missing("brew install lastpass-cli")
        code = run_doctor()

        captured = capsys.readouterr()
        assert code == exit_codes.GENERAL_ERROR
        assert "lpass-wrap doctor" in captured.err
        assert "lpass is not installed." in captured.err
        assert "  brew install lastpass-cli" in captured.err
        assert "Some checks failed." in captured.err

    @patch("lpass_wrap.cli.doctor.detect_lpass")
    @patch.dict("sys.modules", {"rich": None, "rich.console": None, "rich.table": None})
    def test_plain_output_has_no_markup(
        self,
        mock_detect: MagicMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_detect.return_value = _lpass_found()
        run_doctor()

        captured = capsys.readouterr()
        assert "[green]" not in captured.err
        assert "All checks passed." in captured.err


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestDoctorRouting:
    @patch("lpass_wrap.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_dispatches(self, mock_run: MagicMock) -> None:
        from lpass_wrap.cli.app import main

        assert main(["doctor"]) == exit_codes.SUCCESS
        mock_run.assert_called_once_with("lpass")

    @patch("lpass_wrap.cli.doctor.run_doctor", return_value=exit_codes.GENERAL_ERROR)
    def test_executable_is_forwarded(self, mock_run: MagicMock) -> None:
        from lpass_wrap.cli.app import main

        assert main(["--executable", "/opt/bin/lpass", "doctor"]) == exit_codes.GENERAL_ERROR
        mock_run.assert_called_once_with("/opt/bin/lpass")
