"""Tests for the process invoker (core/invoker.py).

The :class:`CommandRunner` dependency is **mocked** — no process is
started.  These tests verify output normalization and the choice of
error text on failure.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

from lpass_wrap.core.invoker import invoke, normalize_output
from lpass_wrap.core.models import Invocation, ProcessOutput
from lpass_wrap.exceptions import LpassNotFoundError

_INVOCATION = Invocation(argv=("lpass", "status"))


def _runner(
    stdout: str = "",
    stderr: str = "",
    returncode: int = 0,
    *,
    error: Exception | None = None,
) -> MagicMock:
    runner = MagicMock()
    if error is not None:
        runner.run = AsyncMock(side_effect=error)
    else:
        runner.run = AsyncMock(return_value=ProcessOutput(returncode, stdout, stderr))
    return runner


class TestNormalizeOutput:
    def test_drops_empty_lines(self) -> None:
        assert normalize_output("a\n\nb\n") == "a\nb"

    def test_empty_input(self) -> None:
        assert normalize_output("") == ""

    def test_keeps_whitespace_only_lines(self) -> None:
        assert normalize_output(" \nx") == " \nx"


class TestInvokeSuccess:
    def test_returns_normalized_stdout(self) -> None:
        outcome = asyncio.run(invoke(_runner("Logged in as a@b.c.\n\n"), _INVOCATION))
        assert outcome.success is True
        assert outcome.text == "Logged in as a@b.c."

    def test_passes_invocation_to_runner(self) -> None:
        runner = _runner("ok")
        asyncio.run(invoke(runner, _INVOCATION))
        runner.run.assert_awaited_once_with(_INVOCATION)

    def test_stderr_ignored_on_success(self) -> None:
        outcome = asyncio.run(invoke(_runner("out", "warning"), _INVOCATION))
        assert outcome.text == "out"


class TestInvokeFailure:
    def test_prefers_stderr(self) -> None:
        runner = _runner("partial", "Error: Could not find decryption key.\n", 1)
        outcome = asyncio.run(invoke(runner, _INVOCATION))
        assert outcome.success is False
        assert outcome.text == "Error: Could not find decryption key."

    def test_falls_back_to_stdout(self) -> None:
        outcome = asyncio.run(invoke(_runner("Not logged in.\n", "\n", 1), _INVOCATION))
        assert outcome.text == "Not logged in."

    def test_describes_silent_failure(self) -> None:
        outcome = asyncio.run(invoke(_runner("", "", 3), _INVOCATION))
        assert outcome.text == "lpass exited with status 3."

    def test_os_error_becomes_failure(self) -> None:
        runner = _runner(error=PermissionError("Permission denied: 'lpass'"))
        outcome = asyncio.run(invoke(runner, _INVOCATION))
        assert outcome.success is False
        assert outcome.text == "Permission denied: 'lpass'"

    def test_missing_executable_becomes_failure(self) -> None:
        runner = _runner(error=LpassNotFoundError("lpass is not installed or not on PATH."))
        outcome = asyncio.run(invoke(runner, _INVOCATION))
        assert outcome.success is False
        assert "not installed" in outcome.text

    def test_unlaunchable_argv_becomes_failure(self) -> None:
        runner = _runner(error=ValueError("embedded null byte"))
        outcome = asyncio.run(invoke(runner, _INVOCATION))
        assert outcome.success is False
        assert outcome.text == "embedded null byte"
