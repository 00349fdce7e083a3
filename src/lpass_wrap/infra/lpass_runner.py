"""asyncio-backed implementation of :class:`~lpass_wrap.core.protocols.CommandRunner`.

This module is the **only** place in the codebase that starts child
processes.  A missing executable is re-raised as
:class:`~lpass_wrap.exceptions.LpassNotFoundError`; every other outcome
is reported through :class:`~lpass_wrap.core.models.ProcessOutput`.
"""

from __future__ import annotations

import asyncio
import os

from lpass_wrap.core.client import LastPassClient
from lpass_wrap.core.models import Invocation, ProcessOutput
from lpass_wrap.exceptions import LpassNotFoundError
from lpass_wrap.settings import ClientSettings


class SubprocessRunner:
    """Concrete :class:`CommandRunner` using ``asyncio`` subprocesses.

    Usage::

        runner = SubprocessRunner()
        output = await runner.run(invocation)

    Without an stdin payload the child inherits the parent's stdin, so
    lpass can still prompt on a terminal.  If the awaiting task is
    cancelled the child is killed before the cancellation propagates.
    """

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self._encoding: str = encoding

    @staticmethod
    def _build_env(invocation: Invocation) -> dict[str, str] | None:
        """Return the child environment, or ``None`` to inherit it as-is."""
        if not invocation.env:
            return None
        return {**os.environ, **invocation.env}

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    async def run(self, invocation: Invocation) -> ProcessOutput:
        """Execute *invocation* and capture its output.

        Raises
        ------
        LpassNotFoundError
            When the executable does not exist.
        OSError
            When the process cannot be started for another reason.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *invocation.argv,
                stdin=asyncio.subprocess.PIPE if invocation.stdin is not None else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._build_env(invocation),
            )
        except FileNotFoundError as exc:
            raise LpassNotFoundError(
                f"{invocation.argv[0]} is not installed or not on PATH.",
                hint="Run `lpass-wrap doctor` for installation guidance.",
            ) from exc

        payload = (
            invocation.stdin.encode(self._encoding)
            if invocation.stdin is not None
            else None
        )
        try:
            stdout, stderr = await process.communicate(payload)
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        return ProcessOutput(
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode(self._encoding, errors="replace"),
            stderr=stderr.decode(self._encoding, errors="replace"),
        )


def create_client(settings: ClientSettings | None = None) -> LastPassClient:
    """Build a :class:`LastPassClient` wired to a :class:`SubprocessRunner`."""
    return LastPassClient(SubprocessRunner(), settings=settings)
