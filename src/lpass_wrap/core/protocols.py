"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from typing import Protocol

from lpass_wrap.core.models import Invocation, ProcessOutput


class CommandRunner(Protocol):
    """Contract for process execution backends.

    Any object that implements :meth:`run` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required).
    """

    async def run(self, invocation: Invocation) -> ProcessOutput:
        """Execute *invocation* and capture its exit status and streams.

        A non-zero exit status is **not** an error at this level — it is
        reported through :attr:`ProcessOutput.returncode`.

        Raises
        ------
        OSError
            When the process cannot be started at all (e.g. the
            executable is missing).
        """
        ...  # pragma: no cover
