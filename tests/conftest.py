"""Shared pytest fixtures and configuration for the lpass-wrap test suite.

Guidelines
----------
* The real ``lpass`` executable is never run.
* Process execution is mocked at the ``CommandRunner`` boundary.
* Parser and builder tests must be pure — no side effects.
* Coroutines are driven with :func:`asyncio.run`.
"""

from __future__ import annotations
