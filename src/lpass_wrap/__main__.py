"""Allow ``python -m lpass_wrap`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m lpass_wrap`` behaves identically to the ``lpass-wrap``
console script.
"""

from __future__ import annotations

from lpass_wrap.cli.app import cli

if __name__ == "__main__":
    cli()
