"""lpass-wrap — structured asyncio client for the LastPass CLI.

Drives the ``lpass`` executable and turns its text output into typed
results with a strict layered architecture.
"""

from lpass_wrap.version import __version__

__all__: list[str] = ["__version__"]
