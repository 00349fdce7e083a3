"""Infrastructure layer — external system integration.

This layer wraps all interaction with the operating system: starting
lpass processes and locating the executable.  A missing executable is
reported as :class:`~lpass_wrap.exceptions.LpassNotFoundError`.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from lpass_wrap.infra.lpass_detector import LpassStatus, detect_lpass, require_lpass
from lpass_wrap.infra.lpass_runner import SubprocessRunner, create_client

__all__: list[str] = [
    "LpassStatus",
    "SubprocessRunner",
    "create_client",
    "detect_lpass",
    "require_lpass",
]
