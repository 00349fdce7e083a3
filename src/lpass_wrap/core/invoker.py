"""Process invoker — runs one invocation and normalizes its output.

The ``lpass`` tool has no structured error channel: depending on
whether it needed to prompt, a fatal message may land on stderr or on
stdout.  :func:`invoke` therefore folds every outcome into a
:class:`~lpass_wrap.core.models.CallOutcome` and never raises for
process-level failures.
"""

from __future__ import annotations

import logging

from lpass_wrap.core.models import CallOutcome, Invocation
from lpass_wrap.core.protocols import CommandRunner
from lpass_wrap.exceptions import LpassWrapError

logger = logging.getLogger(__name__)


def normalize_output(text: str) -> str:
    """Drop empty lines and re-join the rest with ``\\n``."""
    return "\n".join(line for line in text.split("\n") if line)


def _failure_text(stdout: str, stderr: str, returncode: int) -> str:
    for stream in (stderr, stdout):
        normalized = normalize_output(stream)
        if normalized.strip():
            return normalized
    return f"lpass exited with status {returncode}."


async def invoke(runner: CommandRunner, invocation: Invocation) -> CallOutcome:
    """Run *invocation* through *runner* and classify the result.

    Returns
    -------
    CallOutcome
        ``success=True`` with normalized stdout when the tool exits 0;
        otherwise ``success=False`` with stderr, stdout or an error
        description, in that order of preference.
    """
    logger.debug("Running %s", invocation.render())
    try:
        output = await runner.run(invocation)
    except (OSError, ValueError, LpassWrapError) as exc:
        logger.debug("Could not run %s: %s", invocation.argv[0], exc)
        return CallOutcome(success=False, text=normalize_output(str(exc)) or repr(exc))

    logger.debug("lpass exited with status %d", output.returncode)
    if output.returncode == 0:
        return CallOutcome(success=True, text=normalize_output(output.stdout))
    return CallOutcome(
        success=False,
        text=_failure_text(output.stdout, output.stderr, output.returncode),
    )
