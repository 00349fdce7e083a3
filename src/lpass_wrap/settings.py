"""Runtime settings for lpass-wrap.

There are no config files and no environment variables of our own: the
CLI builds settings from its arguments, library users pass them in.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_EXECUTABLE: str = "lpass"

PINENTRY_ENV_VAR: str = "LPASS_DISABLE_PINENTRY"
"""Makes lpass read secrets from stdin instead of spawning pinentry."""


@dataclass(frozen=True, slots=True)
class ClientSettings:
    executable: str = DEFAULT_EXECUTABLE
    disable_pinentry: bool = True

    @property
    def stdin_env(self) -> dict[str, str]:
        """Environment overrides for commands that receive stdin input."""
        if not self.disable_pinentry:
            return {}
        return {PINENTRY_ENV_VAR: "1"}


def load_settings(executable: str | None = None) -> ClientSettings:
    if executable:
        return ClientSettings(executable=executable)
    return ClientSettings()
