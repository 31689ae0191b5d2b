from __future__ import annotations

"""Process killer settings sourced from the environment."""


from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from .errors import ConfigurationError
from .runtime import env_bool, env_seconds, env_str

DEFAULT_ESCALATION_POLL_SECONDS = 0.05


@dataclass(frozen=True)
class KillerSettings:
    escalation_poll_seconds: float = DEFAULT_ESCALATION_POLL_SECONDS
    quiet: bool = False
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        if self.escalation_poll_seconds <= 0:
            raise ConfigurationError.invalid_value(
                "escalation_poll_seconds",
                self.escalation_poll_seconds,
                "Polling interval must be positive",
            )

    @classmethod
    def from_env(cls) -> "KillerSettings":
        poll_seconds = env_seconds("PROCKILL_ESCALATION_POLL_SECONDS", or_value=DEFAULT_ESCALATION_POLL_SECONDS)
        quiet = env_bool("PROCKILL_QUIET", or_value=False)
        log_file = env_str("PROCKILL_LOG_FILE")
        return cls(
            escalation_poll_seconds=float(poll_seconds),
            quiet=bool(quiet),
            log_file=log_file,
        )


@lru_cache(maxsize=1)
def get_killer_settings() -> KillerSettings:
    return KillerSettings.from_env()


__all__ = ["DEFAULT_ESCALATION_POLL_SECONDS", "KillerSettings", "get_killer_settings"]
