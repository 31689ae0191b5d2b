"""Shared configuration helpers and dataclasses."""

from .errors import ConfigurationError
from .runtime import (
    env_bool,
    env_float,
    env_seconds,
    env_str,
    reset_default_values,
)
from .settings import KillerSettings, get_killer_settings

__all__ = [
    "ConfigurationError",
    "KillerSettings",
    "env_bool",
    "env_float",
    "env_seconds",
    "env_str",
    "get_killer_settings",
    "reset_default_values",
]
