"""Classify user supplied kill targets as pid, port or name."""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Union

from .process_models import PORT_PREFIX, Target, TargetKind

TargetInput = Union[Target, int, str]


def classify_target(value: Any) -> Target:
    """
    Tag a single user supplied value.

    Non-negative integers (or their decimal string form) are pids. A port is
    only recognized when the caller marks it explicitly, either with
    ``Target.port(n)`` or the ``":<port>"`` string form. Everything else is a
    process name; this never raises.
    """
    if isinstance(value, Target):
        return value
    if isinstance(value, bool):
        return Target.name(str(value))
    if isinstance(value, int):
        if value >= 0:
            return Target.pid(value)
        return Target.name(str(value))
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer() and value >= 0:
            return Target(TargetKind.PID, int(value), str(value))
        return Target.name(str(value))

    text = value.decode(errors="replace") if isinstance(value, bytes) else str(value)
    port = _parse_port(text)
    if port is not None:
        return Target(TargetKind.PORT, port, text)
    if _is_pid_text(text):
        return Target(TargetKind.PID, int(text), text)
    return Target.name(text)


def classify_targets(values: Union[TargetInput, Iterable[TargetInput]]) -> List[Target]:
    """Classify a single value or a sequence of values, preserving order."""
    if isinstance(values, (Target, int, float, str, bytes)):
        return [classify_target(values)]
    return [classify_target(value) for value in values]


def _is_pid_text(text: str) -> bool:
    return text.isascii() and text.isdigit()


def _parse_port(text: str) -> int | None:
    if not text.startswith(PORT_PREFIX):
        return None
    digits = text[len(PORT_PREFIX) :]
    if not _is_pid_text(digits):
        return None
    return int(digits)


__all__ = ["TargetInput", "classify_target", "classify_targets"]
