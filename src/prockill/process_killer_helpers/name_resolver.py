"""Resolve a process name to the pids currently running under it."""

from __future__ import annotations

import sys
from typing import Iterable, List, Optional

from .process_models import ProcessCandidate


def is_windows_platform(platform: Optional[str] = None) -> bool:
    return (platform or sys.platform) == "win32"


def resolve_name(
    pattern: str,
    records: Iterable[ProcessCandidate],
    *,
    ignore_case: bool = False,
    windows: bool = False,
) -> List[int]:
    """
    Return pids whose process name equals ``pattern``, in snapshot order.

    Matching is exact on the name field only, never on command line arguments
    or substrings. Windows image names are case-insensitive, so ``windows``
    forces case-insensitive matching regardless of ``ignore_case``.
    """
    fold = ignore_case or windows
    wanted = pattern.casefold() if fold else pattern

    pids: List[int] = []
    seen: set[int] = set()
    for record in records:
        name = record.name
        if not name:
            continue
        candidate = name.casefold() if fold else name
        if candidate != wanted or record.pid in seen:
            continue
        seen.add(record.pid)
        pids.append(record.pid)
    return pids


__all__ = ["is_windows_platform", "resolve_name"]
