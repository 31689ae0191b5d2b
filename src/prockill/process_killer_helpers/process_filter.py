"""Self-protection: keep the caller (and optionally its ancestors) off the kill list."""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, List, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)


class _ProcessWithParent(Protocol):
    pid: int
    parent_pid: Optional[int]


def protected_pids_for(
    caller_pid: int,
    records: Optional[Iterable[_ProcessWithParent]] = None,
    *,
    include_ancestors: bool = False,
) -> FrozenSet[int]:
    """
    Return the pids that must never be signalled for this invocation.

    Only ``caller_pid`` is protected by default. Sibling processes running the
    same executable are valid targets. With ``include_ancestors`` the parent
    chain found in ``records`` is protected as well.
    """
    protected = {caller_pid}
    if not include_ancestors or records is None:
        return frozenset(protected)

    parents = {record.pid: record.parent_pid for record in records}
    current = parents.get(caller_pid)
    # pid 0 is the kernel scheduler on POSIX and the idle process on Windows
    while current and current not in protected:
        protected.add(current)
        current = parents.get(current)
    return frozenset(protected)


def partition_protected(pids: Sequence[int], protected_pids: FrozenSet[int]) -> Tuple[List[int], List[int]]:
    """Split ``pids`` into (allowed, refused) preserving order."""
    allowed: List[int] = []
    refused: List[int] = []
    for pid in pids:
        if pid in protected_pids:
            logger.debug("Refusing to signal protected pid %s", pid)
            refused.append(pid)
        else:
            allowed.append(pid)
    return allowed, refused


__all__ = ["partition_protected", "protected_pids_for"]
