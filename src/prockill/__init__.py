"""Kill processes by pid, name or port."""

from .exceptions import ApplicationError, EventLoopRunningError, ProcessKillError
from .process_killer import ProcessKiller, get_default_killer, kill, kill_sync
from .process_killer_helpers.process_models import (
    KillOptions,
    KillOutcome,
    KillReport,
    OutcomeKind,
    ProcessRecord,
    Target,
    TargetKind,
    TargetResult,
)
from .process_killer_helpers.process_verification import process_exists, wait_for_exit

__all__ = [
    "ApplicationError",
    "EventLoopRunningError",
    "KillOptions",
    "KillOutcome",
    "KillReport",
    "OutcomeKind",
    "ProcessKillError",
    "ProcessKiller",
    "ProcessRecord",
    "Target",
    "TargetKind",
    "TargetResult",
    "get_default_killer",
    "kill",
    "kill_sync",
    "process_exists",
    "wait_for_exit",
]
