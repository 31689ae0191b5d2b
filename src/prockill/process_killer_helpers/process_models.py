"""Value types shared by the process killer components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Protocol, Sequence, Tuple

from ..config.errors import ConfigurationError

NOT_FOUND_REASON = "Process doesn't exist"
PERMISSION_DENIED_REASON = "Permission denied"
PORT_PREFIX = ":"


class TargetKind(Enum):
    PID = "pid"
    PORT = "port"
    NAME = "name"


@dataclass(frozen=True)
class Target:
    """A classified user-supplied identifier.

    ``raw`` keeps the text the caller typed so failure messages can be traced
    back to the input rather than to an internally resolved pid.
    """

    kind: TargetKind
    value: int | str
    raw: str

    @classmethod
    def pid(cls, pid: int) -> "Target":
        if int(pid) < 0:
            raise ValueError(f"pid must be non-negative (got {pid})")
        return cls(TargetKind.PID, int(pid), str(pid))

    @classmethod
    def port(cls, port: int) -> "Target":
        return cls(TargetKind.PORT, int(port), f"{PORT_PREFIX}{int(port)}")

    @classmethod
    def name(cls, name: str) -> "Target":
        return cls(TargetKind.NAME, name, name)

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class ProcessRecord:
    """Point-in-time view of one running process."""

    pid: int
    name: str
    parent_pid: Optional[int] = None


class ProcessCandidate(Protocol):
    """Minimal contract for anything that looks like a process record."""

    pid: int
    name: str


class OutcomeKind(Enum):
    KILLED = "killed"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    SELF_PROTECTED = "self_protected"
    OTHER_ERROR = "other_error"


@dataclass(frozen=True)
class KillOutcome:
    kind: OutcomeKind
    detail: str = ""

    @classmethod
    def killed(cls) -> "KillOutcome":
        return cls(OutcomeKind.KILLED)

    @classmethod
    def not_found(cls) -> "KillOutcome":
        return cls(OutcomeKind.NOT_FOUND)

    @classmethod
    def permission_denied(cls, detail: str = "") -> "KillOutcome":
        return cls(OutcomeKind.PERMISSION_DENIED, detail)

    @classmethod
    def self_protected(cls) -> "KillOutcome":
        return cls(OutcomeKind.SELF_PROTECTED)

    @classmethod
    def other_error(cls, detail: str) -> "KillOutcome":
        return cls(OutcomeKind.OTHER_ERROR, detail)

    @property
    def succeeded(self) -> bool:
        return self.kind in (OutcomeKind.KILLED, OutcomeKind.SELF_PROTECTED)

    @property
    def reason(self) -> str:
        """Human readable failure reason used in aggregated error messages."""
        if self.kind is OutcomeKind.NOT_FOUND:
            return NOT_FOUND_REASON
        if self.kind is OutcomeKind.PERMISSION_DENIED:
            return PERMISSION_DENIED_REASON
        if self.kind is OutcomeKind.OTHER_ERROR:
            return self.detail or "Unknown error"
        return self.kind.value


@dataclass(frozen=True)
class KillOptions:
    """Options for a single kill invocation.

    Attributes:
        force: Send the unconditional kill signal straight away.
        ignore_case: Match process names case-insensitively.
        silent: Never raise for per-target failures.
        force_after_timeout_seconds: Escalate a polite kill to a forceful one
            if the process is still alive after this many seconds. Inert when
            ``force`` is set.
        await_escalation: Wait for scheduled escalations before returning.
        protect_ancestors: Refuse to kill the caller's parent chain as well
            as the caller itself.
    """

    force: bool = False
    ignore_case: bool = False
    silent: bool = False
    force_after_timeout_seconds: Optional[float] = None
    await_escalation: bool = False
    protect_ancestors: bool = False

    def __post_init__(self) -> None:
        timeout = self.force_after_timeout_seconds
        if timeout is not None and timeout < 0:
            raise ConfigurationError.invalid_value(
                "force_after_timeout_seconds",
                timeout,
                "Escalation timeout must be non-negative",
            )

    @property
    def escalates(self) -> bool:
        return self.force_after_timeout_seconds is not None and not self.force


@dataclass(frozen=True)
class TargetResult:
    target: Target
    outcome: KillOutcome
    pids: Tuple[int, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.outcome.succeeded


@dataclass
class KillReport:
    """Ordered per-target results of one invocation, in input order."""

    results: List[TargetResult] = field(default_factory=list)

    def __iter__(self) -> Iterator[TargetResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def failures(self) -> List[TargetResult]:
        return [result for result in self.results if not result.succeeded]

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def as_dicts(self) -> List[dict]:
        return [
            {
                "target": result.target.raw,
                "kind": result.target.kind.value,
                "outcome": result.outcome.kind.value,
                "detail": result.outcome.detail,
                "pids": list(result.pids),
            }
            for result in self.results
        ]


def combine_outcomes(outcomes: Sequence[KillOutcome]) -> KillOutcome:
    """Reduce the outcomes for every pid a single target resolved to."""
    if not outcomes:
        return KillOutcome.not_found()
    for outcome in outcomes:
        if outcome.kind in (OutcomeKind.PERMISSION_DENIED, OutcomeKind.OTHER_ERROR):
            return outcome
    if any(outcome.kind is OutcomeKind.KILLED for outcome in outcomes):
        return KillOutcome.killed()
    if all(outcome.kind is OutcomeKind.SELF_PROTECTED for outcome in outcomes):
        return KillOutcome.self_protected()
    return KillOutcome.not_found()


__all__ = [
    "KillOptions",
    "KillOutcome",
    "KillReport",
    "NOT_FOUND_REASON",
    "OutcomeKind",
    "PERMISSION_DENIED_REASON",
    "PORT_PREFIX",
    "ProcessCandidate",
    "ProcessRecord",
    "Target",
    "TargetKind",
    "TargetResult",
    "combine_outcomes",
]
