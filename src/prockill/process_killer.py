"""
Process Killer

Resolves pids, process names and ports to running processes and terminates
them, with optional escalation from a polite to a forceful kill.

Usage:
    from prockill import kill

    await kill(["node", ":8080", 4242], force_after_timeout_seconds=2.0)

Per-target problems never raise on their own. They are collected and
reported once as ``ProcessKillError`` unless ``silent`` is set.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .config.settings import KillerSettings, get_killer_settings
from .exceptions import ApplicationError, EventLoopRunningError
from .process_killer_helpers.escalation_scheduler import EscalationScheduler
from .process_killer_helpers.input_classifier import TargetInput, classify_targets
from .process_killer_helpers.name_resolver import is_windows_platform, resolve_name
from .process_killer_helpers.port_resolver import PortResolver, PsutilPortResolver
from .process_killer_helpers.process_filter import partition_protected, protected_pids_for
from .process_killer_helpers.process_models import (
    KillOptions,
    KillOutcome,
    KillReport,
    OutcomeKind,
    ProcessRecord,
    Target,
    TargetKind,
    TargetResult,
    combine_outcomes,
)
from .process_killer_helpers.process_snapshot import ProcessSnapshotProvider, PsutilSnapshotProvider
from .process_killer_helpers.process_terminator import TerminationStrategy, default_dispatcher
from .process_killer_helpers.result_aggregator import aggregate

logger = logging.getLogger(__name__)

Targets = Union[TargetInput, Iterable[TargetInput]]


class ProcessKiller:
    """Resolution-and-termination engine with injectable collaborators."""

    def __init__(
        self,
        *,
        snapshot_provider: Optional[ProcessSnapshotProvider] = None,
        port_resolver: Optional[PortResolver] = None,
        terminator: Optional[TerminationStrategy] = None,
        scheduler: Optional[EscalationScheduler] = None,
        settings: Optional[KillerSettings] = None,
        platform: Optional[str] = None,
    ):
        self.settings = settings or get_killer_settings()
        self.snapshot_provider = snapshot_provider or PsutilSnapshotProvider()
        self.port_resolver = port_resolver or PsutilPortResolver()
        self.terminator = terminator or TerminationStrategy(default_dispatcher(platform))
        self.scheduler = scheduler or EscalationScheduler(poll_interval_seconds=self.settings.escalation_poll_seconds)
        self.windows = is_windows_platform(platform)

    async def kill(
        self,
        targets: Targets,
        options: Optional[KillOptions] = None,
        *,
        caller_pid: Optional[int] = None,
    ) -> KillReport:
        """
        Kill every target and report per-target outcomes in input order.

        Args:
            targets: A pid, name, ``":<port>"`` string, ``Target`` or a sequence of them
            options: Matching and escalation options; defaults to ``KillOptions()``
            caller_pid: Pid to protect; read from the OS once when omitted

        Returns:
            The ``KillReport`` for this invocation

        Raises:
            ProcessKillError: If any target failed and ``options.silent`` is False
        """
        options = options or KillOptions()
        own_pid = os.getpid() if caller_pid is None else caller_pid
        classified = classify_targets(targets)

        snapshot = await self._snapshot_if_needed(classified, options)
        protected = protected_pids_for(own_pid, snapshot, include_ancestors=options.protect_ancestors)

        # Targets resolving to the same pid share one termination attempt
        signalled: Dict[int, asyncio.Future] = {}
        attempts = await asyncio.gather(
            *(self._kill_target(target, options, snapshot, protected, signalled) for target in classified)
        )
        report = KillReport([result for result, _ in attempts])
        escalations = list(dict.fromkeys(task for _, tasks in attempts for task in tasks))

        if escalations and options.await_escalation:
            await asyncio.gather(*escalations, return_exceptions=True)

        logger.debug(
            "Kill invocation finished: %d target(s), %d failure(s), %d escalation(s) scheduled",
            len(report),
            len(report.failures),
            len(escalations),
        )
        aggregate(report, silent=options.silent)
        return report

    async def _snapshot_if_needed(self, targets: Sequence[Target], options: KillOptions) -> Optional[List[ProcessRecord]]:
        needs_names = any(target.kind is TargetKind.NAME for target in targets)
        if not needs_names and not options.protect_ancestors:
            return None
        return list(await self.snapshot_provider.list_processes())

    async def _kill_target(
        self,
        target: Target,
        options: KillOptions,
        snapshot: Optional[List[ProcessRecord]],
        protected: frozenset,
        signalled: Dict[int, asyncio.Future],
    ) -> Tuple[TargetResult, List[asyncio.Task]]:
        try:
            pids = await self._resolve_pids(target, options, snapshot)
        except ApplicationError as exc:
            logger.warning("Could not resolve %s: %s", target.raw, exc)
            return TargetResult(target, KillOutcome.other_error(str(exc))), []

        if not pids:
            logger.debug("No process matches %s", target.raw)
            return TargetResult(target, KillOutcome.not_found()), []

        allowed, refused = partition_protected(pids, protected)
        if not allowed:
            logger.info("Refusing to kill %s: it resolves to the calling process", target.raw)
            return TargetResult(target, KillOutcome.self_protected(), tuple(refused)), []

        outcomes = await asyncio.gather(*(self._terminate_once(pid, options.force, signalled) for pid in allowed))

        escalations: List[asyncio.Task] = []
        if options.escalates:
            delay = float(options.force_after_timeout_seconds or 0.0)
            for pid, outcome in zip(allowed, outcomes):
                if outcome.kind is OutcomeKind.KILLED:
                    escalations.append(self.scheduler.schedule(pid, delay, self.terminator))

        return TargetResult(target, combine_outcomes(outcomes), tuple(allowed)), escalations

    def _terminate_once(self, pid: int, force: bool, signalled: Dict[int, asyncio.Future]) -> asyncio.Future:
        attempt = signalled.get(pid)
        if attempt is None:
            attempt = asyncio.ensure_future(self.terminator.terminate(pid, force))
            signalled[pid] = attempt
        else:
            logger.debug("Pid %s already signalled in this invocation", pid)
        return attempt

    async def _resolve_pids(
        self,
        target: Target,
        options: KillOptions,
        snapshot: Optional[List[ProcessRecord]],
    ) -> List[int]:
        if target.kind is TargetKind.PID:
            return [int(target.value)]
        if target.kind is TargetKind.PORT:
            pid = await self.port_resolver.pid_for_port(int(target.value))
            return [] if pid is None else [pid]
        return resolve_name(
            str(target.value),
            snapshot or [],
            ignore_case=options.ignore_case,
            windows=self.windows,
        )


_default_killer: ProcessKiller | None = None


def get_default_killer() -> ProcessKiller:
    """Get or lazily build the psutil-backed killer."""
    global _default_killer
    if _default_killer is None:
        _default_killer = ProcessKiller()
    return _default_killer


def _build_options(options: Optional[KillOptions], overrides: dict[str, Any]) -> KillOptions:
    base = options or KillOptions()
    if not overrides:
        return base
    return dataclasses.replace(base, **overrides)


async def kill(
    targets: Targets,
    options: Optional[KillOptions] = None,
    *,
    caller_pid: Optional[int] = None,
    killer: Optional[ProcessKiller] = None,
    **option_overrides: Any,
) -> KillReport:
    """
    Kill one or more targets.

    Keyword overrides are applied on top of ``options``, so
    ``await kill(pid, force=True)`` and ``await kill(pid, KillOptions(force=True))``
    are equivalent.
    """
    resolved_options = _build_options(options, option_overrides)
    engine = killer or get_default_killer()
    return await engine.kill(targets, resolved_options, caller_pid=caller_pid)


def kill_sync(
    targets: Targets,
    options: Optional[KillOptions] = None,
    *,
    caller_pid: Optional[int] = None,
    killer: Optional[ProcessKiller] = None,
    **option_overrides: Any,
) -> KillReport:
    """Synchronously kill targets from code that has no event loop.

    Pending escalations are awaited before the temporary loop closes,
    otherwise they would be cancelled along with it.

    Raises:
        EventLoopRunningError: If called while an event loop is already running.
        ProcessKillError: As for :func:`kill`.
    """

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        # Absence of running loop - expected when called from synchronous context
        loop = None

    if loop is not None and loop.is_running():
        raise EventLoopRunningError()

    resolved_options = _build_options(options, option_overrides)
    engine = killer or get_default_killer()

    async def _run() -> KillReport:
        try:
            return await engine.kill(targets, resolved_options, caller_pid=caller_pid)
        finally:
            await engine.scheduler.drain()

    return asyncio.run(_run())


__all__ = ["ProcessKiller", "Targets", "get_default_killer", "kill", "kill_sync"]
