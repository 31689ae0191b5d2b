"""One-shot delayed escalation from polite to forceful termination."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Callable, Dict, List, Optional

from ..config.settings import DEFAULT_ESCALATION_POLL_SECONDS
from .process_models import KillOutcome
from .process_terminator import TerminationStrategy
from .process_verification import process_exists

logger = logging.getLogger(__name__)


class EscalationScheduler:
    """
    Runs detached escalation tasks keyed by pid.

    ``schedule`` returns immediately. The task polls the pid every
    ``poll_interval_seconds`` and stops early once it has exited; if it is
    still alive when the delay expires a forceful termination is sent. There
    is no cancel path: once scheduled, an escalation always runs to
    completion. Tasks only make progress while their event loop runs, so
    short-lived loops should ``drain()`` before closing.
    """

    def __init__(
        self,
        *,
        poll_interval_seconds: float = DEFAULT_ESCALATION_POLL_SECONDS,
        exists_check: Callable[[int], bool] = process_exists,
    ):
        self.poll_interval_seconds = poll_interval_seconds
        self._exists = exists_check
        self._tasks: Dict[int, asyncio.Task] = {}

    def schedule(
        self,
        pid: int,
        delay_seconds: float,
        terminator: TerminationStrategy,
    ) -> asyncio.Task:
        existing = self._tasks.get(pid)
        if existing is not None and not existing.done():
            logger.debug("Escalation for pid %s already pending", pid)
            return existing

        loop = asyncio.get_running_loop()
        task = loop.create_task(
            self._escalate(pid, delay_seconds, terminator),
            name=f"prockill-escalate-{pid}",
        )
        self._tasks[pid] = task
        task.add_done_callback(partial(self._on_done, pid))
        logger.debug("Scheduled forceful escalation for pid %s in %.3fs", pid, delay_seconds)
        return task

    def pending(self) -> List[int]:
        return [pid for pid, task in self._tasks.items() if not task.done()]

    async def drain(self) -> None:
        """Wait for every pending escalation to finish."""
        while True:
            tasks = [task for task in self._tasks.values() if not task.done()]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _escalate(
        self,
        pid: int,
        delay_seconds: float,
        terminator: TerminationStrategy,
    ) -> Optional[KillOutcome]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + delay_seconds
        while True:
            if not self._exists(pid):
                logger.debug("Pid %s exited before escalation deadline", pid)
                return None
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            await asyncio.sleep(min(self.poll_interval_seconds, remaining))

        logger.info("Pid %s still alive after %.3fs; escalating to forceful termination", pid, delay_seconds)
        return await terminator.terminate(pid, force=True)

    def _on_done(self, pid: int, task: asyncio.Task) -> None:
        if self._tasks.get(pid) is task:
            del self._tasks[pid]
        if task.cancelled():
            logger.warning("Escalation for pid %s was cancelled before it fired", pid)
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Escalation for pid %s failed", pid, exc_info=exc)


__all__ = ["EscalationScheduler"]
