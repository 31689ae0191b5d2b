"""Deliver polite or forceful termination requests to a pid."""

from __future__ import annotations

import asyncio
import logging
import re
import signal
from enum import Enum
from typing import Optional, Protocol

import psutil

from .name_resolver import is_windows_platform
from .process_models import KillOutcome, OutcomeKind

logger = logging.getLogger(__name__)

_TASKKILL_REASON_PATTERN = re.compile(r"Reason:\s*(?P<reason>.+)", re.IGNORECASE | re.DOTALL)


class SignalKind(Enum):
    POLITE = "polite"
    FORCE = "force"


class SignalDispatcher(Protocol):
    async def send_signal(self, pid: int, kind: SignalKind) -> KillOutcome: ...


class PsutilSignalDispatcher:
    """POSIX delivery: SIGTERM for polite requests, SIGKILL for forceful ones."""

    polite_signal = signal.SIGTERM
    force_signal = getattr(signal, "SIGKILL", signal.SIGTERM)

    async def send_signal(self, pid: int, kind: SignalKind) -> KillOutcome:
        signum = self.force_signal if kind is SignalKind.FORCE else self.polite_signal
        try:
            psutil.Process(pid).send_signal(signum)
        except psutil.NoSuchProcess:
            return KillOutcome.not_found()
        except psutil.AccessDenied as exc:
            return KillOutcome.permission_denied(str(exc))
        except (psutil.Error, OSError, ValueError) as exc:
            # psutil refuses pid 0 with ValueError since it would hit the whole process group
            return KillOutcome.other_error(str(exc))
        return KillOutcome.killed()


class TaskkillSignalDispatcher:
    """Windows delivery through ``taskkill``; a close request unless forced."""

    def __init__(self, executable: str = "taskkill"):
        self.executable = executable

    async def send_signal(self, pid: int, kind: SignalKind) -> KillOutcome:
        args = ["/pid", str(pid)]
        if kind is SignalKind.FORCE:
            args.insert(0, "/f")
        try:
            proc = await asyncio.create_subprocess_exec(
                self.executable,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()
        except OSError as exc:
            return KillOutcome.other_error(f"Could not run {self.executable}: {exc}")

        if proc.returncode == 0:
            return KillOutcome.killed()
        output = (stderr or stdout or b"").decode(errors="replace").strip()
        return classify_taskkill_failure(output)


def classify_taskkill_failure(output: str) -> KillOutcome:
    lowered = output.lower()
    if "not found" in lowered:
        return KillOutcome.not_found()
    if "access is denied" in lowered:
        return KillOutcome.permission_denied(output)
    return KillOutcome.other_error(_clean_taskkill_message(output))


def _clean_taskkill_message(output: str) -> str:
    match = _TASKKILL_REASON_PATTERN.search(output)
    if match:
        return match.group("reason").strip()
    if output.upper().startswith("ERROR:"):
        return output[len("ERROR:") :].strip()
    return output or "taskkill failed"


def default_dispatcher(platform: Optional[str] = None) -> SignalDispatcher:
    if is_windows_platform(platform):
        return TaskkillSignalDispatcher()
    return PsutilSignalDispatcher()


class TerminationStrategy:
    """Platform dispatched ``terminate(pid, force)``.

    ``KILLED`` only means the request was delivered; the process may still be
    running (or ignoring a polite request) when this returns.
    """

    def __init__(self, dispatcher: Optional[SignalDispatcher] = None):
        self.dispatcher = dispatcher or default_dispatcher()

    async def terminate(self, pid: int, force: bool) -> KillOutcome:
        kind = SignalKind.FORCE if force else SignalKind.POLITE
        outcome = await self.dispatcher.send_signal(pid, kind)
        if outcome.kind is OutcomeKind.KILLED:
            logger.info("Sent %s termination to pid %s", kind.value, pid)
        elif outcome.kind is OutcomeKind.NOT_FOUND:
            logger.debug("Pid %s no longer exists", pid)
        else:
            logger.warning("Could not terminate pid %s (%s): %s", pid, outcome.kind.value, outcome.reason)
        return outcome


__all__ = [
    "PsutilSignalDispatcher",
    "SignalDispatcher",
    "SignalKind",
    "TaskkillSignalDispatcher",
    "TerminationStrategy",
    "classify_taskkill_failure",
    "default_dispatcher",
]
