"""Optional existence checks layered outside the termination contract."""

from __future__ import annotations

import asyncio
import time

import psutil

DEFAULT_POLL_SECONDS = 0.05


def process_exists(pid: int) -> bool:
    """Return True while ``pid`` is alive; zombies count as exited."""
    try:
        return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False
    except psutil.AccessDenied:
        # Visible but not inspectable
        return True
    except ValueError:
        return False


async def wait_for_exit(pid: int, timeout: float, *, poll_interval: float = DEFAULT_POLL_SECONDS) -> bool:
    """Poll until ``pid`` exits or ``timeout`` elapses; return whether it exited."""
    deadline = time.monotonic() + timeout
    while process_exists(pid):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        await asyncio.sleep(min(poll_interval, remaining))
    return True


__all__ = ["DEFAULT_POLL_SECONDS", "process_exists", "wait_for_exit"]
