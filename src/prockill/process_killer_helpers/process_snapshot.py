"""Point-in-time process listing."""

from __future__ import annotations

import logging
import time
from typing import List, Protocol

import psutil

from .process_models import ProcessRecord

logger = logging.getLogger(__name__)


class ProcessSnapshotProvider(Protocol):
    async def list_processes(self) -> List[ProcessRecord]: ...


class PsutilSnapshotProvider:
    """Reads ``(pid, name, ppid)`` for every running process via psutil."""

    async def list_processes(self) -> List[ProcessRecord]:
        start_time = time.monotonic()
        records: List[ProcessRecord] = []
        for proc in psutil.process_iter(["pid", "name", "ppid"]):
            try:
                info = proc.info
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
            pid = info.get("pid")
            if pid is None:
                continue
            name_value = info.get("name")
            records.append(
                ProcessRecord(
                    pid=int(pid),
                    name="" if name_value is None else str(name_value),
                    parent_pid=info.get("ppid"),
                )
            )

        logger.debug(
            "Process snapshot completed in %.3fs with %d processes",
            time.monotonic() - start_time,
            len(records),
        )
        return records


__all__ = ["ProcessSnapshotProvider", "PsutilSnapshotProvider"]
