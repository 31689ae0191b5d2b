"""Map a listening TCP/UDP port to the pid that owns it."""

from __future__ import annotations

import logging
import socket
from typing import Iterable, Optional, Protocol

import psutil

from ..exceptions import PortLookupError

logger = logging.getLogger(__name__)


class PortResolver(Protocol):
    async def pid_for_port(self, port: int) -> Optional[int]: ...


class PsutilPortResolver:
    """Finds the owner of a port from psutil's socket table.

    A TCP listener wins over a bound UDP socket on the same port number.
    """

    async def pid_for_port(self, port: int) -> Optional[int]:
        try:
            connections = list(psutil.net_connections(kind="inet"))
        except psutil.AccessDenied:
            # macOS only exposes the system-wide table to root
            logger.debug("System socket table unavailable; scanning processes for port %s", port)
            connections = list(_per_process_connections())
        except (psutil.Error, OSError) as exc:
            raise PortLookupError(f"Could not read socket table: {exc}", port=port) from exc

        pid = _select_owner(connections, port)
        if pid is None:
            logger.debug("No process owns port %s", port)
        else:
            logger.debug("Port %s is owned by pid %s", port, pid)
        return pid


def _per_process_connections() -> Iterable:
    for proc in psutil.process_iter(["pid"]):
        try:
            connections = proc.net_connections(kind="inet")
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
        for conn in connections:
            yield _OwnedConnection(conn, proc.pid)


class _OwnedConnection:
    """Per-process connection entries carry no pid; attach the owner's."""

    def __init__(self, conn, pid: int):
        self.laddr = conn.laddr
        self.type = conn.type
        self.status = conn.status
        self.pid = pid


def _select_owner(connections: Iterable, port: int) -> Optional[int]:
    udp_owner: Optional[int] = None
    for conn in connections:
        pid = getattr(conn, "pid", None)
        laddr = getattr(conn, "laddr", None)
        if not pid or not laddr or laddr.port != port:
            continue
        if conn.type == socket.SOCK_STREAM and conn.status == psutil.CONN_LISTEN:
            return pid
        if conn.type == socket.SOCK_DGRAM and udp_owner is None:
            udp_owner = pid
    return udp_owner


__all__ = ["PortResolver", "PsutilPortResolver"]
