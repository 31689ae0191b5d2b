"""Collapse per-target results into a single failure."""

from __future__ import annotations

import logging
from typing import List

from ..exceptions import ProcessKillError
from .process_models import KillReport, TargetResult

logger = logging.getLogger(__name__)


def format_failure(result: TargetResult) -> str:
    return f"Killing process {result.target.raw} failed: {result.outcome.reason}"


def failure_messages(report: KillReport) -> List[str]:
    return [format_failure(result) for result in report.failures]


def aggregate(report: KillReport, *, silent: bool = False) -> None:
    """
    Raise ``ProcessKillError`` listing every failed target, in input order.

    ``KILLED`` and ``SELF_PROTECTED`` count as success. With ``silent`` the
    failures are logged at debug level and swallowed.
    """
    messages = failure_messages(report)
    if not messages:
        return
    if silent:
        logger.debug("Suppressed %d kill failure(s): %s", len(messages), "; ".join(messages))
        return
    raise ProcessKillError("\n".join(messages), report=report, failures=report.failures)


__all__ = ["aggregate", "failure_messages", "format_failure"]
