"""Tests for the result aggregator."""

from __future__ import annotations

import pytest

from prockill.exceptions import ApplicationError, ProcessKillError
from prockill.process_killer_helpers.process_models import KillOutcome, KillReport, Target, TargetResult
from prockill.process_killer_helpers.result_aggregator import aggregate, failure_messages, format_failure


def _report(*pairs) -> KillReport:
    return KillReport([TargetResult(target, outcome) for target, outcome in pairs])


def test_all_successes_do_not_raise() -> None:
    report = _report(
        (Target.pid(1), KillOutcome.killed()),
        (Target.pid(2), KillOutcome.self_protected()),
    )
    aggregate(report)


def test_failures_raise_one_error_in_input_order() -> None:
    report = _report(
        (Target.name("zeta"), KillOutcome.not_found()),
        (Target.pid(5), KillOutcome.killed()),
        (Target.port(80), KillOutcome.permission_denied()),
        (Target.name("alpha"), KillOutcome.other_error("Access violation")),
    )

    with pytest.raises(ProcessKillError) as excinfo:
        aggregate(report)

    assert excinfo.value.failure_lines == [
        "Killing process zeta failed: Process doesn't exist",
        "Killing process :80 failed: Permission denied",
        "Killing process alpha failed: Access violation",
    ]
    assert excinfo.value.report is report
    assert [result.target.raw for result in excinfo.value.failures] == ["zeta", ":80", "alpha"]
    assert isinstance(excinfo.value, ApplicationError)


def test_silent_swallows_failures() -> None:
    report = _report((Target.pid(123456), KillOutcome.not_found()))
    aggregate(report, silent=True)


def test_format_failure_uses_raw_text() -> None:
    result = TargetResult(Target.pid(7), KillOutcome.not_found(), pids=(7,))
    assert format_failure(result) == "Killing process 7 failed: Process doesn't exist"


def test_failure_messages_empty_for_success() -> None:
    assert failure_messages(_report((Target.pid(1), KillOutcome.killed()))) == []
