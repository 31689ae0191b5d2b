"""Tests for self-protection helpers."""

from __future__ import annotations

from prockill.process_killer_helpers.process_filter import partition_protected, protected_pids_for
from prockill.process_killer_helpers.process_models import ProcessRecord

SNAPSHOT = [
    ProcessRecord(pid=1, name="init", parent_pid=0),
    ProcessRecord(pid=50, name="sshd", parent_pid=1),
    ProcessRecord(pid=60, name="bash", parent_pid=50),
    ProcessRecord(pid=70, name="python3", parent_pid=60),
    ProcessRecord(pid=71, name="python3", parent_pid=60),
]


class TestProtectedPidsFor:
    """Tests for protected_pids_for."""

    def test_only_caller_by_default(self) -> None:
        assert protected_pids_for(70, SNAPSHOT) == frozenset({70})

    def test_without_snapshot(self) -> None:
        assert protected_pids_for(70, None, include_ancestors=True) == frozenset({70})

    def test_ancestor_chain(self) -> None:
        assert protected_pids_for(70, SNAPSHOT, include_ancestors=True) == frozenset({70, 60, 50, 1})

    def test_sibling_is_not_protected(self) -> None:
        assert 71 not in protected_pids_for(70, SNAPSHOT, include_ancestors=True)

    def test_cycle_in_stale_snapshot_terminates(self) -> None:
        records = [ProcessRecord(pid=5, name="a", parent_pid=6), ProcessRecord(pid=6, name="b", parent_pid=5)]
        assert protected_pids_for(5, records, include_ancestors=True) == frozenset({5, 6})

    def test_caller_missing_from_snapshot(self) -> None:
        assert protected_pids_for(999, SNAPSHOT, include_ancestors=True) == frozenset({999})


class TestPartitionProtected:
    """Tests for partition_protected."""

    def test_splits_preserving_order(self) -> None:
        allowed, refused = partition_protected([71, 70, 72, 60], frozenset({70, 60}))
        assert allowed == [71, 72]
        assert refused == [70, 60]

    def test_empty(self) -> None:
        assert partition_protected([], frozenset({1})) == ([], [])
