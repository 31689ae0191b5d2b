"""Tests for signal delivery and the termination strategy."""

from __future__ import annotations

import signal
from unittest.mock import AsyncMock, MagicMock, patch

import psutil
import pytest

from prockill.process_killer_helpers import process_terminator as terminator
from prockill.process_killer_helpers.process_models import KillOutcome, OutcomeKind
from prockill.process_killer_helpers.process_terminator import (
    PsutilSignalDispatcher,
    SignalKind,
    TaskkillSignalDispatcher,
    TerminationStrategy,
    classify_taskkill_failure,
    default_dispatcher,
)


class TestPsutilSignalDispatcher:
    """Tests for POSIX signal delivery."""

    @pytest.mark.asyncio
    async def test_polite_sends_sigterm(self) -> None:
        process = MagicMock()
        with patch("psutil.Process", return_value=process) as factory:
            outcome = await PsutilSignalDispatcher().send_signal(123, SignalKind.POLITE)

        factory.assert_called_once_with(123)
        process.send_signal.assert_called_once_with(signal.SIGTERM)
        assert outcome.kind is OutcomeKind.KILLED

    @pytest.mark.asyncio
    async def test_force_sends_sigkill(self) -> None:
        process = MagicMock()
        with patch("psutil.Process", return_value=process):
            await PsutilSignalDispatcher().send_signal(123, SignalKind.FORCE)

        process.send_signal.assert_called_once_with(PsutilSignalDispatcher.force_signal)

    @pytest.mark.asyncio
    async def test_missing_process_is_not_found(self) -> None:
        with patch("psutil.Process", side_effect=psutil.NoSuchProcess(123)):
            outcome = await PsutilSignalDispatcher().send_signal(123, SignalKind.POLITE)

        assert outcome.kind is OutcomeKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_vanishing_between_lookup_and_signal_is_not_found(self) -> None:
        process = MagicMock()
        process.send_signal.side_effect = psutil.NoSuchProcess(123)
        with patch("psutil.Process", return_value=process):
            outcome = await PsutilSignalDispatcher().send_signal(123, SignalKind.FORCE)

        assert outcome.kind is OutcomeKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_access_denied_is_permission_denied(self) -> None:
        process = MagicMock()
        process.send_signal.side_effect = psutil.AccessDenied(1)
        with patch("psutil.Process", return_value=process):
            outcome = await PsutilSignalDispatcher().send_signal(1, SignalKind.POLITE)

        assert outcome.kind is OutcomeKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_value_error_is_other_error(self) -> None:
        process = MagicMock()
        process.send_signal.side_effect = ValueError("preventing sending signal to process with PID 0")
        with patch("psutil.Process", return_value=process):
            outcome = await PsutilSignalDispatcher().send_signal(0, SignalKind.POLITE)

        assert outcome.kind is OutcomeKind.OTHER_ERROR
        assert "PID 0" in outcome.detail


def _fake_subprocess(returncode: int, stdout: bytes = b"", stderr: bytes = b"") -> MagicMock:
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    return proc


class TestTaskkillSignalDispatcher:
    """Tests for Windows delivery through taskkill."""

    @pytest.mark.asyncio
    async def test_polite_omits_force_flag(self) -> None:
        create = AsyncMock(return_value=_fake_subprocess(0, b"SUCCESS"))
        with patch.object(terminator.asyncio, "create_subprocess_exec", create):
            outcome = await TaskkillSignalDispatcher().send_signal(42, SignalKind.POLITE)

        assert outcome.kind is OutcomeKind.KILLED
        assert create.await_args.args == ("taskkill", "/pid", "42")

    @pytest.mark.asyncio
    async def test_force_adds_force_flag(self) -> None:
        create = AsyncMock(return_value=_fake_subprocess(0))
        with patch.object(terminator.asyncio, "create_subprocess_exec", create):
            await TaskkillSignalDispatcher().send_signal(42, SignalKind.FORCE)

        assert create.await_args.args == ("taskkill", "/f", "/pid", "42")

    @pytest.mark.asyncio
    async def test_failure_output_is_classified(self) -> None:
        proc = _fake_subprocess(128, stderr=b'ERROR: The process "42" not found.\r\n')
        with patch.object(terminator.asyncio, "create_subprocess_exec", AsyncMock(return_value=proc)):
            outcome = await TaskkillSignalDispatcher().send_signal(42, SignalKind.POLITE)

        assert outcome.kind is OutcomeKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_missing_executable_is_other_error(self) -> None:
        create = AsyncMock(side_effect=FileNotFoundError("taskkill"))
        with patch.object(terminator.asyncio, "create_subprocess_exec", create):
            outcome = await TaskkillSignalDispatcher().send_signal(42, SignalKind.POLITE)

        assert outcome.kind is OutcomeKind.OTHER_ERROR
        assert outcome.detail.startswith("Could not run taskkill")


class TestClassifyTaskkillFailure:
    """Tests for classify_taskkill_failure."""

    def test_access_denied(self) -> None:
        output = "ERROR: The process with PID 4 could not be terminated.\r\nReason: Access is denied."
        assert classify_taskkill_failure(output).kind is OutcomeKind.PERMISSION_DENIED

    def test_reason_is_extracted(self) -> None:
        output = (
            "ERROR: The process with PID 9 could not be terminated.\r\n"
            "Reason: This process can only be terminated forcefully (with /F option)."
        )
        outcome = classify_taskkill_failure(output)
        assert outcome.kind is OutcomeKind.OTHER_ERROR
        assert outcome.detail == "This process can only be terminated forcefully (with /F option)."

    def test_error_prefix_is_stripped(self) -> None:
        assert classify_taskkill_failure("ERROR: Invalid argument").detail == "Invalid argument"

    def test_empty_output(self) -> None:
        assert classify_taskkill_failure("").detail == "taskkill failed"


def test_default_dispatcher_by_platform() -> None:
    assert isinstance(default_dispatcher("win32"), TaskkillSignalDispatcher)
    assert isinstance(default_dispatcher("darwin"), PsutilSignalDispatcher)


class TestTerminationStrategy:
    """Tests for TerminationStrategy."""

    @pytest.mark.asyncio
    async def test_maps_force_flag_to_signal_kind(self) -> None:
        dispatcher = MagicMock()
        dispatcher.send_signal = AsyncMock(return_value=KillOutcome.killed())
        strategy = TerminationStrategy(dispatcher)

        await strategy.terminate(5, force=False)
        await strategy.terminate(5, force=True)

        kinds = [call.args[1] for call in dispatcher.send_signal.await_args_list]
        assert kinds == [SignalKind.POLITE, SignalKind.FORCE]

    @pytest.mark.asyncio
    async def test_logs_refused_delivery(self, caplog) -> None:
        dispatcher = MagicMock()
        dispatcher.send_signal = AsyncMock(return_value=KillOutcome.permission_denied())
        strategy = TerminationStrategy(dispatcher)

        with caplog.at_level("WARNING"):
            outcome = await strategy.terminate(5, force=True)

        assert outcome.kind is OutcomeKind.PERMISSION_DENIED
        assert "Could not terminate pid 5" in caplog.text
