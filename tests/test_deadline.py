"""Tests for deadline supervision."""

import asyncio

import pytest

from food_tracker_api.core.exceptions import APIError, ErrorCode
from food_tracker_api.pipeline.deadline import DeadlineSupervisor, ResultCell


def _timeout_error() -> APIError:
    return APIError(ErrorCode.ANALYSIS_TIMEOUT, "too slow")


class TestResultCell:
    """Tests for ResultCell."""

    @pytest.mark.asyncio
    async def test_first_result_wins(self):
        cell: ResultCell[str] = ResultCell()

        assert cell.set_result("first") is True
        assert cell.set_result("second") is False
        assert cell.set_exception(RuntimeError("late")) is False

        assert cell.resolved
        assert await cell.wait() == "first"

    @pytest.mark.asyncio
    async def test_first_exception_wins(self):
        cell: ResultCell[str] = ResultCell()

        assert cell.set_exception(ValueError("boom")) is True
        assert cell.set_result("late") is False

        with pytest.raises(ValueError, match="boom"):
            await cell.wait()


class TestDeadlineSupervisor:
    """Tests for DeadlineSupervisor."""

    def test_rejects_non_positive_budget(self):
        with pytest.raises(ValueError):
            DeadlineSupervisor("test", 0, _timeout_error)

    @pytest.mark.asyncio
    async def test_returns_result_within_budget(self):
        supervisor = DeadlineSupervisor("test", 1.0, _timeout_error)

        async def work():
            await asyncio.sleep(0.01)
            return 42

        assert await supervisor.run(work) == 42

    @pytest.mark.asyncio
    async def test_propagates_work_error(self):
        supervisor = DeadlineSupervisor("test", 1.0, _timeout_error)

        async def work():
            raise APIError(ErrorCode.INVALID_IMAGE, "bad image")

        with pytest.raises(APIError) as exc_info:
            await supervisor.run(work)

        assert exc_info.value.code == ErrorCode.INVALID_IMAGE

    @pytest.mark.asyncio
    async def test_timeout_raises_configured_error(self):
        supervisor = DeadlineSupervisor("test", 0.05, _timeout_error)

        async def work():
            await asyncio.sleep(1.0)
            return "too late"

        with pytest.raises(APIError) as exc_info:
            await supervisor.run(work)

        assert exc_info.value.code == ErrorCode.ANALYSIS_TIMEOUT
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_timeout_cancels_work(self):
        supervisor = DeadlineSupervisor("test", 0.05, _timeout_error)
        cancelled = asyncio.Event()

        async def work():
            try:
                await asyncio.sleep(1.0)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        with pytest.raises(APIError):
            await supervisor.run(work)

        await asyncio.wait_for(cancelled.wait(), timeout=1.0)

    @pytest.mark.asyncio
    async def test_late_outcome_is_discarded(self, caplog):
        supervisor = DeadlineSupervisor("test", 0.05, _timeout_error)

        async def work():
            try:
                await asyncio.sleep(1.0)
            except asyncio.CancelledError:
                # Ignores cancellation and finishes anyway
                return "late"
            return "on time"

        with caplog.at_level("WARNING", logger="food_tracker_api.pipeline.deadline"):
            with pytest.raises(APIError) as exc_info:
                await supervisor.run(work)
            await asyncio.sleep(0.05)

        assert exc_info.value.code == ErrorCode.ANALYSIS_TIMEOUT
        assert "Discarding late test outcome" in caplog.text
