"""Deadline supervision for request pipelines.

A ``DeadlineSupervisor`` runs a unit of work as its own task and races it
against a loop timer. Both sides report into a ``ResultCell`` that accepts
exactly one outcome: whichever settles first is what the caller receives, and
anything arriving later is logged and dropped.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResultCell(Generic[T]):
    """Single-assignment holder for a value or an exception.

    The first ``set_result``/``set_exception`` call wins and returns True;
    every later call is a no-op that returns False.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

    @property
    def resolved(self) -> bool:
        return self._future.done()

    def set_result(self, value: T) -> bool:
        if self._future.done():
            return False
        self._future.set_result(value)
        return True

    def set_exception(self, exc: BaseException) -> bool:
        if self._future.done():
            return False
        self._future.set_exception(exc)
        return True

    def cancel(self) -> bool:
        if self._future.done():
            return False
        return self._future.cancel()

    async def wait(self) -> T:
        return await self._future


class DeadlineSupervisor:
    """
    Wraps a pipeline invocation with a hard wall-clock budget.

    Usage:
        supervisor = DeadlineSupervisor(
            name="analysis",
            budget_seconds=100,
            on_timeout=lambda: APIError(ErrorCode.ANALYSIS_TIMEOUT, "..."),
        )
        response = await supervisor.run(lambda: pipeline.analyze(request))
    """

    def __init__(
        self,
        name: str,
        budget_seconds: float,
        on_timeout: Callable[[], BaseException],
    ):
        """
        Initialize the supervisor.

        Args:
            name: Label used in logs and task names
            budget_seconds: Maximum wall-clock duration of one invocation
            on_timeout: Factory for the error raised when the budget is spent
        """
        if budget_seconds <= 0:
            raise ValueError("budget_seconds must be positive")
        self.name = name
        self.budget_seconds = budget_seconds
        self._on_timeout = on_timeout

    async def run(self, work: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``work`` under the deadline.

        Returns:
            The work's result if it finished first

        Raises:
            Whatever the work raised if it failed first, or the ``on_timeout``
            error if the budget elapsed first
        """
        loop = asyncio.get_running_loop()
        cell: ResultCell[T] = ResultCell()
        started = time.monotonic()

        task = asyncio.ensure_future(work())
        task.add_done_callback(lambda t: self._settle_from_task(cell, t, started))
        timer = loop.call_later(self.budget_seconds, self._expire, cell, started)

        try:
            return await cell.wait()
        finally:
            timer.cancel()
            if not task.done():
                # Best effort: collaborators may keep running in the background,
                # their outcome lands on an already-resolved cell.
                task.cancel()

    def _expire(self, cell: ResultCell, started: float) -> None:
        if cell.set_exception(self._on_timeout()):
            logger.error(
                f"{self.name} deadline of {self.budget_seconds}s exceeded",
                extra={
                    "pipeline": self.name,
                    "elapsed_ms": int((time.monotonic() - started) * 1000),
                },
            )

    def _settle_from_task(
        self, cell: ResultCell, task: asyncio.Future, started: float
    ) -> None:
        elapsed_ms = int((time.monotonic() - started) * 1000)

        if task.cancelled():
            if cell.cancel():
                logger.warning(f"{self.name} work was cancelled before finishing")
            return

        exc = task.exception()
        accepted = (
            cell.set_exception(exc) if exc is not None else cell.set_result(task.result())
        )
        if not accepted:
            logger.warning(
                f"Discarding late {self.name} outcome after deadline",
                extra={
                    "pipeline": self.name,
                    "elapsed_ms": elapsed_ms,
                    "late_error": repr(exc) if exc is not None else None,
                },
            )
