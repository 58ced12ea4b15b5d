"""
Sweep scheduler.

Runs the orchestrator's sweep once immediately and then on a fixed interval
in a background asyncio task. The scheduler owns its stop token, so shutdown
has exactly one observable stop point: ``await scheduler.stop()``.
"""

import asyncio
from typing import Optional

from studio.core import get_logger

from .orchestrator import CreationOrchestrator, SweepReport

logger = get_logger(__name__, component="sweep_scheduler")


class SweepScheduler:
    """Periodic driver for CreationOrchestrator.run_sweep()."""

    def __init__(
        self,
        orchestrator: CreationOrchestrator,
        interval_seconds: float = 15.0,
        stop_grace_seconds: float = 30.0,
    ):
        self.orchestrator = orchestrator
        self.interval_seconds = interval_seconds
        self.stop_grace_seconds = stop_grace_seconds
        self.last_report: Optional[SweepReport] = None
        self.sweep_count = 0
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background loop; a second call while running is a no-op."""
        if self.is_running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop_event), name="sweep-scheduler")
        logger.info("Sweep scheduler started", extra={"interval_seconds": self.interval_seconds})

    async def trigger(self) -> SweepReport:
        """Run one sweep now, outside the periodic loop."""
        report = await self.orchestrator.run_sweep()
        self.last_report = report
        self.sweep_count += 1
        return report

    async def _run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await self.trigger()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.error("Sweep failed", extra={"error": str(exc)}, exc_info=True)

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

    async def stop(self) -> None:
        """Signal the loop to stop and wait for the in-flight sweep to finish."""
        if self._task is None:
            return
        task = self._task
        if self._stop_event is not None:
            self._stop_event.set()
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=self.stop_grace_seconds)
        except asyncio.TimeoutError:
            logger.warning("Sweep did not finish within grace period, cancelling")
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        finally:
            self._task = None
            self._stop_event = None
        logger.info("Sweep scheduler stopped", extra={"sweeps": self.sweep_count})
