"""
Creation orchestrator - the job state machine.

Every sweep runs two phases back to back:

Dispatch: each pending job is claimed with an atomic pending -> generating
compare-and-set (the claim is the dispatch lock), then its parts are submitted
to the provider one at a time. The first rejected part fails the job and the
remaining parts are never submitted.

Poll: each generating job with stored handles has all of its handles polled
concurrently. A permanent failure (first in part order) fails the job with the
provider's text. Transient failures count as still pending. Once every part
succeeded the media is assembled and the job completes, unless no part
produced usable output.
"""

import asyncio
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Sequence
from uuid import uuid4

from studio.core import get_logger, set_job_id, set_sweep_id
from studio.models import Job, JobStatus, TaskHandle, parse_iso, utc_now_iso

from ..providers import (
    INVALID_HANDLE_MESSAGE,
    ErrorClassification,
    PollFailed,
    PollResult,
    PollSucceeded,
    ProviderAdapter,
    poll_failure_from_exception,
)
from ..storage import AssetStore, JobStore
from .assembly import MediaAssembler

logger = get_logger(__name__, component="orchestrator")

NO_OUTPUT_MESSAGE = "Video generation finished, but no output URI was found in the operation response."
INTERRUPTED_MESSAGE = "Job was interrupted before dispatch completed"


@dataclass
class SweepReport:
    """What one sweep changed."""
    sweep_id: str
    dispatched: List[str] = field(default_factory=list)
    completed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    still_generating: List[str] = field(default_factory=list)
    started_at: str = field(default_factory=utc_now_iso)
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CreationOrchestrator:
    """
    Drives jobs from pending to a terminal status.

    The provider adapter is injected so tests can substitute a fake one.
    Overlapping sweeps are safe: dispatch claims are compare-and-set writes and
    every terminal write is a generating -> X compare-and-set, so a job that
    another sweep already settled is left alone.
    """

    def __init__(
        self,
        job_store: JobStore,
        asset_store: AssetStore,
        provider: ProviderAdapter,
        *,
        download_attempts: int = 3,
        download_retry_delay: float = 2.0,
        max_generation_wait: Optional[timedelta] = None,
        max_concurrent_jobs: int = 4,
        assembler: Optional[MediaAssembler] = None,
    ):
        self.job_store = job_store
        self.asset_store = asset_store
        self.provider = provider
        self.max_generation_wait = max_generation_wait
        self.assembler = assembler or MediaAssembler(
            asset_store,
            provider,
            attempts=download_attempts,
            retry_delay=download_retry_delay,
        )
        self._semaphore = asyncio.Semaphore(max(1, max_concurrent_jobs))
        self._in_flight: Set[str] = set()

    async def _guarded(
        self,
        step: Callable[[Job], Awaitable[Optional[JobStatus]]],
        job: Job,
    ) -> Optional[JobStatus]:
        """Run one job step under the concurrency limit; a crash only affects that job."""
        async with self._semaphore:
            set_job_id(job.id)
            try:
                return await step(job)
            except Exception as exc:
                logger.error(
                    "Job step failed, will retry next sweep",
                    extra={"step": step.__name__, "error": str(exc)},
                    exc_info=True,
                )
                return None
            finally:
                set_job_id(None)

    def _fail(self, job: Job, error: str, result_keys: Optional[List[Optional[str]]] = None) -> bool:
        failed = self.job_store.compare_and_set_status(
            job.id,
            JobStatus.GENERATING,
            JobStatus.FAILED,
            error=error,
            result_keys=result_keys or [None] * len(job.parts),
        )
        if failed:
            logger.warning("Job failed", extra={"error": error})
        else:
            logger.info("Job already settled elsewhere, failure not recorded")
        return failed

    # ---------------------------------------------------------------- dispatch

    async def _dispatch_job(self, job: Job) -> Optional[JobStatus]:
        claimed = self.job_store.compare_and_set_status(
            job.id,
            JobStatus.PENDING,
            JobStatus.GENERATING,
            dispatched_at=utc_now_iso(),
        )
        if not claimed:
            logger.debug("Job already claimed by another sweep")
            return None

        self._in_flight.add(job.id)
        try:
            handles: List[Dict[str, Any]] = []
            for part in job.parts:
                try:
                    handle = await self.provider.create_task(part)
                except Exception as exc:
                    error = str(exc) or exc.__class__.__name__
                    logger.error(
                        "Part dispatch rejected",
                        extra={"part_index": part.index, "parts": len(job.parts), "error": error},
                    )
                    self._fail(job, error)
                    return JobStatus.FAILED
                handles.append(handle.to_dict())

            self.job_store.update(job.id, handles=handles)
        finally:
            self._in_flight.discard(job.id)
        logger.info("Job dispatched", extra={"parts": len(handles), "provider": self.provider.name})
        return JobStatus.GENERATING

    async def _dispatch_phase(self) -> Dict[str, Optional[JobStatus]]:
        pending = self.job_store.list_by_status(JobStatus.PENDING)
        outcomes = await asyncio.gather(*(self._guarded(self._dispatch_job, job) for job in pending))
        return {job.id: outcome for job, outcome in zip(pending, outcomes)}

    async def dispatch_pending(self) -> List[str]:
        """Dispatch every pending job; returns the ids now waiting on the provider."""
        outcomes = await self._dispatch_phase()
        return [job_id for job_id, outcome in outcomes.items() if outcome == JobStatus.GENERATING]

    # -------------------------------------------------------------------- poll

    async def _poll_handle(self, raw_handle: Any) -> PollResult:
        try:
            handle = TaskHandle.from_dict(raw_handle)
        except ValueError:
            return PollFailed(INVALID_HANDLE_MESSAGE, ErrorClassification.PERMANENT)
        try:
            return await self.provider.poll_task(handle)
        except Exception as exc:
            return poll_failure_from_exception(exc)

    def _generation_expired(self, job: Job) -> bool:
        if self.max_generation_wait is None:
            return False
        started = parse_iso(job.dispatched_at) or parse_iso(job.updated_at)
        if started is None:
            return False
        return datetime.now(timezone.utc) - started > self.max_generation_wait

    def _timeout_message(self) -> str:
        minutes = int(self.max_generation_wait.total_seconds() // 60)
        return f"Generation timed out after {minutes} minutes."

    async def _settle(self, job: Job, outcomes: Sequence[PollResult]) -> Optional[JobStatus]:
        permanent = next(
            (o for o in outcomes if isinstance(o, PollFailed) and not o.is_transient),
            None,
        )
        if permanent is not None:
            return JobStatus.FAILED if self._fail(job, permanent.reason) else None

        if not all(isinstance(o, PollSucceeded) for o in outcomes):
            transient = [o.reason for o in outcomes if isinstance(o, PollFailed)]
            if transient:
                logger.warning("Transient poll errors, retrying next sweep", extra={"errors": transient})
            if self._generation_expired(job):
                return JobStatus.FAILED if self._fail(job, self._timeout_message()) else None
            return JobStatus.GENERATING

        result_keys = await self.assembler.assemble(job, outcomes)
        if not any(result_keys):
            return JobStatus.FAILED if self._fail(job, NO_OUTPUT_MESSAGE, result_keys) else None

        completed = self.job_store.compare_and_set_status(
            job.id,
            JobStatus.GENERATING,
            JobStatus.COMPLETED,
            result_keys=result_keys,
            error=None,
        )
        if not completed:
            logger.info("Job already settled elsewhere, completion not recorded")
            return None
        logger.info(
            "Job completed",
            extra={"parts": len(result_keys), "usable_parts": sum(1 for key in result_keys if key)},
        )
        return JobStatus.COMPLETED

    async def _poll_job(self, job: Job) -> Optional[JobStatus]:
        if job.id in self._in_flight:
            return None
        self._in_flight.add(job.id)
        try:
            outcomes = await asyncio.gather(*(self._poll_handle(h) for h in job.handles))
            return await self._settle(job, outcomes)
        finally:
            self._in_flight.discard(job.id)

    async def _expire_undispatched(self, job: Job) -> Optional[JobStatus]:
        # Another process claimed the job and never stored handles
        if job.id in self._in_flight or not self._generation_expired(job):
            return None
        return JobStatus.FAILED if self._fail(job, INTERRUPTED_MESSAGE) else None

    async def _poll_phase(self) -> Dict[str, Optional[JobStatus]]:
        generating = self.job_store.list_by_status(JobStatus.GENERATING)
        steps = [
            self._guarded(self._poll_job if job.handles else self._expire_undispatched, job)
            for job in generating
        ]
        outcomes = await asyncio.gather(*steps)
        return {job.id: outcome for job, outcome in zip(generating, outcomes)}

    async def poll_generating(self) -> List[str]:
        """Poll every in-flight job; returns the ids that reached a terminal status."""
        outcomes = await self._poll_phase()
        return [
            job_id
            for job_id, outcome in outcomes.items()
            if outcome in (JobStatus.COMPLETED, JobStatus.FAILED)
        ]

    # ------------------------------------------------------------------- sweep

    async def run_sweep(self) -> SweepReport:
        """One dispatch pass followed by one poll pass."""
        report = SweepReport(sweep_id=uuid4().hex[:12])
        set_sweep_id(report.sweep_id)
        started = time.monotonic()
        try:
            for job_id, outcome in (await self._dispatch_phase()).items():
                if outcome == JobStatus.GENERATING:
                    report.dispatched.append(job_id)
                elif outcome == JobStatus.FAILED:
                    report.failed.append(job_id)

            for job_id, outcome in (await self._poll_phase()).items():
                if outcome == JobStatus.COMPLETED:
                    report.completed.append(job_id)
                elif outcome == JobStatus.FAILED:
                    report.failed.append(job_id)
                elif outcome == JobStatus.GENERATING:
                    report.still_generating.append(job_id)
        finally:
            report.duration_seconds = round(time.monotonic() - started, 3)
            set_sweep_id(None)

        if report.dispatched or report.completed or report.failed:
            logger.info(
                "Sweep finished",
                extra={
                    "sweep": report.sweep_id,
                    "dispatched": len(report.dispatched),
                    "completed": len(report.completed),
                    "failed": len(report.failed),
                    "still_generating": len(report.still_generating),
                    "duration_seconds": report.duration_seconds,
                },
            )
        return report

    def recover_interrupted_jobs(self) -> List[str]:
        """
        Fail generating jobs that never got their handles stored.

        Run once at startup, before the first sweep: a job in that state was
        claimed by a process that stopped mid-dispatch, and its provider tasks
        (if any) can no longer be tracked. Generating jobs with handles resume
        through normal polling.
        """
        recovered = []
        for job in self.job_store.list_by_status(JobStatus.GENERATING):
            if job.handles:
                continue
            set_job_id(job.id)
            try:
                if self._fail(job, INTERRUPTED_MESSAGE):
                    recovered.append(job.id)
            finally:
                set_job_id(None)
        if recovered:
            logger.warning("Recovered interrupted jobs", extra={"count": len(recovered), "job_ids": recovered})
        return recovered
