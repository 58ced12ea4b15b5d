"""
Job Store - durable job metadata with file-based persistence.

One JSON document per job under ``storage_dir``. Every write is a
read-modify-write performed while holding both the in-process lock and a
per-job lease file, so ``compare_and_set_status`` stays atomic even when
several processes share the directory.
"""

import json
import os
import re
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Iterator, List, Optional, Union

from studio.core import (
    DuplicateJobError,
    InvalidTransitionError,
    JobNotFoundError,
    JobStateError,
    LeaseTimeoutError,
    get_logger,
)
from studio.models import Job, JobStatus, parse_iso, utc_now_iso

from .events import JobEvent, JobEventBus

logger = get_logger(__name__, component="job_store")

UPDATABLE_FIELDS = {
    "status",
    "title",
    "handles",
    "result_keys",
    "error",
    "thumbnail_key",
    "dispatched_at",
}

StatusLike = Union[JobStatus, str]

_SAFE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# Records with an unreadable timestamp sort as the oldest
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _as_status(value: StatusLike) -> JobStatus:
    return value if isinstance(value, JobStatus) else JobStatus(value)


def _check_invariants(job: Job) -> None:
    part_count = len(job.parts)

    if job.handles and len(job.handles) != part_count:
        raise JobStateError(
            f"Job {job.id} has {len(job.handles)} handles for {part_count} parts"
        )

    if job.result_keys is not None and len(job.result_keys) != part_count:
        raise JobStateError(
            f"Job {job.id} has {len(job.result_keys)} result slots for {part_count} parts"
        )

    if job.status == JobStatus.COMPLETED:
        if job.error:
            raise JobStateError(f"Completed job {job.id} cannot carry an error")
        if not job.result_keys or not any(job.result_keys):
            raise JobStateError(f"Completed job {job.id} needs at least one result")

    if job.status == JobStatus.FAILED and not job.error:
        raise JobStateError(f"Failed job {job.id} needs an error message")

    if job.status.is_terminal() and job.result_keys is None:
        raise JobStateError(f"Terminal job {job.id} needs one result slot per part")


def _check_new_job(job: Job) -> None:
    if job.status != JobStatus.PENDING:
        raise JobStateError(f"New job {job.id} must start pending, not '{job.status.value}'")
    if not job.parts:
        raise JobStateError(f"New job {job.id} has no parts")
    if job.handles or job.result_keys is not None or job.error:
        raise JobStateError(f"New job {job.id} cannot carry handles, results or an error")
    if parse_iso(job.created_at) is None:
        raise JobStateError(f"New job {job.id} has an unreadable created_at: {job.created_at!r}")
    _check_invariants(job)


def _created_sort_key(job: Job) -> datetime:
    return parse_iso(job.created_at) or _EPOCH


class JobStore:
    """Durable key -> job record storage with change notifications."""

    def __init__(
        self,
        storage_dir: Union[str, Path],
        events: Optional[JobEventBus] = None,
        lease_stale_seconds: float = 60.0,
        lease_timeout_seconds: float = 10.0,
    ):
        self._storage_dir = Path(storage_dir)
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        self.events = events or JobEventBus()
        self._lease_stale_seconds = lease_stale_seconds
        self._lease_timeout_seconds = lease_timeout_seconds
        self._lock = RLock()

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    def _job_file(self, job_id: str) -> Path:
        return self._storage_dir / f"{job_id}.json"

    def _lease_file(self, job_id: str) -> Path:
        return self._storage_dir / f"{job_id}.lease"

    def _load(self, job_id: str) -> Optional[Job]:
        if not _SAFE_ID_PATTERN.fullmatch(job_id or ""):
            return None
        job_file = self._job_file(job_id)
        if not job_file.exists():
            return None
        try:
            with open(job_file, "r", encoding="utf-8") as f:
                return Job.from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.error("Unreadable job record", extra={"record": str(job_file), "error": str(exc)})
            return None

    def _save(self, job: Job) -> None:
        job_file = self._job_file(job.id)
        tmp_file = self._storage_dir / f".{job.id}.json.tmp"
        with open(tmp_file, "w", encoding="utf-8") as f:
            json.dump(job.to_dict(), f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_file, job_file)

    def _break_stale_lease(self, lease: Path) -> None:
        try:
            age = time.time() - lease.stat().st_mtime
        except FileNotFoundError:
            return
        if age > self._lease_stale_seconds:
            logger.warning("Breaking stale job lease", extra={"lease": str(lease), "age_seconds": round(age, 1)})
            lease.unlink(missing_ok=True)

    @contextmanager
    def _lease(self, job_id: str) -> Iterator[None]:
        """Exclusive per-job lease shared by every process using this directory."""
        lease = self._lease_file(job_id)
        started = time.monotonic()
        while True:
            try:
                fd = os.open(lease, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
                break
            except FileExistsError:
                self._break_stale_lease(lease)
                waited = time.monotonic() - started
                if waited >= self._lease_timeout_seconds:
                    raise LeaseTimeoutError(job_id, waited)
                time.sleep(0.01)
        try:
            os.write(fd, str(os.getpid()).encode("ascii"))
            os.close(fd)
            yield
        finally:
            lease.unlink(missing_ok=True)

    def _publish(self, job_id: str, action: str, status: Optional[JobStatus]) -> None:
        self.events.publish(JobEvent(job_id=job_id, action=action, status=status.value if status else None))

    def _apply(self, job: Job, fields: Dict[str, Any]) -> Job:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise JobStateError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        if "status" in fields:
            target = _as_status(fields["status"])
            if target != job.status and not job.status.can_transition_to(target):
                raise InvalidTransitionError(job.id, job.status.value, target.value)
            job.status = target

        for name, value in fields.items():
            if name != "status":
                setattr(job, name, value)

        job.updated_at = utc_now_iso()
        _check_invariants(job)
        return job

    def create(self, job: Job) -> Job:
        """Insert a new record; fails if the id already exists."""
        if not _SAFE_ID_PATTERN.fullmatch(job.id or ""):
            raise JobStateError(f"Job id is not storable: {job.id!r}")
        _check_new_job(job)
        with self._lock, self._lease(job.id):
            if self._job_file(job.id).exists():
                raise DuplicateJobError(job.id)
            self._save(job)
        logger.info("Job created", extra={"created_job_id": job.id, "kind": job.kind.value, "parts": len(job.parts)})
        self._publish(job.id, "created", job.status)
        return job

    def find(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._load(job_id)

    def get(self, job_id: str) -> Job:
        job = self.find(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def list(self) -> List[Job]:
        """All jobs, newest first."""
        with self._lock:
            job_ids = [path.stem for path in self._storage_dir.glob("*.json")]
            jobs = [job for job in (self._load(job_id) for job_id in job_ids) if job]
        return sorted(jobs, key=_created_sort_key, reverse=True)

    def list_by_status(self, *statuses: StatusLike) -> List[Job]:
        """Jobs in any of ``statuses``, oldest first."""
        wanted = {_as_status(s) for s in statuses}
        return [job for job in reversed(self.list()) if job.status in wanted]

    def update(self, job_id: str, **fields: Any) -> Job:
        """Merge ``fields`` into the stored record (read-modify-write)."""
        if not _SAFE_ID_PATTERN.fullmatch(job_id or ""):
            raise JobNotFoundError(job_id)
        with self._lock, self._lease(job_id):
            job = self._load(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            job = self._apply(job, fields)
            self._save(job)
        self._publish(job_id, "updated", job.status)
        return job

    def compare_and_set_status(
        self,
        job_id: str,
        expected: StatusLike,
        new: StatusLike,
        **fields: Any,
    ) -> bool:
        """
        Atomically move ``job_id`` from ``expected`` to ``new``.

        Returns False without writing (and without a notification) when the
        stored status is no longer ``expected``.
        """
        if not _SAFE_ID_PATTERN.fullmatch(job_id or ""):
            raise JobNotFoundError(job_id)
        expected_status = _as_status(expected)
        with self._lock, self._lease(job_id):
            job = self._load(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            if job.status != expected_status:
                return False
            job = self._apply(job, {**fields, "status": _as_status(new)})
            self._save(job)
        self._publish(job_id, "updated", job.status)
        return True

    def delete(self, job_id: str) -> bool:
        if not _SAFE_ID_PATTERN.fullmatch(job_id or ""):
            return False
        with self._lock, self._lease(job_id):
            job_file = self._job_file(job_id)
            if not job_file.exists():
                return False
            job_file.unlink()
        self._publish(job_id, "deleted", None)
        return True
