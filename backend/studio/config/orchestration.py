"""
Orchestration settings - sweep cadence, download retry budget and the
generation ceiling for jobs that never leave ``generating``.
"""

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from studio.core.runtime import env_float, env_int, parse_bool_env

DEFAULT_SWEEP_INTERVAL_SECONDS = 15.0
DEFAULT_DOWNLOAD_MAX_ATTEMPTS = 3
DEFAULT_DOWNLOAD_RETRY_DELAY_SECONDS = 2.0
DEFAULT_DOWNLOAD_TIMEOUT_SECONDS = 120.0
DEFAULT_GENERATION_MAX_WAIT_MINUTES = 30
DEFAULT_JOB_LEASE_STALE_SECONDS = 60.0


@dataclass
class OrchestrationSettings:
    sweep_enabled: bool = True
    sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS
    max_concurrent_jobs: int = 4
    download_max_attempts: int = DEFAULT_DOWNLOAD_MAX_ATTEMPTS
    download_retry_delay_seconds: float = DEFAULT_DOWNLOAD_RETRY_DELAY_SECONDS
    download_timeout_seconds: float = DEFAULT_DOWNLOAD_TIMEOUT_SECONDS
    generation_max_wait_minutes: int = DEFAULT_GENERATION_MAX_WAIT_MINUTES
    job_lease_stale_seconds: float = DEFAULT_JOB_LEASE_STALE_SECONDS

    @classmethod
    def from_env(cls) -> "OrchestrationSettings":
        return cls(
            sweep_enabled=parse_bool_env(os.getenv("SWEEP_ENABLED"), default=True),
            sweep_interval_seconds=env_float("SWEEP_INTERVAL_SECONDS", DEFAULT_SWEEP_INTERVAL_SECONDS, 1.0),
            max_concurrent_jobs=env_int("SWEEP_MAX_CONCURRENT_JOBS", 4, 1),
            download_max_attempts=env_int("DOWNLOAD_MAX_ATTEMPTS", DEFAULT_DOWNLOAD_MAX_ATTEMPTS, 1),
            download_retry_delay_seconds=env_float(
                "DOWNLOAD_RETRY_DELAY_SECONDS", DEFAULT_DOWNLOAD_RETRY_DELAY_SECONDS, 0.0
            ),
            download_timeout_seconds=env_float("DOWNLOAD_TIMEOUT_SECONDS", DEFAULT_DOWNLOAD_TIMEOUT_SECONDS, 1.0),
            generation_max_wait_minutes=env_int(
                "GENERATION_MAX_WAIT_MINUTES", DEFAULT_GENERATION_MAX_WAIT_MINUTES, 0
            ),
            job_lease_stale_seconds=env_float("JOB_LEASE_STALE_SECONDS", DEFAULT_JOB_LEASE_STALE_SECONDS, 1.0),
        )

    @property
    def max_generation_wait(self) -> Optional[timedelta]:
        """Ceiling for a job stuck in ``generating``; None when disabled (0)."""
        if self.generation_max_wait_minutes <= 0:
            return None
        return timedelta(minutes=self.generation_max_wait_minutes)
