"""
Shared fixtures: temporary stores, a scripted fake provider and job factories.
"""

import pytest

from studio.models import Job
from studio.services.infrastructure.orchestration import CreationOrchestrator
from studio.services.infrastructure.storage import FileAssetStore, JobStore

from tests.fakes import FakeProvider, build_job


@pytest.fixture
def job_store(tmp_path):
    return JobStore(tmp_path / "jobs", lease_timeout_seconds=1.0)


@pytest.fixture
def asset_store(tmp_path):
    return FileAssetStore(tmp_path / "assets")


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def orchestrator(job_store, asset_store, fake_provider):
    return CreationOrchestrator(
        job_store,
        asset_store,
        fake_provider,
        download_attempts=3,
        download_retry_delay=0,
    )


@pytest.fixture
def make_job(job_store):
    """Create and store a pending job with ``parts`` parts."""

    def _make(parts: int = 1, **kwargs) -> Job:
        return job_store.create(build_job(parts, **kwargs))

    return _make
