"""
Lifecycle management for the creation service.

Builds the service graph (stores, provider adapter, orchestrator, scheduler)
and handles startup checks, interrupted-job recovery and shutdown.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI

from studio.config import ASSET_DIR, JOB_DATA_DIR, OrchestrationSettings, ProviderSettings
from studio.core import get_logger, run_startup_runtime_checks

from ..providers import ProviderAdapter, build_provider_adapter
from ..storage import AssetStore, FileAssetStore, JobStore
from .orchestrator import CreationOrchestrator
from .scheduler import SweepScheduler

logger = get_logger(__name__, service="lifecycle")


@dataclass
class ServiceContainer:
    """Everything the routes and the background sweep share."""
    job_store: JobStore
    asset_store: AssetStore
    provider: ProviderAdapter
    orchestrator: CreationOrchestrator
    scheduler: SweepScheduler
    settings: OrchestrationSettings = field(default_factory=OrchestrationSettings)
    provider_settings: Optional[ProviderSettings] = None

    def storage_directories(self) -> List[Path]:
        directories = [self.job_store.storage_dir]
        if isinstance(self.asset_store, FileAssetStore):
            directories.append(self.asset_store.root_dir)
        return directories


def build_container(
    settings: Optional[OrchestrationSettings] = None,
    provider_settings: Optional[ProviderSettings] = None,
    job_dir: Optional[Path] = None,
    asset_dir: Optional[Path] = None,
    provider: Optional[ProviderAdapter] = None,
) -> ServiceContainer:
    """Wire the service graph from environment settings (overridable for tests)."""
    settings = settings or OrchestrationSettings.from_env()
    provider_settings = provider_settings or ProviderSettings.from_env()

    job_store = JobStore(job_dir or JOB_DATA_DIR, lease_stale_seconds=settings.job_lease_stale_seconds)
    asset_store = FileAssetStore(asset_dir or ASSET_DIR)
    provider = provider or build_provider_adapter(
        asset_store,
        provider_settings,
        download_timeout=settings.download_timeout_seconds,
    )
    orchestrator = CreationOrchestrator(
        job_store,
        asset_store,
        provider,
        download_attempts=settings.download_max_attempts,
        download_retry_delay=settings.download_retry_delay_seconds,
        max_generation_wait=settings.max_generation_wait,
        max_concurrent_jobs=settings.max_concurrent_jobs,
    )
    scheduler = SweepScheduler(orchestrator, interval_seconds=settings.sweep_interval_seconds)
    return ServiceContainer(
        job_store=job_store,
        asset_store=asset_store,
        provider=provider,
        orchestrator=orchestrator,
        scheduler=scheduler,
        settings=settings,
        provider_settings=provider_settings,
    )


class StartupManager:
    def __init__(self, app: FastAPI, container: ServiceContainer):
        self.app = app
        self.container = container

    async def run_startup(self) -> Dict[str, Any]:
        """Check storage, recover interrupted jobs and start the sweep loop."""
        runtime_report = run_startup_runtime_checks(self.container.storage_directories())
        self.app.state.runtime_report = runtime_report
        logger.info("Startup runtime checks complete", extra={"runtime_report": runtime_report})

        if not self.container.settings.sweep_enabled:
            logger.info("Sweep scheduler disabled by environment")
            return runtime_report

        recovered = self.container.orchestrator.recover_interrupted_jobs()
        runtime_report["recovered_jobs"] = recovered
        self.container.scheduler.start()
        return runtime_report

    async def run_shutdown(self) -> None:
        """Stop background services gracefully."""
        try:
            await self.container.scheduler.stop()
        finally:
            await self.container.provider.aclose()
