"""
Generation providers - remote services that turn job parts into video.

Use build_provider_adapter() to construct the adapter selected by
GENERATION_PROVIDER; the orchestrator receives it through its constructor.
"""

from typing import Optional

from studio.config import GenerationProviderType, ProviderSettings
from studio.core import get_logger

from ..storage import AssetStore
from .base import (
    ErrorClassification,
    MediaPayload,
    PollFailed,
    PollPending,
    PollResult,
    PollSucceeded,
    ProviderAdapter,
    classify_error,
    download_http_media,
    poll_failure_from_exception,
    INVALID_HANDLE_MESSAGE,
    OPERATION_EXPIRED_MESSAGE,
)
from .task_api import TaskApiProviderAdapter
from .veo import VeoProviderAdapter

logger = get_logger(__name__, component="providers")


def build_provider_adapter(
    asset_store: AssetStore,
    settings: Optional[ProviderSettings] = None,
    download_timeout: float = 120.0,
) -> ProviderAdapter:
    """Construct the configured provider adapter."""
    settings = settings or ProviderSettings.from_env()
    if settings.provider == GenerationProviderType.TASK_API:
        adapter: ProviderAdapter = TaskApiProviderAdapter(settings, asset_store, request_timeout=download_timeout)
    else:
        adapter = VeoProviderAdapter(settings, asset_store, download_timeout=download_timeout)
    logger.info("Generation provider configured", extra={"provider": adapter.name})
    return adapter


__all__ = [
    "ErrorClassification",
    "MediaPayload",
    "PollFailed",
    "PollPending",
    "PollResult",
    "PollSucceeded",
    "ProviderAdapter",
    "classify_error",
    "download_http_media",
    "poll_failure_from_exception",
    "INVALID_HANDLE_MESSAGE",
    "OPERATION_EXPIRED_MESSAGE",
    "TaskApiProviderAdapter",
    "VeoProviderAdapter",
    "build_provider_adapter",
]
