"""Storage layer - job metadata, binary assets and change notifications."""

from .events import JobEvent, JobEventBus
from .job_store import JobStore
from .asset_store import (
    AssetStore,
    FileAssetStore,
    StoredAsset,
    role_asset_key,
    part_asset_key,
)

__all__ = [
    "JobEvent",
    "JobEventBus",
    "JobStore",
    "AssetStore",
    "FileAssetStore",
    "StoredAsset",
    "role_asset_key",
    "part_asset_key",
]
