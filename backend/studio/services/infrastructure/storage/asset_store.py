"""
Asset store - durable key -> binary blob storage.

Job records only ever hold asset keys; reference images and finished video
parts live here. Keys are chosen by the caller:

    {job_id}_{role}        single named assets (thumbnail, productImage, ...)
    {job_id}_{part_index}  finished media for one part
"""

from __future__ import annotations

import json
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from threading import RLock
from typing import List, Optional, Union

from studio.core import AssetNotFoundError, InvalidAssetKeyError, get_logger, sniff_content_type

logger = get_logger(__name__, component="asset_store")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def role_asset_key(job_id: str, role: str) -> str:
    return f"{job_id}_{role}"


def part_asset_key(job_id: str, part_index: int) -> str:
    return f"{job_id}_{part_index}"


@dataclass
class StoredAsset:
    key: str
    data: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)


class AssetStore(ABC):
    """Abstract blob storage addressed by caller-chosen keys."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def get_with_type(self, key: str) -> StoredAsset:
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        pass

    def get(self, key: str) -> bytes:
        return self.get_with_type(key).data

    def delete_prefix(self, job_id: str) -> int:
        """Delete every asset belonging to ``job_id``; returns how many were removed."""
        prefix = f"{job_id}_"
        removed = 0
        for key in self.keys():
            if key.startswith(prefix) and self.delete(key):
                removed += 1
        return removed


class FileAssetStore(AssetStore):
    """One file per blob plus a small JSON sidecar for the content type."""
    _SAFE_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,200}$")
    _META_SUFFIX = ".meta.json"

    def __init__(self, root_dir: Union[str, Path]):
        self.root_dir = Path(root_dir).resolve()
        self.root_dir.mkdir(parents=True, exist_ok=True)
        self._lock = RLock()

    def _blob_path(self, key: str) -> Path:
        if not isinstance(key, str) or not self._SAFE_KEY_PATTERN.fullmatch(key) or key.endswith(self._META_SUFFIX):
            raise InvalidAssetKeyError(key)
        target = (self.root_dir / key).resolve()
        if target.parent != self.root_dir:
            raise InvalidAssetKeyError(key)
        return target

    def _meta_path(self, blob: Path) -> Path:
        return blob.with_name(blob.name + self._META_SUFFIX)

    @staticmethod
    def _write_atomic(target: Path, data: bytes) -> None:
        tmp = target.with_name(f".{target.name}.tmp")
        with open(tmp, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, target)

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> None:
        """Store or overwrite a blob."""
        blob = self._blob_path(key)
        content_type = content_type or sniff_content_type(data, DEFAULT_CONTENT_TYPE)
        meta = json.dumps({"content_type": content_type, "size": len(data)}).encode("utf-8")
        with self._lock:
            self._write_atomic(blob, data)
            self._write_atomic(self._meta_path(blob), meta)
        logger.debug("Asset stored", extra={"asset_key": key, "size_bytes": len(data), "content_type": content_type})

    def get_with_type(self, key: str) -> StoredAsset:
        blob = self._blob_path(key)
        with self._lock:
            if not blob.is_file():
                raise AssetNotFoundError(key)
            data = blob.read_bytes()
            content_type = None
            meta = self._meta_path(blob)
            if meta.is_file():
                try:
                    content_type = json.loads(meta.read_text(encoding="utf-8")).get("content_type")
                except (OSError, ValueError) as exc:
                    logger.warning("Unreadable asset metadata", extra={"asset_key": key, "error": str(exc)})
        return StoredAsset(key=key, data=data, content_type=content_type or sniff_content_type(data, DEFAULT_CONTENT_TYPE))

    def exists(self, key: str) -> bool:
        try:
            return self._blob_path(key).is_file()
        except InvalidAssetKeyError:
            return False

    def delete(self, key: str) -> bool:
        blob = self._blob_path(key)
        with self._lock:
            if not blob.is_file():
                return False
            blob.unlink()
            self._meta_path(blob).unlink(missing_ok=True)
        return True

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(
                path.name
                for path in self.root_dir.iterdir()
                if path.is_file()
                and not path.name.startswith(".")
                and not path.name.endswith(self._META_SUFFIX)
            )
