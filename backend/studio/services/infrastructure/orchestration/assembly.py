"""
Media assembly - downloading finished parts into the asset store.

Each succeeded part is fetched with a bounded number of attempts and a fixed
delay between them. A part whose download never validates ends up as a null
slot; it does not fail the other parts.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from studio.core import DownloadError, LogTimer, get_logger
from studio.models import Job

from ..providers import MediaPayload, PollSucceeded, ProviderAdapter
from ..storage import AssetStore, part_asset_key

logger = get_logger(__name__, component="media_assembler")


def validate_payload(payload: MediaPayload) -> None:
    """Raise DownloadError unless the payload is non-empty and matches its declared length."""
    if not payload.data:
        raise DownloadError("Downloaded media is empty")
    if payload.declared_length is not None and len(payload.data) != payload.declared_length:
        raise DownloadError(
            f"Downloaded {len(payload.data)} bytes but {payload.declared_length} were declared"
        )


class MediaAssembler:
    def __init__(
        self,
        asset_store: AssetStore,
        provider: ProviderAdapter,
        attempts: int = 3,
        retry_delay: float = 2.0,
    ):
        self.asset_store = asset_store
        self.provider = provider
        self.attempts = max(1, attempts)
        self.retry_delay = max(0.0, retry_delay)

    async def download(self, location: str) -> MediaPayload:
        """Fetch and validate ``location``; raises DownloadError once every attempt failed.

        Any error from the provider counts as a failed attempt, so a bad
        location ends as a null slot instead of stalling the job.
        """
        last_error: Optional[Exception] = None
        for attempt in range(1, self.attempts + 1):
            try:
                payload = await self.provider.fetch_media(location)
                validate_payload(payload)
                return payload
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "Media download attempt failed",
                    extra={
                        "attempt": attempt,
                        "max_attempts": self.attempts,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                )
            if attempt < self.attempts:
                await asyncio.sleep(self.retry_delay)

        raise DownloadError(f"Download failed after {self.attempts} attempts: {last_error}")

    async def _store_part(self, job: Job, index: int, outcome: PollSucceeded) -> Optional[str]:
        if not outcome.location:
            logger.warning("Part finished without media", extra={"part_index": index})
            return None

        try:
            payload = await self.download(outcome.location)
        except DownloadError as exc:
            logger.error("Part download exhausted", extra={"part_index": index, "error": str(exc)})
            return None

        key = part_asset_key(job.id, index)
        self.asset_store.put(key, payload.data, payload.content_type)
        logger.info("Part stored", extra={"part_index": index, "asset_key": key, "size_bytes": len(payload.data)})
        return key

    async def assemble(self, job: Job, outcomes: Sequence[PollSucceeded]) -> List[Optional[str]]:
        """Store every part's media; returns one result key (or None) per part."""
        if len(outcomes) != len(job.parts):
            raise ValueError(f"Job {job.id} has {len(job.parts)} parts but {len(outcomes)} outcomes")

        with LogTimer(logger, f"assemble {len(outcomes)} parts", level=logging.DEBUG):
            return list(
                await asyncio.gather(
                    *(self._store_part(job, index, outcome) for index, outcome in enumerate(outcomes))
                )
            )
