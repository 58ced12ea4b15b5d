"""
Provider adapter interface.

A provider adapter wraps one remote generation service. The orchestrator
only ever talks to this interface:

    create_task(part)      -> TaskHandle          (raises DispatchError)
    poll_task(handle)      -> PollPending | PollSucceeded | PollFailed
    fetch_media(location)  -> MediaPayload        (raises DownloadError)

Poll failures are classified so that transient provider trouble is retried on
the next sweep instead of failing the job.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

import httpx

from studio.core import DownloadError
from studio.models import PartSpec, TaskHandle

TRANSIENT_SIGNATURES = ("500", "503", "internal", "server error")
NOT_FOUND_SIGNATURES = ("not found", "404")

OPERATION_EXPIRED_MESSAGE = "Operation not found or expired."
INVALID_HANDLE_MESSAGE = "Invalid operation data in job."


class ErrorClassification(str, Enum):
    TRANSIENT = "transient"
    PERMANENT = "permanent"


@dataclass(frozen=True)
class PollPending:
    """Task has not finished yet."""


@dataclass(frozen=True)
class PollSucceeded:
    """Task finished. ``location`` is None when the provider returned no media."""
    location: Optional[str] = None


@dataclass(frozen=True)
class PollFailed:
    reason: str
    classification: ErrorClassification = ErrorClassification.PERMANENT

    @property
    def is_transient(self) -> bool:
        return self.classification == ErrorClassification.TRANSIENT


PollResult = Union[PollPending, PollSucceeded, PollFailed]


@dataclass
class MediaPayload:
    data: bytes
    declared_length: Optional[int] = None
    content_type: Optional[str] = None


def _error_text(error: Union[BaseException, str]) -> str:
    if isinstance(error, BaseException):
        return str(error) or error.__class__.__name__
    return str(error)


def classify_error(error: Union[BaseException, str]) -> ErrorClassification:
    """Transient for network trouble and provider 5xx signatures, permanent otherwise."""
    if isinstance(error, (httpx.TransportError, ConnectionError, TimeoutError, asyncio.TimeoutError)):
        return ErrorClassification.TRANSIENT
    if isinstance(error, httpx.HTTPStatusError) and error.response.status_code >= 500:
        return ErrorClassification.TRANSIENT

    message = _error_text(error).lower()
    if any(signature in message for signature in TRANSIENT_SIGNATURES):
        return ErrorClassification.TRANSIENT
    return ErrorClassification.PERMANENT


def poll_failure_from_exception(error: Union[BaseException, str]) -> PollFailed:
    """Normalize an exception raised while polling into a classified ``PollFailed``."""
    message = _error_text(error)
    if classify_error(error) == ErrorClassification.TRANSIENT:
        return PollFailed(message, ErrorClassification.TRANSIENT)

    lowered = message.lower()
    if any(signature in lowered for signature in NOT_FOUND_SIGNATURES):
        return PollFailed(OPERATION_EXPIRED_MESSAGE, ErrorClassification.PERMANENT)
    return PollFailed(f"Polling failed: {message}", ErrorClassification.PERMANENT)


class ProviderAdapter(ABC):
    """Abstract remote generation service."""

    name: str = "provider"

    @abstractmethod
    async def create_task(self, part: PartSpec) -> TaskHandle:
        """Submit one part. Raises DispatchError when the provider rejects it."""

    @abstractmethod
    async def poll_task(self, handle: TaskHandle) -> PollResult:
        """Normalized status of one task. Must not raise for provider errors."""

    @abstractmethod
    async def fetch_media(self, location: str) -> MediaPayload:
        """Download finished media. Raises DownloadError on any failure."""

    async def aclose(self) -> None:
        """Release network resources held by the adapter."""
        return None


async def download_http_media(
    http_client: httpx.AsyncClient,
    location: str,
    headers: Optional[Dict[str, str]] = None,
) -> MediaPayload:
    """GET ``location`` and wrap the body; raises DownloadError on URL, transport or HTTP errors."""
    try:
        response = await http_client.get(location, headers=headers or {})
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise DownloadError(f"Failed to download generated media: {exc}") from exc

    # Content-Length counts encoded bytes; httpx hands back decoded content
    declared = None if response.headers.get("content-encoding") else response.headers.get("content-length")
    return MediaPayload(
        data=response.content,
        declared_length=int(declared) if declared and declared.isdigit() else None,
        content_type=response.headers.get("content-type"),
    )
