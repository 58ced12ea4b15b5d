"""
Veo provider adapter - video generation through the Google GenAI SDK.

Works with both backends supported by ``google-genai``:
1. Gemini API (GEMINI_API_KEY)
2. Vertex AI (USE_VERTEX_AI=true, GCP_PROJECT_ID, GCP_LOCATION)

The SDK is synchronous, so every call runs in a worker thread. Long-running
operations are stored on the job only by name; polling rebuilds a bare
``GenerateVideosOperation`` from that name.
"""

import asyncio
import base64
from typing import Any, Optional

import httpx
from google import genai
from google.genai import types

from studio.config import ProviderSettings
from studio.core import (
    AssetNotFoundError,
    DispatchError,
    DownloadError,
    ProviderConfigurationError,
    decode_data_url,
    get_logger,
)
from studio.models import PartSpec, TaskHandle

from ..storage import AssetStore
from .base import (
    MediaPayload,
    PollFailed,
    PollPending,
    PollResult,
    PollSucceeded,
    ProviderAdapter,
    download_http_media,
    poll_failure_from_exception,
)

logger = get_logger(__name__, component="veo_provider")


def _operation_error_message(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return str(getattr(error, "message", None) or error)


def _inline_video_location(video: Any) -> Optional[str]:
    video_bytes = getattr(video, "video_bytes", None)
    if not video_bytes:
        return None
    mime_type = getattr(video, "mime_type", None) or "video/mp4"
    return f"data:{mime_type};base64,{base64.b64encode(video_bytes).decode('ascii')}"


class VeoProviderAdapter(ProviderAdapter):
    """
    Google Veo adapter.

    Usage:
        adapter = VeoProviderAdapter(ProviderSettings.from_env(), asset_store)
        handle = await adapter.create_task(part)
        result = await adapter.poll_task(handle)
    """

    name = "veo"

    def __init__(
        self,
        settings: ProviderSettings,
        asset_store: AssetStore,
        client: Optional[genai.Client] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        download_timeout: float = 120.0,
    ):
        self.settings = settings
        self.asset_store = asset_store
        self._client = client
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._download_timeout = download_timeout

    @property
    def client(self) -> genai.Client:
        """SDK client, created on first use so the service can start without credentials."""
        if self._client is None:
            self._client = self._build_client()
        return self._client

    def _build_client(self) -> genai.Client:
        if self.settings.use_vertex_ai:
            if not self.settings.gcp_project_id:
                raise ProviderConfigurationError("GCP_PROJECT_ID environment variable is required when USE_VERTEX_AI=true")
            logger.info(
                "Using Vertex AI backend for Veo",
                extra={"gcp_project": self.settings.gcp_project_id, "gcp_location": self.settings.gcp_location},
            )
            return genai.Client(
                vertexai=True,
                project=self.settings.gcp_project_id,
                location=self.settings.gcp_location,
            )

        if not self.settings.gemini_api_key:
            raise ProviderConfigurationError("GEMINI_API_KEY environment variable is required when USE_VERTEX_AI=false")
        return genai.Client(api_key=self.settings.gemini_api_key)

    def _http(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._download_timeout, follow_redirects=True)
        return self._http_client

    def _reference_image(self, part: PartSpec) -> Optional[types.Image]:
        if not part.image_key:
            return None
        stored = self.asset_store.get_with_type(part.image_key)
        return types.Image(
            image_bytes=stored.data,
            mime_type=part.image_mime_type or stored.content_type,
        )

    async def create_task(self, part: PartSpec) -> TaskHandle:
        try:
            image = self._reference_image(part)
            config = types.GenerateVideosConfig(
                number_of_videos=1,
                aspect_ratio=part.aspect_ratio,
                resolution=part.resolution,
            )
            operation = await asyncio.to_thread(
                self.client.models.generate_videos,
                model=part.model,
                prompt=part.prompt,
                image=image,
                config=config,
            )
        except AssetNotFoundError as exc:
            raise DispatchError(f"Reference image missing for part {part.index + 1}: {exc}") from exc
        except Exception as exc:
            raise DispatchError(str(exc) or exc.__class__.__name__) from exc

        if not getattr(operation, "name", None):
            raise DispatchError("Provider did not return an operation name.")

        logger.info(
            "Veo task created",
            extra={"operation": operation.name, "model": part.model, "part_index": part.index},
        )
        return TaskHandle(name=operation.name)

    async def poll_task(self, handle: TaskHandle) -> PollResult:
        try:
            operation = await asyncio.to_thread(
                self.client.operations.get,
                types.GenerateVideosOperation(name=handle.name),
            )
        except Exception as exc:
            failure = poll_failure_from_exception(exc)
            log = logger.warning if failure.is_transient else logger.error
            log(
                "Veo poll error",
                extra={"operation": handle.name, "classification": failure.classification.value, "error": str(exc)},
            )
            return failure

        if not operation.done:
            return PollPending()

        if operation.error:
            return PollFailed(_operation_error_message(operation.error))

        response = operation.response or getattr(operation, "result", None)
        videos = getattr(response, "generated_videos", None) or []
        video = videos[0].video if videos and videos[0].video else None
        if video is None:
            return PollSucceeded(None)
        return PollSucceeded(video.uri or _inline_video_location(video))

    async def fetch_media(self, location: str) -> MediaPayload:
        if location.startswith("data:"):
            try:
                data, mime = decode_data_url(location, "video/mp4")
            except ValueError as exc:
                raise DownloadError(str(exc)) from exc
            return MediaPayload(data=data, declared_length=len(data), content_type=mime)

        headers = {}
        if self.settings.gemini_api_key and not self.settings.use_vertex_ai:
            headers["x-goog-api-key"] = self.settings.gemini_api_key

        return await download_http_media(self._http(), location, headers)

    async def aclose(self) -> None:
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
