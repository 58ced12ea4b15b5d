"""
Tests for studio.services.infrastructure.providers.veo

The google-genai client is replaced with a MagicMock; the SDK's request types
are real.
"""

import base64
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest

from studio.config import ProviderSettings
from studio.core import DispatchError, DownloadError, ProviderConfigurationError
from studio.models import PartSpec, TaskHandle
from studio.services.infrastructure.providers import (
    OPERATION_EXPIRED_MESSAGE,
    PollFailed,
    PollPending,
    PollSucceeded,
    VeoProviderAdapter,
)

PNG = b"\x89PNG\r\n\x1a\n" + b"\x02" * 16


def _operation(done=True, error=None, videos=None):
    response = SimpleNamespace(generated_videos=videos) if videos is not None else None
    return SimpleNamespace(name="models/veo/operations/op-1", done=done, error=error, response=response)


def _video(uri=None, video_bytes=None, mime_type=None):
    return SimpleNamespace(video=SimpleNamespace(uri=uri, video_bytes=video_bytes, mime_type=mime_type))


@pytest.fixture
def settings():
    return ProviderSettings(gemini_api_key="mock-key")


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def adapter(settings, asset_store, client):
    return VeoProviderAdapter(settings, asset_store, client=client)


def _part(**overrides):
    values = dict(index=0, total=1, prompt="A sunrise", model="veo-3.1-generate-preview", aspect_ratio="16:9", resolution="720p")
    values.update(overrides)
    return PartSpec(**values)


class TestCreateTask:
    @pytest.mark.asyncio
    async def test_returns_operation_name(self, adapter, client):
        client.models.generate_videos.return_value = SimpleNamespace(name="models/veo/operations/op-1")

        handle = await adapter.create_task(_part())

        assert handle.name == "models/veo/operations/op-1"
        kwargs = client.models.generate_videos.call_args.kwargs
        assert kwargs["model"] == "veo-3.1-generate-preview"
        assert kwargs["prompt"] == "A sunrise"
        assert kwargs["image"] is None
        assert kwargs["config"].aspect_ratio == "16:9"
        assert kwargs["config"].number_of_videos == 1

    @pytest.mark.asyncio
    async def test_reference_image_loaded_from_asset_store(self, adapter, client, asset_store):
        asset_store.put("promo_1_referenceImage", PNG, "image/png")
        client.models.generate_videos.return_value = SimpleNamespace(name="op-2")

        await adapter.create_task(_part(image_key="promo_1_referenceImage", image_mime_type="image/png"))

        image = client.models.generate_videos.call_args.kwargs["image"]
        assert image.image_bytes == PNG
        assert image.mime_type == "image/png"

    @pytest.mark.asyncio
    async def test_missing_reference_image(self, adapter):
        with pytest.raises(DispatchError, match="Reference image missing for part 1"):
            await adapter.create_task(_part(image_key="promo_1_referenceImage"))

    @pytest.mark.asyncio
    async def test_provider_rejection(self, adapter, client):
        client.models.generate_videos.side_effect = RuntimeError("400 INVALID_ARGUMENT: prompt blocked")

        with pytest.raises(DispatchError, match="prompt blocked"):
            await adapter.create_task(_part())

    @pytest.mark.asyncio
    async def test_operation_without_name(self, adapter, client):
        client.models.generate_videos.return_value = SimpleNamespace(name=None)

        with pytest.raises(DispatchError):
            await adapter.create_task(_part())


class TestPollTask:
    @pytest.mark.asyncio
    async def test_pending(self, adapter, client):
        client.operations.get.return_value = _operation(done=False)

        assert await adapter.poll_task(TaskHandle("op-1")) == PollPending()
        sent = client.operations.get.call_args.args[0]
        assert sent.name == "op-1"

    @pytest.mark.asyncio
    async def test_succeeded_with_uri(self, adapter, client):
        client.operations.get.return_value = _operation(videos=[_video(uri="https://files.example.com/v.mp4")])

        assert await adapter.poll_task(TaskHandle("op-1")) == PollSucceeded("https://files.example.com/v.mp4")

    @pytest.mark.asyncio
    async def test_inline_bytes_become_data_url(self, adapter, client):
        client.operations.get.return_value = _operation(videos=[_video(video_bytes=b"mp4", mime_type="video/mp4")])

        result = await adapter.poll_task(TaskHandle("op-1"))

        assert result.location == "data:video/mp4;base64," + base64.b64encode(b"mp4").decode()

    @pytest.mark.asyncio
    async def test_done_without_video(self, adapter, client):
        client.operations.get.return_value = _operation(videos=[])

        assert await adapter.poll_task(TaskHandle("op-1")) == PollSucceeded(None)

    @pytest.mark.asyncio
    async def test_operation_error(self, adapter, client):
        client.operations.get.return_value = _operation(error={"code": 3, "message": "Video violates policy"})

        result = await adapter.poll_task(TaskHandle("op-1"))

        assert result == PollFailed("Video violates policy")
        assert not result.is_transient

    @pytest.mark.asyncio
    async def test_transient_sdk_error(self, adapter, client):
        client.operations.get.side_effect = RuntimeError("503 UNAVAILABLE")

        result = await adapter.poll_task(TaskHandle("op-1"))

        assert result.is_transient

    @pytest.mark.asyncio
    async def test_expired_operation(self, adapter, client):
        client.operations.get.side_effect = RuntimeError("404 NOT_FOUND. Requested entity was not found.")

        result = await adapter.poll_task(TaskHandle("op-1"))

        assert result == PollFailed(OPERATION_EXPIRED_MESSAGE)


class TestFetchMedia:
    @pytest.mark.asyncio
    async def test_data_url(self, adapter):
        payload = await adapter.fetch_media("data:video/mp4;base64," + base64.b64encode(b"inline").decode())

        assert payload.data == b"inline"
        assert payload.declared_length == len(b"inline")
        assert payload.content_type == "video/mp4"

    @pytest.mark.asyncio
    async def test_bad_data_url(self, adapter):
        with pytest.raises(DownloadError):
            await adapter.fetch_media("data:video/mp4;base64,***")

    @pytest.mark.asyncio
    async def test_download_sends_api_key(self, settings, asset_store, client):
        seen = {}

        def handler(request):
            seen["key"] = request.headers.get("x-goog-api-key")
            return httpx.Response(200, content=b"remote", headers={"content-type": "video/mp4"})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        adapter = VeoProviderAdapter(settings, asset_store, client=client, http_client=http_client)

        payload = await adapter.fetch_media("https://files.example.com/v.mp4")

        assert payload.data == b"remote"
        assert seen["key"] == "mock-key"
        await adapter.aclose()
        assert not http_client.is_closed
        await http_client.aclose()


class TestClientConstruction:
    def test_missing_api_key(self, asset_store):
        adapter = VeoProviderAdapter(ProviderSettings(gemini_api_key=None), asset_store)

        with pytest.raises(ProviderConfigurationError, match="GEMINI_API_KEY"):
            _ = adapter.client

    def test_vertex_requires_project(self, asset_store):
        adapter = VeoProviderAdapter(ProviderSettings(use_vertex_ai=True), asset_store)

        with pytest.raises(ProviderConfigurationError, match="GCP_PROJECT_ID"):
            _ = adapter.client

    def test_vertex_client(self, asset_store):
        settings = ProviderSettings(use_vertex_ai=True, gcp_project_id="proj", gcp_location="europe-west4")

        with patch("studio.services.infrastructure.providers.veo.genai.Client") as client_cls:
            _ = VeoProviderAdapter(settings, asset_store).client

        client_cls.assert_called_once_with(vertexai=True, project="proj", location="europe-west4")
