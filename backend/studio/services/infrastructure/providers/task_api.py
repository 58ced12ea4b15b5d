"""
Task API provider adapter - generic createTask / recordInfo REST service.

    POST {base}/createTask            -> {"data": {"taskId": ...}}
    GET  {base}/recordInfo?taskId=... -> {"data": {"state": "success" | "fail" | ...,
                                                   "resultJson": "{\"resultUrls\": [...]}",
                                                   "failMsg": ...}}

This service offers no server-side deadline, so each task gets a wait budget
measured from submission; past it the task fails permanently.
"""

import base64
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from studio.config import ProviderSettings
from studio.core import AssetNotFoundError, DispatchError, ProviderConfigurationError, get_logger
from studio.models import PartSpec, TaskHandle, parse_iso

from ..storage import AssetStore
from .base import (
    ErrorClassification,
    MediaPayload,
    PollFailed,
    PollPending,
    PollResult,
    PollSucceeded,
    ProviderAdapter,
    download_http_media,
    poll_failure_from_exception,
)

logger = get_logger(__name__, component="task_api_provider")

TIMEOUT_MESSAGE = "Generation timed out."
UNKNOWN_FAILURE_MESSAGE = "Unknown error during generation."


def _result_url(record: Dict[str, Any]) -> Optional[str]:
    result = record.get("resultJson")
    if isinstance(result, str):
        try:
            result = json.loads(result) if result else {}
        except ValueError:
            return None
    if not isinstance(result, dict):
        return None
    urls = result.get("resultUrls") or []
    return urls[0] if urls else None


class TaskApiProviderAdapter(ProviderAdapter):
    """Adapter for bearer-token task APIs (createTask / recordInfo)."""

    name = "task_api"

    def __init__(
        self,
        settings: ProviderSettings,
        asset_store: AssetStore,
        http_client: Optional[httpx.AsyncClient] = None,
        request_timeout: float = 60.0,
    ):
        if not settings.task_api_base_url or not settings.task_api_key:
            raise ProviderConfigurationError(
                "TASK_API_BASE_URL and TASK_API_KEY are required when GENERATION_PROVIDER=task_api"
            )
        self.settings = settings
        self.asset_store = asset_store
        self.base_url = settings.task_api_base_url.rstrip("/")
        self.max_wait_seconds = settings.task_api_max_wait_seconds
        self._http_client = http_client or httpx.AsyncClient(timeout=request_timeout, follow_redirects=True)
        self._owns_http_client = http_client is None

    @property
    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.settings.task_api_key}"}

    def _build_input(self, part: PartSpec) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "prompt": part.prompt,
            "aspect_ratio": "portrait" if part.aspect_ratio == "9:16" else "landscape",
        }
        if part.n_frames:
            payload["n_frames"] = str(part.n_frames)
        if part.image_key:
            stored = self.asset_store.get_with_type(part.image_key)
            mime = part.image_mime_type or stored.content_type
            payload["image_urls"] = [f"data:{mime};base64,{base64.b64encode(stored.data).decode('ascii')}"]
        return payload

    async def create_task(self, part: PartSpec) -> TaskHandle:
        try:
            body = {"model": part.model, "input": self._build_input(part)}
            response = await self._http_client.post(
                f"{self.base_url}/createTask",
                json=body,
                headers=self._auth_headers,
            )
        except AssetNotFoundError as exc:
            raise DispatchError(f"Reference image missing for part {part.index + 1}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise DispatchError(f"API Error: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.is_error:
            message = payload.get("msg") if isinstance(payload, dict) else None
            raise DispatchError(f"API Error: {message or response.reason_phrase}")

        task_id = (payload.get("data") or {}).get("taskId") if isinstance(payload, dict) else None
        if not task_id:
            raise DispatchError(f"API did not return a valid task ID. Response: {json.dumps(payload)}")

        logger.info("Task API task created", extra={"task_id": task_id, "model": part.model, "part_index": part.index})
        return TaskHandle(name=str(task_id))

    def _budget_exhausted(self, handle: TaskHandle) -> bool:
        submitted = parse_iso(handle.submitted_at)
        if submitted is None:
            return False
        waited = (datetime.now(timezone.utc) - submitted).total_seconds()
        return waited > self.max_wait_seconds

    async def poll_task(self, handle: TaskHandle) -> PollResult:
        if self._budget_exhausted(handle):
            return PollFailed(TIMEOUT_MESSAGE, ErrorClassification.PERMANENT)

        try:
            response = await self._http_client.get(
                f"{self.base_url}/recordInfo",
                params={"taskId": handle.name},
                headers=self._auth_headers,
            )
            response.raise_for_status()
            record = (response.json() or {}).get("data") or {}
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            failure = poll_failure_from_exception(exc)
            logger.warning(
                "Task API poll error",
                extra={"task_id": handle.name, "classification": failure.classification.value, "error": str(exc)},
            )
            return failure

        if not isinstance(record, dict):
            logger.warning("Task API returned an unreadable record", extra={"task_id": handle.name})
            return PollPending()

        state = record.get("state")
        if state == "success":
            return PollSucceeded(_result_url(record))
        if state == "fail":
            return PollFailed(record.get("failMsg") or UNKNOWN_FAILURE_MESSAGE, ErrorClassification.PERMANENT)
        return PollPending()

    async def fetch_media(self, location: str) -> MediaPayload:
        return await download_http_media(self._http_client, location)

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()
