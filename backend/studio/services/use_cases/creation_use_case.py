"""
Creation use cases - submitting jobs and presenting them to clients.

Submission is the only place a job is written from outside the orchestrator:
images are moved into the asset store under ``{job_id}_{role}`` keys, the
details payload is decomposed into parts once, and the job is stored as
``pending``. From then on only the orchestrator mutates it.
"""

import uuid
from typing import List, Optional, Tuple

from studio.config import MAX_IMAGE_BYTES, ProviderSettings
from studio.core import InvalidCreationRequestError, decode_data_url, get_logger
from studio.models import (
    CreationRequest,
    CreationResponse,
    Job,
    JobKind,
    PromoVideoCreationRequest,
    PromoVideoDetails,
    PromptLine,
    ScriptLine,
    UgcVideoCreationRequest,
    UgcVideoDetails,
)
from studio.services.infrastructure.storage import AssetStore, JobStore, role_asset_key

from .base import UseCase

logger = get_logger(__name__, component="creation_use_case")

ASSET_URL_PREFIX = "/assets"
TITLE_LENGTH = 50


def asset_url(key: Optional[str]) -> Optional[str]:
    return f"{ASSET_URL_PREFIX}/{key}" if key else None


def job_to_response(job: Job) -> CreationResponse:
    """Client view of a job; asset keys resolve to asset URLs."""
    return CreationResponse(
        job_id=job.id,
        kind=job.kind.value,
        title=job.title,
        status=job.status.value,
        created_at=job.created_at,
        updated_at=job.updated_at,
        part_count=len(job.parts),
        result_urls=[asset_url(key) for key in (job.result_keys or [])],
        thumbnail_url=asset_url(job.thumbnail_key),
        error=job.error,
    )


def make_title(requested: Optional[str], text: str) -> str:
    if requested and requested.strip():
        return requested.strip()
    return text[:TITLE_LENGTH] + "..."


class SubmitCreationUseCase(UseCase[CreationRequest, CreationResponse]):
    """Validate a creation request, store its images and enqueue a pending job."""

    def __init__(
        self,
        job_store: JobStore,
        asset_store: AssetStore,
        provider_settings: Optional[ProviderSettings] = None,
    ):
        self.job_store = job_store
        self.asset_store = asset_store
        self.provider_settings = provider_settings or ProviderSettings.from_env()

    def _store_image(self, job_id: str, role: str, payload: str) -> Tuple[str, str]:
        try:
            data, mime_type = decode_data_url(payload)
        except ValueError as exc:
            raise InvalidCreationRequestError(f"Invalid {role}: {exc}") from exc
        if len(data) > MAX_IMAGE_BYTES:
            raise InvalidCreationRequestError(
                f"{role} is too large ({len(data)} bytes, limit {MAX_IMAGE_BYTES})"
            )
        key = role_asset_key(job_id, role)
        self.asset_store.put(key, data, mime_type)
        return key, mime_type

    def _build_ugc(self, job_id: str, request: UgcVideoCreationRequest) -> Job:
        product_key, product_mime = self._store_image(job_id, "productImage", request.product_image)
        thumbnail_key, _ = self._store_image(job_id, "thumbnail", request.product_image)
        logo_key, logo_mime = (None, None)
        if request.logo_image:
            logo_key, logo_mime = self._store_image(job_id, "logoImage", request.logo_image)

        details = UgcVideoDetails(
            scripts=[ScriptLine(script=s.script, part=s.part, total=s.total) for s in request.scripts],
            persona_description=request.persona_description,
            interaction=request.interaction,
            vibe=request.vibe,
            setting=request.setting,
            product_description=request.product_description,
            gender=request.gender,
            aspect_ratio=request.aspect_ratio,
            video_prompt=request.video_prompt,
            product_image_key=product_key,
            product_image_mime_type=product_mime,
            logo_image_key=logo_key,
            logo_mime_type=logo_mime,
            n_frames=request.n_frames,
        )
        model = self.provider_settings.model_for_kind(JobKind.UGC_VIDEO.value)
        return Job(
            id=job_id,
            kind=JobKind.UGC_VIDEO,
            details=details,
            parts=details.build_parts(model),
            title=make_title(request.title, request.scripts[0].script),
            thumbnail_key=thumbnail_key,
        )

    def _build_promo(self, job_id: str, request: PromoVideoCreationRequest) -> Job:
        reference_key, reference_mime, thumbnail_key = (None, None, None)
        if request.reference_image:
            reference_key, reference_mime = self._store_image(job_id, "referenceImage", request.reference_image)
            thumbnail_key, _ = self._store_image(job_id, "thumbnail", request.reference_image)

        is_image_to_video = reference_key is not None
        details = PromoVideoDetails(
            prompts=[PromptLine(prompt=p.prompt, part=p.part, total=p.total) for p in request.prompts],
            aspect_ratio=request.aspect_ratio,
            video_style=None if is_image_to_video else request.video_style,
            pacing=None if is_image_to_video else request.pacing,
            n_frames=request.n_frames,
            is_image_to_video=is_image_to_video,
            reference_image_key=reference_key,
            reference_image_mime_type=reference_mime,
        )
        model = self.provider_settings.model_for_kind(JobKind.PROMO_VIDEO.value)
        return Job(
            id=job_id,
            kind=JobKind.PROMO_VIDEO,
            details=details,
            parts=details.build_parts(model, self.provider_settings.video_resolution),
            title=make_title(request.title, request.prompts[0].prompt),
            thumbnail_key=thumbnail_key,
        )

    async def execute(self, request: CreationRequest) -> CreationResponse:
        kind = JobKind(request.kind)
        job_id = f"{kind.id_prefix}_{uuid.uuid4().hex}"
        try:
            if isinstance(request, UgcVideoCreationRequest):
                job = self._build_ugc(job_id, request)
            else:
                job = self._build_promo(job_id, request)
            if not job.parts:
                raise InvalidCreationRequestError("A creation needs at least one part")
            self.job_store.create(job)
        except Exception:
            self.asset_store.delete_prefix(job_id)
            raise

        logger.info("Creation submitted", extra={"submitted_job_id": job.id, "kind": kind.value, "parts": len(job.parts)})
        return job_to_response(job)


class CreationQueries:
    """Read side for clients, plus user-initiated deletion."""

    def __init__(self, job_store: JobStore, asset_store: AssetStore):
        self.job_store = job_store
        self.asset_store = asset_store

    def list(self) -> List[CreationResponse]:
        return [job_to_response(job) for job in self.job_store.list()]

    def get(self, job_id: str) -> CreationResponse:
        return job_to_response(self.job_store.get(job_id))

    def delete(self, job_id: str) -> bool:
        """Remove a job record and every asset it owns; False when it did not exist."""
        deleted = self.job_store.delete(job_id)
        if deleted:
            removed = self.asset_store.delete_prefix(job_id)
            logger.info("Creation deleted", extra={"deleted_job_id": job_id, "assets_removed": removed})
        return deleted
