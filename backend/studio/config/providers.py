"""
Generation provider configuration

Set GENERATION_PROVIDER to choose which remote service turns job parts into video:
    - "veo"      : Google Veo through the google-genai SDK (default)
                   Uses GEMINI_API_KEY, or Vertex AI when USE_VERTEX_AI=true
                   (requires GCP_PROJECT_ID, optional GCP_LOCATION)
    - "task_api" : Generic createTask/recordInfo REST API
                   (requires TASK_API_BASE_URL and TASK_API_KEY)

Model names per job kind can be overridden with VEO_UGC_MODEL / VEO_PROMO_MODEL.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from studio.core.runtime import env_float, parse_bool_env


class GenerationProviderType(str, Enum):
    """Supported generation providers"""
    VEO = "veo"
    TASK_API = "task_api"


DEFAULT_VEO_UGC_MODEL = "veo-3.1-fast-generate-preview"
DEFAULT_VEO_PROMO_MODEL = "veo-3.1-generate-preview"
DEFAULT_VIDEO_RESOLUTION = "720p"
DEFAULT_TASK_API_MODEL = "sora-2-image-to-video"
DEFAULT_TASK_API_MAX_WAIT_SECONDS = 120.0


def get_active_provider() -> GenerationProviderType:
    """Get the configured provider; unknown values fall back to Veo."""
    raw = os.getenv("GENERATION_PROVIDER", "").strip().lower()
    try:
        return GenerationProviderType(raw)
    except ValueError:
        return GenerationProviderType.VEO


@dataclass
class ProviderSettings:
    """Resolved provider settings, read from the environment at call time."""
    provider: GenerationProviderType = GenerationProviderType.VEO
    gemini_api_key: Optional[str] = None
    use_vertex_ai: bool = False
    gcp_project_id: Optional[str] = None
    gcp_location: str = "us-central1"
    veo_ugc_model: str = DEFAULT_VEO_UGC_MODEL
    veo_promo_model: str = DEFAULT_VEO_PROMO_MODEL
    video_resolution: str = DEFAULT_VIDEO_RESOLUTION
    task_api_base_url: Optional[str] = None
    task_api_key: Optional[str] = None
    task_api_model: str = DEFAULT_TASK_API_MODEL
    task_api_max_wait_seconds: float = DEFAULT_TASK_API_MAX_WAIT_SECONDS

    @classmethod
    def from_env(cls) -> "ProviderSettings":
        return cls(
            provider=get_active_provider(),
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            use_vertex_ai=parse_bool_env(os.getenv("USE_VERTEX_AI")),
            gcp_project_id=os.getenv("GCP_PROJECT_ID"),
            gcp_location=os.getenv("GCP_LOCATION", "us-central1"),
            veo_ugc_model=os.getenv("VEO_UGC_MODEL", DEFAULT_VEO_UGC_MODEL),
            veo_promo_model=os.getenv("VEO_PROMO_MODEL", DEFAULT_VEO_PROMO_MODEL),
            video_resolution=os.getenv("VIDEO_RESOLUTION", DEFAULT_VIDEO_RESOLUTION),
            task_api_base_url=os.getenv("TASK_API_BASE_URL"),
            task_api_key=os.getenv("TASK_API_KEY"),
            task_api_model=os.getenv("TASK_API_MODEL", DEFAULT_TASK_API_MODEL),
            task_api_max_wait_seconds=env_float(
                "TASK_API_MAX_WAIT_SECONDS", DEFAULT_TASK_API_MAX_WAIT_SECONDS, 1.0
            ),
        )

    def model_for_kind(self, kind: str) -> str:
        """Model used for parts of the given job kind."""
        if self.provider == GenerationProviderType.TASK_API:
            return self.task_api_model
        if kind == "ugc_video":
            return self.veo_ugc_model
        return self.veo_promo_model
