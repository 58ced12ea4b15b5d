"""
API schemas for creation job endpoints

Request bodies are a tagged union on ``kind``; images arrive as base64 data
URLs and are moved into the asset store before the job record is written.
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field


class ScriptLineModel(BaseModel):
    """One spoken line; becomes one generated clip"""
    script: str = Field(min_length=1)
    part: int = 1
    total: int = 1


class PromptLineModel(BaseModel):
    """One scene prompt; becomes one generated clip"""
    prompt: str = Field(min_length=1)
    part: int = 1
    total: int = 1


class UgcVideoCreationRequest(BaseModel):
    """Request to create a persona/product video"""
    kind: Literal["ugc_video"] = "ugc_video"
    title: Optional[str] = None
    scripts: List[ScriptLineModel] = Field(min_length=1)
    persona_description: str
    interaction: str
    vibe: str
    setting: str
    product_description: str = ""
    gender: Literal["male", "female"] = "female"
    aspect_ratio: Literal["9:16", "16:9"] = "9:16"
    video_prompt: Optional[str] = None
    product_image: str  # base64 or data URL
    logo_image: Optional[str] = None
    n_frames: int = 10


class PromoVideoCreationRequest(BaseModel):
    """Request to create a promo video from scene prompts"""
    kind: Literal["promo_video"] = "promo_video"
    title: Optional[str] = None
    prompts: List[PromptLineModel] = Field(min_length=1)
    aspect_ratio: Literal["9:16", "16:9"] = "16:9"
    video_style: Optional[str] = None
    pacing: Optional[str] = None
    reference_image: Optional[str] = None  # present => image-to-video
    n_frames: int = 10


# Tagged on ``kind``; routes attach the discriminator through Body()
CreationRequest = Union[UgcVideoCreationRequest, PromoVideoCreationRequest]


class CreationResponse(BaseModel):
    """A creation job as shown to clients"""
    job_id: str
    kind: str
    title: str
    status: str
    created_at: str
    updated_at: str
    part_count: int
    result_urls: List[Optional[str]] = []
    thumbnail_url: Optional[str] = None
    error: Optional[str] = None


class SweepReportResponse(BaseModel):
    """Outcome of one orchestrator sweep"""
    sweep_id: Optional[str] = None
    dispatched: List[str] = []
    completed: List[str] = []
    failed: List[str] = []
    still_generating: List[str] = []
    duration_seconds: float = 0.0
