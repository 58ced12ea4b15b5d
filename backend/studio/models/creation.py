"""
Creation job data model.

A ``Job`` is persisted as one small JSON document. Binary payloads (reference
images, finished video parts) never live on the record; the record only holds
asset keys that resolve through the asset store.
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Type, Union

from .status import JobKind, JobStatus


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass
class PartSpec:
    """Generation input for one part of a job. Fixed at creation."""
    index: int
    total: int
    prompt: str
    model: str
    aspect_ratio: str = "9:16"
    resolution: Optional[str] = None
    image_key: Optional[str] = None
    image_mime_type: Optional[str] = None
    n_frames: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PartSpec":
        return cls(**_known_fields(cls, data))


@dataclass
class TaskHandle:
    """Opaque reference to one in-flight provider task."""
    name: str
    submitted_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "submitted_at": self.submitted_at}

    @classmethod
    def from_dict(cls, data: Any) -> "TaskHandle":
        """Raises ValueError when the stored handle is structurally invalid."""
        if not isinstance(data, dict) or not data.get("name") or not isinstance(data["name"], str):
            raise ValueError("Invalid operation data in job.")
        return cls(name=data["name"], submitted_at=data.get("submitted_at") or utc_now_iso())


@dataclass
class ScriptLine:
    script: str
    part: int
    total: int


@dataclass
class PromptLine:
    prompt: str
    part: int
    total: int


@dataclass
class UgcVideoDetails:
    """Persona speaking scripted lines about a product, one clip per script line."""
    kind: ClassVar[JobKind] = JobKind.UGC_VIDEO

    scripts: List[ScriptLine]
    persona_description: str
    interaction: str
    vibe: str
    setting: str
    product_description: str = ""
    gender: str = "female"
    aspect_ratio: str = "9:16"
    video_prompt: Optional[str] = None
    product_image_key: Optional[str] = None
    product_image_mime_type: Optional[str] = None
    logo_image_key: Optional[str] = None
    logo_mime_type: Optional[str] = None
    n_frames: int = 10

    def part_prompt(self, line: ScriptLine) -> str:
        prompt = (
            f"Persona: {self.persona_description}. Action: {self.interaction}. "
            f'Dialogue: "{line.script}". Vibe: {self.vibe}. Setting: {self.setting}.'
        )
        if self.video_prompt:
            prompt += f" Scene: {self.video_prompt}."
        return prompt

    def build_parts(self, model: str, resolution: Optional[str] = None) -> List[PartSpec]:
        total = len(self.scripts)
        return [
            PartSpec(
                index=i,
                total=total,
                prompt=self.part_prompt(line),
                model=model,
                aspect_ratio=self.aspect_ratio,
                resolution=resolution,
                image_key=self.product_image_key,
                image_mime_type=self.product_image_mime_type or "image/jpeg",
                n_frames=self.n_frames,
            )
            for i, line in enumerate(self.scripts)
        ]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UgcVideoDetails":
        values = _known_fields(cls, data)
        values["scripts"] = [ScriptLine(**line) for line in data.get("scripts", [])]
        return cls(**values)


@dataclass
class PromoVideoDetails:
    """Scene prompts rendered as one clip each, optionally animating a reference image."""
    kind: ClassVar[JobKind] = JobKind.PROMO_VIDEO

    prompts: List[PromptLine]
    aspect_ratio: str = "16:9"
    video_style: Optional[str] = None
    pacing: Optional[str] = None
    n_frames: int = 10
    is_image_to_video: bool = False
    reference_image_key: Optional[str] = None
    reference_image_mime_type: Optional[str] = None

    def part_prompt(self, line: PromptLine) -> str:
        if self.is_image_to_video:
            return line.prompt
        pieces = [f'Concept: "{line.prompt}".']
        if self.video_style:
            pieces.append(f"Style: {self.video_style}.")
        if self.pacing:
            pieces.append(f"Pacing: {self.pacing}.")
        return " ".join(pieces)

    def build_parts(self, model: str, resolution: Optional[str] = None) -> List[PartSpec]:
        total = len(self.prompts)
        image_key = self.reference_image_key if self.is_image_to_video else None
        return [
            PartSpec(
                index=i,
                total=total,
                prompt=self.part_prompt(line),
                model=model,
                aspect_ratio=self.aspect_ratio,
                resolution=resolution,
                image_key=image_key,
                image_mime_type=self.reference_image_mime_type if image_key else None,
                n_frames=self.n_frames,
            )
            for i, line in enumerate(self.prompts)
        ]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PromoVideoDetails":
        values = _known_fields(cls, data)
        values["prompts"] = [PromptLine(**line) for line in data.get("prompts", [])]
        return cls(**values)


JobDetails = Union[UgcVideoDetails, PromoVideoDetails]

DETAILS_BY_KIND: Dict[JobKind, Type] = {
    JobKind.UGC_VIDEO: UgcVideoDetails,
    JobKind.PROMO_VIDEO: PromoVideoDetails,
}


@dataclass
class Job:
    id: str
    kind: JobKind
    details: JobDetails
    parts: List[PartSpec]
    title: str = ""
    status: JobStatus = JobStatus.PENDING
    handles: List[Dict[str, Any]] = field(default_factory=list)
    result_keys: Optional[List[Optional[str]]] = None
    error: Optional[str] = None
    thumbnail_key: Optional[str] = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)
    dispatched_at: Optional[str] = None

    def __post_init__(self):
        if getattr(self.details, "kind", None) != self.kind:
            raise ValueError(f"Details payload does not match job kind '{self.kind.value}'")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "title": self.title,
            "status": self.status.value,
            "details": self.details.to_dict(),
            "parts": [part.to_dict() for part in self.parts],
            "handles": list(self.handles),
            "result_keys": list(self.result_keys) if self.result_keys is not None else None,
            "error": self.error,
            "thumbnail_key": self.thumbnail_key,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "dispatched_at": self.dispatched_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        kind = JobKind(data["kind"])
        return cls(
            id=data["id"],
            kind=kind,
            title=data.get("title", ""),
            status=JobStatus(data["status"]),
            details=DETAILS_BY_KIND[kind].from_dict(data.get("details") or {}),
            parts=[PartSpec.from_dict(p) for p in data.get("parts", [])],
            handles=list(data.get("handles") or []),
            result_keys=data.get("result_keys"),
            error=data.get("error"),
            thumbnail_key=data.get("thumbnail_key"),
            created_at=data.get("created_at") or utc_now_iso(),
            updated_at=data.get("updated_at") or utc_now_iso(),
            dispatched_at=data.get("dispatched_at"),
        )


__all__ = [
    "PartSpec",
    "TaskHandle",
    "ScriptLine",
    "PromptLine",
    "UgcVideoDetails",
    "PromoVideoDetails",
    "JobDetails",
    "DETAILS_BY_KIND",
    "Job",
    "utc_now_iso",
    "parse_iso",
]
