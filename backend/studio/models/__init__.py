"""
Data models: job records (dataclasses) and API schemas (pydantic)
"""

from .status import JobStatus, JobKind, ALLOWED_TRANSITIONS
from .creation import (
    PartSpec,
    TaskHandle,
    ScriptLine,
    PromptLine,
    UgcVideoDetails,
    PromoVideoDetails,
    JobDetails,
    DETAILS_BY_KIND,
    Job,
    utc_now_iso,
    parse_iso,
)
from .jobs import (
    ScriptLineModel,
    PromptLineModel,
    UgcVideoCreationRequest,
    PromoVideoCreationRequest,
    CreationRequest,
    CreationResponse,
    SweepReportResponse,
)

__all__ = [
    "JobStatus",
    "JobKind",
    "ALLOWED_TRANSITIONS",
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
    "ScriptLineModel",
    "PromptLineModel",
    "UgcVideoCreationRequest",
    "PromoVideoCreationRequest",
    "CreationRequest",
    "CreationResponse",
    "SweepReportResponse",
]
