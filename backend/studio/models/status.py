"""
Job status and kind enumerations.

A creation job moves strictly forward:
    pending -> generating -> completed | failed
"""

from enum import Enum


class JobStatus(Enum):
    """Enumeration of all possible job statuses."""

    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        """Check if this status is a terminal state (no further progress)."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    def can_transition_to(self, target: "JobStatus") -> bool:
        """Whether a write from this status to ``target`` keeps the lifecycle monotonic."""
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS = {
    JobStatus.PENDING: frozenset({JobStatus.GENERATING}),
    JobStatus.GENERATING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


class JobKind(str, Enum):
    """Which details payload a job carries."""

    UGC_VIDEO = "ugc_video"
    PROMO_VIDEO = "promo_video"

    @property
    def id_prefix(self) -> str:
        return "ugc" if self is JobKind.UGC_VIDEO else "promo"


__all__ = [
    "JobStatus",
    "JobKind",
    "ALLOWED_TRANSITIONS",
]
