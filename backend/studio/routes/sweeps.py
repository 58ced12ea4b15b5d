"""
Sweep routes - run the orchestrator on demand.
"""

from fastapi import APIRouter, Depends

from ..models import SweepReportResponse
from ..services.infrastructure.orchestration import ServiceContainer
from .dependencies import get_container

router = APIRouter(prefix="/sweeps", tags=["sweeps"])


@router.post("", response_model=SweepReportResponse)
async def trigger_sweep(container: ServiceContainer = Depends(get_container)):
    """Run one dispatch + poll pass immediately, independent of the schedule."""
    report = await container.scheduler.trigger()
    return SweepReportResponse(
        sweep_id=report.sweep_id,
        dispatched=report.dispatched,
        completed=report.completed,
        failed=report.failed,
        still_generating=report.still_generating,
        duration_seconds=report.duration_seconds,
    )
