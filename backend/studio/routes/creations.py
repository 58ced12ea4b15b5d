"""
Creation job routes.

Routes stay thin: submission and reads go through the creation use cases, and
domain exceptions are translated into HTTP errors here.
"""

import asyncio
import json
from typing import Annotated, AsyncIterator, List

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from ..core import (
    DuplicateJobError,
    InvalidAssetKeyError,
    InvalidCreationRequestError,
    JobNotFoundError,
    get_logger,
)
from ..models import CreationRequest, CreationResponse
from ..services.infrastructure.orchestration import ServiceContainer
from ..services.use_cases import CreationQueries, SubmitCreationUseCase
from .dependencies import get_container, get_creation_queries, get_submit_use_case

logger = get_logger(__name__, component="creations_routes")

router = APIRouter(prefix="/creations", tags=["creations"])


@router.post("", response_model=CreationResponse, status_code=201)
async def submit_creation(
    request: Annotated[CreationRequest, Body(discriminator="kind")],
    use_case: SubmitCreationUseCase = Depends(get_submit_use_case),
):
    """Store the request's images and enqueue a pending creation job."""
    try:
        return await use_case.execute(request)
    except (InvalidCreationRequestError, InvalidAssetKeyError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except DuplicateJobError as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@router.get("", response_model=List[CreationResponse])
async def list_creations(queries: CreationQueries = Depends(get_creation_queries)):
    """All creation jobs, newest first."""
    return queries.list()


@router.get("/events")
async def stream_creation_events(
    request: Request,
    container: ServiceContainer = Depends(get_container),
):
    """Server-sent events: one ``job`` event per job mutation."""

    async def event_stream() -> AsyncIterator[str]:
        yield ": connected\n\n"
        try:
            async for event in container.job_store.events.listen():
                if await request.is_disconnected():
                    break
                yield f"event: job\ndata: {json.dumps(event.to_dict())}\n\n"
        except asyncio.CancelledError:
            logger.debug("Event stream closed by client")
            raise

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/{job_id}", response_model=CreationResponse)
async def get_creation(job_id: str, queries: CreationQueries = Depends(get_creation_queries)):
    try:
        return queries.get(job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Creation not found")


@router.delete("/{job_id}")
async def delete_creation(job_id: str, queries: CreationQueries = Depends(get_creation_queries)):
    """Delete a creation job and all of its assets."""
    if not queries.delete(job_id):
        raise HTTPException(status_code=404, detail="Creation not found")
    return {"message": f"Creation {job_id} deleted", "job_id": job_id}
