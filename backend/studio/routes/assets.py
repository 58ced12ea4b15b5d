"""
Asset routes - serve stored blobs (reference images, finished video parts).
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..core import AssetNotFoundError, InvalidAssetKeyError
from ..services.infrastructure.orchestration import ServiceContainer
from .dependencies import get_container

router = APIRouter(prefix="/assets", tags=["assets"])


@router.get("/{key}")
async def get_asset(key: str, container: ServiceContainer = Depends(get_container)):
    try:
        asset = container.asset_store.get_with_type(key)
    except InvalidAssetKeyError:
        raise HTTPException(status_code=400, detail="Invalid asset key")
    except AssetNotFoundError:
        raise HTTPException(status_code=404, detail="Asset not found")

    return Response(
        content=asset.data,
        media_type=asset.content_type,
        headers={"Cache-Control": "private, max-age=3600"},
    )
