from fastapi import APIRouter

from app.api.deps import StoreCurrent
from app.core.pipeline import get_asset_url
from app.models import AssetURLResult

router = APIRouter(prefix="/assets", tags=["Assets"])


@router.get("/{storage_id}/url", response_model=AssetURLResult)
async def get_url(storage_id: str, store: StoreCurrent) -> AssetURLResult:
    return AssetURLResult(url=await get_asset_url(store, storage_id))
