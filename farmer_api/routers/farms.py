from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from farmer_api.routers import farm_out
from farmer_api.schemas import FarmOut, FarmPage, MessageResponse, PageMetaOut, UpdateFarmRequest
from farmer_api.services.farm_service import FarmService
from farmer_api.services.token_service import current_user_id

router = APIRouter(prefix="/farms", tags=["farms"], dependencies=[Depends(current_user_id)])


def get_farm_service() -> FarmService:
    return FarmService()


@router.get("", response_model=FarmPage)
async def list_farms(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    farm_service: FarmService = Depends(get_farm_service),
):
    result = await farm_service.list_farms(page, limit, search)
    return FarmPage(
        data=[farm_out(farm) for farm in result.data],
        meta=PageMetaOut.model_validate(vars(result.meta)),
    )


@router.get("/{farm_id}", response_model=FarmOut)
async def get_farm(farm_id: str, farm_service: FarmService = Depends(get_farm_service)):
    return farm_out(await farm_service.get_farm(farm_id))


@router.patch("/{farm_id}", response_model=FarmOut)
async def update_farm(farm_id: str, body: UpdateFarmRequest, farm_service: FarmService = Depends(get_farm_service)):
    changes = body.model_dump(exclude_unset=True, mode="json")
    return farm_out(await farm_service.update_farm(farm_id, changes))


@router.delete("/{farm_id}", response_model=MessageResponse)
async def delete_farm(farm_id: str, farm_service: FarmService = Depends(get_farm_service)):
    return MessageResponse(**await farm_service.delete_farm(farm_id))
