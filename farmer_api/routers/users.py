from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from farmer_api.routers import user_out
from farmer_api.schemas import MessageResponse, PageMetaOut, UpdateUserRequest, UserOut, UserPage
from farmer_api.services.token_service import current_user_id
from farmer_api.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(current_user_id)])


def get_user_service() -> UserService:
    return UserService()


@router.get("", response_model=UserPage)
async def list_users(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    user_service: UserService = Depends(get_user_service),
):
    result = await user_service.list_users(page, limit, search)
    return UserPage(
        data=[user_out(user) for user in result.data],
        meta=PageMetaOut.model_validate(vars(result.meta)),
    )


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: str, user_service: UserService = Depends(get_user_service)):
    return user_out(await user_service.get_user(user_id))


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(user_id: str, body: UpdateUserRequest, user_service: UserService = Depends(get_user_service)):
    changes = body.model_dump(exclude_unset=True, mode="json")
    return user_out(await user_service.update_user(user_id, changes))


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, user_service: UserService = Depends(get_user_service)):
    return MessageResponse(**await user_service.delete_user(user_id))
