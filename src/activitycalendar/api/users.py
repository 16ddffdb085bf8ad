"""User API endpoints."""

from fastapi import APIRouter, Depends, Request

from activitycalendar.api.deps import default_rate_limit, get_user_service, limiter
from activitycalendar.schemas.calendar import SuccessResponse, User
from activitycalendar.services.calendar_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[User])
async def list_users(service: UserService = Depends(get_user_service)):
    return await service.get_all()


@router.post("", response_model=SuccessResponse)
@limiter.limit(default_rate_limit)
async def replace_users(
    request: Request,
    users: list[User],
    service: UserService = Depends(get_user_service),
):
    await service.replace_all(users)
    return SuccessResponse()
