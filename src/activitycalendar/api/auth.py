"""Login endpoint."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from activitycalendar.api.deps import auth_rate_limit, get_user_service, limiter
from activitycalendar.schemas.calendar import LoginRequest, LoginResponse
from activitycalendar.services.calendar_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_exclude_none=True,
    responses={status.HTTP_401_UNAUTHORIZED: {"model": LoginResponse}},
)
@limiter.limit(auth_rate_limit)
async def login(
    request: Request,
    data: LoginRequest,
    service: UserService = Depends(get_user_service),
):
    """Check a username and password against the Users sheet."""
    user = await service.authenticate(data.username, data.password)
    if user is None:
        payload = LoginResponse(success=False, error="Invalid credentials")
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content=payload.to_json())
    return LoginResponse(success=True, user=user)
