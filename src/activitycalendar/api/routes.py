"""API router aggregation."""

from fastapi import APIRouter

from activitycalendar.api.upload import router as upload_router
from activitycalendar.api.days import router as days_router
from activitycalendar.api.years import router as years_router
from activitycalendar.api.months import router as months_router
from activitycalendar.api.users import router as users_router
from activitycalendar.api.settings import router as settings_router
from activitycalendar.api.auth import router as auth_router
from activitycalendar.api.holidays import router as holidays_router

router = APIRouter(prefix="/api")

router.include_router(upload_router)
router.include_router(days_router)
router.include_router(years_router)
router.include_router(months_router)
router.include_router(users_router)
router.include_router(settings_router)
router.include_router(auth_router)
router.include_router(holidays_router)
