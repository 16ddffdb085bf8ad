"""API routes for ActivityCalendar."""

from activitycalendar.api.routes import router

__all__ = ["router"]
