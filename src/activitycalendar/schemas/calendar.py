"""Calendar entity schemas (users, years, months, days, settings)."""

from pydantic import Field

from activitycalendar.schemas.base import BaseSchema
from activitycalendar.schemas.attachment import Attachment


class User(BaseSchema):
    """User row as stored in the Users sheet."""

    id: str
    username: str
    password: str = ""
    fullname: str = ""


class UserPublic(BaseSchema):
    """User as returned after login (no password)."""

    id: str
    username: str
    fullname: str = ""


class LoginRequest(BaseSchema):
    username: str = ""
    password: str = ""


class LoginResponse(BaseSchema):
    success: bool
    user: UserPublic | None = None
    error: str | None = None


class Year(BaseSchema):
    """Academic/fiscal year."""

    id: str
    name: str = ""
    start_date: str = ""
    end_date: str = ""
    is_current: bool = False


class Month(BaseSchema):
    """Month of a year; ``month`` is formatted ``yyyy-MM``."""

    id: str
    year_id: str = ""
    month: str = ""
    name: str = ""


class DayEntry(BaseSchema):
    id: str
    detail: str = ""
    responsible: str = ""


class Day(BaseSchema):
    """Activities and attachments for one date (``yyyy-MM-dd``)."""

    id: str
    month_id: str = ""
    date: str = ""
    entries: list[DayEntry] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)


class SiteSettings(BaseSchema):
    """Key/value settings shown in the page header."""

    school_name: str = ""
    education_office: str = ""
    school_logo: str = ""


class SuccessResponse(BaseSchema):
    success: bool = True
