from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime

from app.models.check_in import CheckInStatus
from .team import TeamSummary
from .user import UserSummary


def _not_in_past(value: Optional[date]) -> Optional[date]:
    if value is not None and value < date.today():
        raise ValueError("The scheduled date must be today or in the future.")
    return value


class CheckInCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    team_id: int
    assigned_user_id: int
    scheduled_date: date

    @field_validator("scheduled_date")
    @classmethod
    def scheduled_date_not_in_past(cls, value):
        return _not_in_past(value)


class CheckInUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    team_id: Optional[int] = None
    assigned_user_id: Optional[int] = None
    scheduled_date: Optional[date] = None

    @field_validator("title", "team_id", "assigned_user_id", "scheduled_date")
    @classmethod
    def required_when_present(cls, value):
        # description may be cleared, the others may only be omitted
        if value is None:
            raise ValueError("This field is required when present.")
        return value

    @field_validator("scheduled_date")
    @classmethod
    def scheduled_date_not_in_past(cls, value):
        return _not_in_past(value)


class MarkCompleteRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)


class CheckIn(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    team_id: int
    assigned_user_id: int
    created_by_user_id: int
    scheduled_date: date
    completed_at: Optional[datetime] = None
    status: CheckInStatus
    notes: Optional[str] = None
    is_overdue: bool = False
    days_until_due: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    team: Optional[TeamSummary] = None
    assigned_user: Optional[UserSummary] = None
    created_by: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class CheckInStats(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0
    completion_rate: float = 0


class CheckInFilters(BaseModel):
    status: Optional[CheckInStatus] = None
    team_id: Optional[int] = None
    search: Optional[str] = None
    sort_by: str = "scheduled_date"
    sort_direction: str = "asc"


class PaginatedCheckIns(BaseModel):
    data: List[CheckIn] = []
    current_page: int
    per_page: int
    total: int
    last_page: int
