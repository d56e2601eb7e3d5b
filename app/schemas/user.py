from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
import datetime

from app.models.user import UserRole


class UserBase(BaseModel):
    email: EmailStr


class UserCreate(UserBase):
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.MEMBER


class SignupRequest(UserBase):
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8)
    organization_name: str = Field(..., min_length=1, max_length=255)


class RoleUpdate(BaseModel):
    role: UserRole


class UserSummary(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole

    class Config:
        from_attributes = True


class User(UserSummary):
    organization_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime.datetime] = None


class TeamRef(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class UserWithTeams(User):
    teams: List[TeamRef] = []
