from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator
from typing import Optional
from datetime import datetime

from app.models.organization_invitation import InvitationStatus
from .organization import Organization
from .user import UserSummary


class OrganizationInvitationCreate(BaseModel):
    email: EmailStr


class OrganizationInvitation(BaseModel):
    id: int
    email: str
    organization_id: int
    invited_by_user_id: int
    status: InvitationStatus
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    invited_by: Optional[UserSummary] = None
    organization: Optional[Organization] = None

    class Config:
        from_attributes = True


class OrganizationInvitationWithLink(OrganizationInvitation):
    invitation_link: str


class PublicInvitation(BaseModel):
    """What an anonymous visitor holding the token may see"""
    email: str
    expires_at: datetime
    organization: Organization
    invited_by: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class AcceptInvitationRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8)
    password_confirmation: str

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo):
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("Password confirmation does not match.")
        return value
