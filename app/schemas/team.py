from pydantic import BaseModel, Field
from typing import List, Optional
from .user import UserSummary

class TeamBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

class TeamCreate(TeamBase):
    pass

class TeamSummary(BaseModel):
    id: int
    name: str
    organization_id: Optional[int] = None

    class Config:
        from_attributes = True

class Team(TeamSummary):
    members: List[UserSummary] = []
