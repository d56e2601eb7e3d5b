from pydantic import BaseModel
from typing import Optional
import datetime

class TeamMembership(BaseModel):
    id: int
    user_id: int
    team_id: int
    created_at: Optional[datetime.datetime] = None

    class Config:
        from_attributes = True
