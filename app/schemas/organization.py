from pydantic import BaseModel
from typing import Optional


class Organization(BaseModel):
    id: int
    name: str
    plan_id: Optional[str] = None
    type: str

    class Config:
        from_attributes = True
