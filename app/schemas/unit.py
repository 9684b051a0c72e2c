from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from .unit_member import UnitMemberResponse
from .task import TaskResponse


class UnitBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class UnitCreate(UnitBase):
    pass


class UnitUpdate(UnitBase):
    pass


class UnitResponse(UnitBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnitSummary(UnitResponse):
    """Unit as listed for the current user"""

    role: str
    member_count: int
    task_count: int


class UnitDetails(UnitResponse):
    members: List[UnitMemberResponse]
    recent_tasks: List[TaskResponse]
