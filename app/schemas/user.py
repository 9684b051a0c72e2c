from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UserSummary(BaseModel):
    """Minimal user info embedded in members, tasks and invitations"""

    id: int
    username: str
    email: Optional[str] = None

    class Config:
        from_attributes = True


class UserResponse(UserSummary):
    """Public user information for API responses"""

    phone: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
