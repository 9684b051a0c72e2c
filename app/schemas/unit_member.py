from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from app.models.enums import UnitRole
from .user import UserSummary


class UnitInfo(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class MemberInvite(BaseModel):
    email: EmailStr
    role: str = UnitRole.MEMBER.value


class MemberRoleUpdate(BaseModel):
    role: str = Field(..., description="admin or member")


class UnitMemberResponse(BaseModel):
    id: int
    user_id: int
    unit_id: int
    role: str
    status: str
    invite_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class InvitationResponse(BaseModel):
    id: int
    unit_id: int
    role: str
    status: str
    invite_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    unit: UnitInfo
    invited_by: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class InvitationRespond(BaseModel):
    accept: bool
