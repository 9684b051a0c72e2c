from .user import UserSummary, UserResponse
from .auth import RegisterRequest, LoginRequest, AuthResponse
from .unit_member import (
    MemberInvite,
    MemberRoleUpdate,
    UnitMemberResponse,
    InvitationResponse,
    InvitationRespond,
)
from .task import (
    TaskCreate,
    TaskStatusUpdate,
    TaskAssign,
    TaskResponse,
    TaskDetail,
    MediaUploadRequest,
    MediaUploadConfirm,
    MediaUploadResponse,
    MediaItemResponse,
)
from .unit import UnitCreate, UnitUpdate, UnitResponse, UnitSummary, UnitDetails

__all__ = [
    "UserSummary",
    "UserResponse",
    "RegisterRequest",
    "LoginRequest",
    "AuthResponse",
    "MemberInvite",
    "MemberRoleUpdate",
    "UnitMemberResponse",
    "InvitationResponse",
    "InvitationRespond",
    "TaskCreate",
    "TaskStatusUpdate",
    "TaskAssign",
    "TaskResponse",
    "TaskDetail",
    "MediaUploadRequest",
    "MediaUploadConfirm",
    "MediaUploadResponse",
    "MediaItemResponse",
    "UnitCreate",
    "UnitUpdate",
    "UnitResponse",
    "UnitSummary",
    "UnitDetails",
]
