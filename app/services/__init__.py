from .auth_service import AuthService
from .membership_service import MembershipService
from .unit_service import UnitService
from .task_service import TaskService

__all__ = [
    "AuthService",
    "MembershipService",
    "UnitService",
    "TaskService",
]
