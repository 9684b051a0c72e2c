# app/dependencies/__init__.py

from .permissions import get_current_user
from .services import (
    get_email_service,
    get_membership_service,
    get_unit_service,
    get_task_service,
)

__all__ = [
    "get_current_user",
    "get_email_service",
    "get_membership_service",
    "get_unit_service",
    "get_task_service",
]
