from .security import verify_password, get_password_hash, create_access_token
from .email import EmailService
from .date_helpers import DateHelpers
from .constants import AppConstants, ROLE_PERMISSIONS
from .validation import ValidationHelpers

__all__ = [
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "EmailService",
    "DateHelpers",
    "AppConstants",
    "ROLE_PERMISSIONS",
    "ValidationHelpers",
]
