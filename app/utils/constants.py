from ..models.enums import Permission, UnitRole


class AppConstants:
    # Invitations
    INVITATION_EXPIRY_DAYS = 7

    # Unit details
    RECENT_TASKS_LIMIT = 5

    # Auth
    MIN_PASSWORD_LENGTH = 8

    # Completion media
    MEDIA_UPLOAD_URL_EXPIRES_SECONDS = 3600
    ALLOWED_MEDIA_TYPES = (
        "image/jpeg",
        "image/png",
        "image/gif",
        "video/mp4",
        "video/quicktime",
    )


_MEMBER_PERMISSIONS = frozenset(
    {Permission.CREATE_TASKS.value, Permission.COMPLETE_TASKS.value}
)
_MODERATOR_PERMISSIONS = _MEMBER_PERMISSIONS | {
    Permission.ASSIGN_TASKS.value,
    Permission.DELETE_TASKS.value,
}
_ADMIN_PERMISSIONS = _MODERATOR_PERMISSIONS | {
    Permission.MANAGE_MEMBERS.value,
    Permission.MANAGE_ROLES.value,
    Permission.MANAGE_UNIT.value,
}

# admin ⊇ moderator ⊇ member
ROLE_PERMISSIONS = {
    UnitRole.ADMIN.value: _ADMIN_PERMISSIONS,
    UnitRole.MODERATOR.value: _MODERATOR_PERMISSIONS,
    UnitRole.MEMBER.value: _MEMBER_PERMISSIONS,
}
