from enum import Enum


class UnitRole(str, Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    MEMBER = "member"


class MemberStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    BLOCKED = "blocked"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class Permission(str, Enum):
    CREATE_TASKS = "create_tasks"
    COMPLETE_TASKS = "complete_tasks"
    ASSIGN_TASKS = "assign_tasks"
    DELETE_TASKS = "delete_tasks"
    MANAGE_MEMBERS = "manage_members"
    MANAGE_ROLES = "manage_roles"
    MANAGE_UNIT = "manage_unit"


# Roles that can be granted through invitations and role updates
ASSIGNABLE_ROLES = (UnitRole.ADMIN.value, UnitRole.MEMBER.value)
