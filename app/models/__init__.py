from .user import User
from .unit import Unit
from .unit_member import UnitMember
from .task import Task
from .media_item import MediaItem


__all__ = [
    "User",
    "Unit",
    "UnitMember",
    "Task",
    "MediaItem",
]
