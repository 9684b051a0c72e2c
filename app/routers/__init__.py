# app/routers/__init__.py

from . import auth
from . import units
from . import invitations
from . import tasks

__all__ = [
    "auth",
    "units",
    "invitations",
    "tasks",
]
