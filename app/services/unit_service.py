from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_, func
from typing import List, Dict, Any, Optional
import logging

from ..models.unit import Unit
from ..models.unit_member import UnitMember
from ..models.task import Task
from ..models.media_item import MediaItem
from ..models.enums import MemberStatus
from ..utils.constants import AppConstants
from .errors import ServiceError, UnitNotFoundError
from .membership_service import MembershipService
from .media_storage import MediaStorage, remove_stored_media

logger = logging.getLogger(__name__)


class UnitService:
    def __init__(
        self,
        db: Session,
        membership_service: Optional[MembershipService] = None,
        storage: Optional[MediaStorage] = None,
    ):
        self.db = db
        self.membership = membership_service or MembershipService(db)
        self.storage = storage

    def list_user_units(self, user_id: int) -> List[Dict[str, Any]]:
        """Units the user actively belongs to, with counts and the user's role"""

        rows = (
            self.db.query(Unit, UnitMember.role)
            .join(UnitMember, UnitMember.unit_id == Unit.id)
            .filter(
                and_(
                    UnitMember.user_id == user_id,
                    UnitMember.status == MemberStatus.ACTIVE.value,
                )
            )
            .order_by(Unit.created_at.desc(), Unit.id.desc())
            .all()
        )
        if not rows:
            return []

        unit_ids = [unit.id for unit, _ in rows]
        member_counts = dict(
            self.db.query(UnitMember.unit_id, func.count(UnitMember.id))
            .filter(
                and_(
                    UnitMember.unit_id.in_(unit_ids),
                    UnitMember.status == MemberStatus.ACTIVE.value,
                )
            )
            .group_by(UnitMember.unit_id)
            .all()
        )
        task_counts = dict(
            self.db.query(Task.unit_id, func.count(Task.id))
            .filter(Task.unit_id.in_(unit_ids))
            .group_by(Task.unit_id)
            .all()
        )

        return [
            {
                "unit": unit,
                "role": role,
                "member_count": member_counts.get(unit.id, 0),
                "task_count": task_counts.get(unit.id, 0),
            }
            for unit, role in rows
        ]

    def get_unit_details(self, unit_id: int, user_id: int) -> Dict[str, Any]:
        """Unit with its members and most recent tasks; active members only"""

        unit = self._get_unit_or_raise(unit_id)
        self.membership.require_active_member(user_id, unit_id)

        members = (
            self.db.query(UnitMember)
            .options(joinedload(UnitMember.user))
            .filter(UnitMember.unit_id == unit_id)
            .order_by(UnitMember.id)
            .all()
        )
        recent_tasks = (
            self.db.query(Task)
            .filter(Task.unit_id == unit_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .limit(AppConstants.RECENT_TASKS_LIMIT)
            .all()
        )

        return {"unit": unit, "members": members, "tasks": recent_tasks}

    def update_unit(self, unit_id: int, user_id: int, name: str) -> Unit:
        unit = self._get_unit_or_raise(unit_id)
        self.membership.require_admin(
            user_id, unit_id, "Only admins can update unit details"
        )

        try:
            unit.name = name
            self.db.commit()
            self.db.refresh(unit)
            return unit

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to update unit: {str(e)}")

    def delete_unit(self, unit_id: int, user_id: int) -> bool:
        """Delete a unit with its members, tasks and media"""

        unit = self._get_unit_or_raise(unit_id)
        self.membership.require_admin(user_id, unit_id, "Only admins can delete units")

        storage_keys = [
            key
            for (key,) in self.db.query(MediaItem.storage_key)
            .join(Task, MediaItem.task_id == Task.id)
            .filter(Task.unit_id == unit_id)
            .all()
        ]

        try:
            self.db.delete(unit)
            self.db.commit()

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to delete unit: {str(e)}")

        logger.info(f"Unit {unit_id} deleted by user {user_id}")
        remove_stored_media(self.storage, storage_keys)
        return True

    # === PRIVATE HELPER METHODS ===

    def _get_unit_or_raise(self, unit_id: int) -> Unit:
        unit = self.db.query(Unit).filter(Unit.id == unit_id).first()
        if not unit:
            raise UnitNotFoundError(f"Unit {unit_id} not found")
        return unit

