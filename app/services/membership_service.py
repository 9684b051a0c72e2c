from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_, func, or_
from typing import List, Dict, Any, Optional, Union
import logging

from ..models.unit import Unit
from ..models.unit_member import UnitMember
from ..models.user import User
from ..models.task import Task
from ..models.enums import UnitRole, MemberStatus, Permission, ASSIGNABLE_ROLES
from ..utils.constants import AppConstants, ROLE_PERMISSIONS
from ..utils.date_helpers import DateHelpers
from ..utils.email import EmailService
from .errors import (
    ServiceError,
    PermissionDeniedError,
    InvalidRoleError,
    UserNotFoundError,
    UnitNotFoundError,
    MemberNotFoundError,
    InvitationNotFoundError,
    InvitationExpiredError,
    AlreadyMemberError,
    BusinessRuleViolationError,
    LastAdminViolationError,
)

logger = logging.getLogger(__name__)


class MembershipService:
    """
    Household membership and permission rules.

    Every mutating household operation goes through a role check here, and
    every role change or removal preserves the invariant that a unit keeps at
    least one active admin. The admin check and the write it guards run in the
    same transaction, with the unit's admin rows locked for update.
    """

    def __init__(self, db: Session, email_service: Optional[EmailService] = None):
        self.db = db
        self.email_service = email_service or EmailService()

    # === UNIT CREATION ===

    def create_unit(self, name: str, creator_id: int) -> Unit:
        """Create a unit with the creator as its first active admin"""

        self._get_user_or_raise(creator_id)

        try:
            unit = Unit(name=name)
            self.db.add(unit)
            self.db.flush()  # Get ID without committing

            self.db.add(
                UnitMember(
                    user_id=creator_id,
                    unit_id=unit.id,
                    role=UnitRole.ADMIN.value,
                    status=MemberStatus.ACTIVE.value,
                )
            )

            self.db.commit()
            self.db.refresh(unit)
            logger.info(f"Unit {unit.id} created by user {creator_id}")
            return unit

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to create unit: {str(e)}")

    # === INVITATIONS ===

    def invite_member(
        self,
        unit_id: int,
        requester_id: int,
        email: str,
        role: str = UnitRole.MEMBER.value,
    ) -> UnitMember:
        """Invite an existing user (by e-mail) to the unit as a pending member"""

        unit = self._get_unit_or_raise(unit_id)
        self.require_admin(requester_id, unit_id, "Only admins can invite users")
        self._validate_role(role)

        invitee = (
            self.db.query(User)
            .filter(func.lower(User.email) == email.strip().lower())
            .first()
        )
        if not invitee:
            raise UserNotFoundError(f"No user found with email {email}")

        existing = self._get_membership(invitee.id, unit_id)
        if existing:
            if existing.status == MemberStatus.PENDING.value and DateHelpers.is_expired(
                existing.invite_expires_at
            ):
                # A stale invitation does not block a fresh one
                self.db.delete(existing)
                self.db.flush()
            else:
                raise AlreadyMemberError("User is already a member of this unit")

        try:
            invitation = UnitMember(
                user_id=invitee.id,
                unit_id=unit_id,
                role=role,
                status=MemberStatus.PENDING.value,
                invited_by_id=requester_id,
                invite_expires_at=DateHelpers.days_from_now(
                    AppConstants.INVITATION_EXPIRY_DAYS
                ),
            )
            self.db.add(invitation)
            self.db.commit()
            self.db.refresh(invitation)

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to create invitation: {str(e)}")

        inviter = self.db.get(User, requester_id)
        self.email_service.send_invitation_email(
            to_email=invitee.email,
            unit_name=unit.name,
            inviter_name=inviter.username if inviter else "A HomeTeam member",
            role=role,
        )
        return invitation

    def list_invitations(self, user_id: int) -> List[UnitMember]:
        """Pending, unexpired invitations addressed to the user"""
        now = DateHelpers.utc_now()
        return (
            self.db.query(UnitMember)
            .options(joinedload(UnitMember.unit), joinedload(UnitMember.invited_by))
            .filter(
                and_(
                    UnitMember.user_id == user_id,
                    UnitMember.status == MemberStatus.PENDING.value,
                    or_(
                        UnitMember.invite_expires_at.is_(None),
                        UnitMember.invite_expires_at >= now,
                    ),
                )
            )
            .order_by(UnitMember.created_at.desc(), UnitMember.id.desc())
            .all()
        )

    def respond_to_invitation(
        self, invitation_id: int, user_id: int, accept: bool
    ) -> Optional[UnitMember]:
        """Accept (pending -> active) or reject (row deleted) an invitation"""

        invitation = (
            self.db.query(UnitMember)
            .filter(
                and_(
                    UnitMember.id == invitation_id,
                    UnitMember.user_id == user_id,
                    UnitMember.status == MemberStatus.PENDING.value,
                )
            )
            .first()
        )
        if not invitation:
            raise InvitationNotFoundError("Invitation not found")

        if DateHelpers.is_expired(invitation.invite_expires_at):
            try:
                self.db.delete(invitation)
                self.db.commit()
            except Exception as e:
                self.db.rollback()
                raise ServiceError(f"Failed to discard expired invitation: {str(e)}")
            raise InvitationExpiredError("Invitation has expired")

        try:
            if accept:
                invitation.status = MemberStatus.ACTIVE.value
                invitation.invite_expires_at = None
                self.db.commit()
                self.db.refresh(invitation)
                logger.info(f"User {user_id} joined unit {invitation.unit_id}")
                return invitation

            self.db.delete(invitation)
            self.db.commit()
            logger.info(f"User {user_id} declined invitation {invitation_id}")
            return None

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to respond to invitation: {str(e)}")

    # === ROLES & REMOVAL ===

    def update_member_role(
        self, unit_id: int, member_id: int, new_role: str, requester_id: int
    ) -> UnitMember:
        """Change a member's role without leaving the unit adminless"""

        self.require_admin(requester_id, unit_id, "Only admins can update member roles")
        self._validate_role(new_role)
        membership = self._get_member_in_unit_or_raise(unit_id, member_id)

        if new_role != UnitRole.ADMIN.value:
            self._guard_last_admin(
                unit_id, membership, "Cannot remove admin role from the last admin"
            )

        try:
            membership.role = new_role
            self.db.commit()
            self.db.refresh(membership)
            return membership

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to update member role: {str(e)}")

    def remove_member(
        self, unit_id: int, member_id: int, requester_id: int
    ) -> Dict[str, Any]:
        """Remove a member (admin action or self-removal) and unassign their tasks"""

        membership = self._get_member_in_unit_or_raise(unit_id, member_id)
        requester_is_admin = self.is_admin(requester_id, unit_id)

        if membership.user_id != requester_id and not requester_is_admin:
            raise PermissionDeniedError("Only admins can remove other members")
        # A blocked row stays until an admin lifts it
        if membership.status == MemberStatus.BLOCKED.value and not requester_is_admin:
            raise PermissionDeniedError("Only admins can remove a blocked member")

        self._guard_last_admin(
            unit_id,
            membership,
            "Cannot remove the last admin. Assign another admin first.",
        )

        removed_user_id = membership.user_id
        try:
            unassigned = self._unassign_user_tasks(unit_id, removed_user_id)
            self.db.delete(membership)
            self.db.commit()

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to remove member: {str(e)}")

        logger.info(
            f"User {removed_user_id} removed from unit {unit_id} by {requester_id}; "
            f"{unassigned} task(s) unassigned"
        )
        return {
            "member_id": member_id,
            "user_id": removed_user_id,
            "unassigned_tasks": unassigned,
        }

    def block_member(
        self, unit_id: int, member_id: int, requester_id: int
    ) -> UnitMember:
        """Block a member: they lose access and their tasks are unassigned"""

        self.require_admin(requester_id, unit_id, "Only admins can block members")
        membership = self._get_member_in_unit_or_raise(unit_id, member_id)

        if membership.user_id == requester_id:
            raise BusinessRuleViolationError("Admins cannot block themselves")
        if membership.status == MemberStatus.BLOCKED.value:
            return membership
        if membership.status != MemberStatus.ACTIVE.value:
            raise BusinessRuleViolationError(
                "Only active members can be blocked; remove the pending invitation instead"
            )

        self._guard_last_admin(unit_id, membership, "Cannot block the last admin")

        try:
            self._unassign_user_tasks(unit_id, membership.user_id)
            membership.status = MemberStatus.BLOCKED.value
            membership.invite_expires_at = None
            self.db.commit()
            self.db.refresh(membership)
            return membership

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to block member: {str(e)}")

    def list_members(self, unit_id: int, requester_id: int) -> List[UnitMember]:
        """All membership rows of the unit, visible to active members"""
        self._get_unit_or_raise(unit_id)
        self.require_active_member(requester_id, unit_id)

        return (
            self.db.query(UnitMember)
            .options(joinedload(UnitMember.user))
            .filter(UnitMember.unit_id == unit_id)
            .order_by(UnitMember.id)
            .all()
        )

    # === PERMISSION CHECKS ===

    def has_permission(
        self, user_id: int, unit_id: int, permission: Union[Permission, str]
    ) -> bool:
        """Whether the user's active role in the unit grants the permission"""
        membership = self.get_active_membership(user_id, unit_id)
        if not membership:
            return False

        permission = permission.value if isinstance(permission, Permission) else permission
        return permission in ROLE_PERMISSIONS.get(membership.role, frozenset())

    def get_active_membership(
        self, user_id: int, unit_id: int
    ) -> Optional[UnitMember]:
        return (
            self.db.query(UnitMember)
            .filter(
                and_(
                    UnitMember.user_id == user_id,
                    UnitMember.unit_id == unit_id,
                    UnitMember.status == MemberStatus.ACTIVE.value,
                )
            )
            .first()
        )

    def is_member(self, user_id: int, unit_id: int) -> bool:
        return self.get_active_membership(user_id, unit_id) is not None

    def is_admin(self, user_id: int, unit_id: int) -> bool:
        membership = self.get_active_membership(user_id, unit_id)
        return membership is not None and membership.role == UnitRole.ADMIN.value

    def require_active_member(
        self,
        user_id: int,
        unit_id: int,
        message: str = "You are not a member of this unit",
    ) -> UnitMember:
        membership = self.get_active_membership(user_id, unit_id)
        if not membership:
            raise PermissionDeniedError(message)
        return membership

    def require_admin(
        self,
        user_id: int,
        unit_id: int,
        message: str = "Admin permissions required",
    ) -> UnitMember:
        membership = self.get_active_membership(user_id, unit_id)
        if not membership or membership.role != UnitRole.ADMIN.value:
            raise PermissionDeniedError(message)
        return membership

    # === PRIVATE HELPER METHODS ===

    def _get_unit_or_raise(self, unit_id: int) -> Unit:
        unit = self.db.query(Unit).filter(Unit.id == unit_id).first()
        if not unit:
            raise UnitNotFoundError(f"Unit {unit_id} not found")
        return unit

    def _get_user_or_raise(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    def _get_membership(self, user_id: int, unit_id: int) -> Optional[UnitMember]:
        """Membership row in any status"""
        return (
            self.db.query(UnitMember)
            .filter(
                and_(UnitMember.user_id == user_id, UnitMember.unit_id == unit_id)
            )
            .first()
        )

    def _get_member_in_unit_or_raise(self, unit_id: int, member_id: int) -> UnitMember:
        membership = (
            self.db.query(UnitMember)
            .filter(and_(UnitMember.id == member_id, UnitMember.unit_id == unit_id))
            .first()
        )
        if not membership:
            raise MemberNotFoundError("Member not found")
        return membership

    def _validate_role(self, role: str):
        if role not in ASSIGNABLE_ROLES:
            raise InvalidRoleError(
                f"Invalid role: {role}. Must be one of: {list(ASSIGNABLE_ROLES)}"
            )

    def _lock_active_admin_ids(self, unit_id: int) -> List[int]:
        """Membership ids of the unit's active admins, locked until commit"""
        rows = (
            self.db.query(UnitMember.id)
            .filter(
                and_(
                    UnitMember.unit_id == unit_id,
                    UnitMember.role == UnitRole.ADMIN.value,
                    UnitMember.status == MemberStatus.ACTIVE.value,
                )
            )
            .with_for_update()
            .all()
        )
        return [row.id for row in rows]

    def _guard_last_admin(self, unit_id: int, membership: UnitMember, message: str):
        """Raise if taking `membership` out of the admin pool leaves it empty"""
        admin_ids = self._lock_active_admin_ids(unit_id)
        if membership.id in admin_ids and len(admin_ids) <= 1:
            self.db.rollback()
            raise LastAdminViolationError(message)

    def _unassign_user_tasks(self, unit_id: int, user_id: int) -> int:
        return (
            self.db.query(Task)
            .filter(and_(Task.unit_id == unit_id, Task.assignee_id == user_id))
            .update({Task.assignee_id: None}, synchronize_session="fetch")
        )
