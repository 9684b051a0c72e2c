from fastapi import APIRouter, Depends, status
from typing import Dict, Any
from ..models.user import User
from ..services.membership_service import MembershipService
from ..services.unit_service import UnitService
from ..schemas.unit import UnitCreate, UnitUpdate, UnitResponse, UnitSummary, UnitDetails
from ..schemas.unit_member import MemberInvite, MemberRoleUpdate, UnitMemberResponse
from ..schemas.task import TaskResponse
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_membership_service, get_unit_service
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["units"])


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_unit(
    unit_data: UnitCreate,
    current_user: User = Depends(get_current_user),
    membership_service: MembershipService = Depends(get_membership_service),
):
    """Create a new unit with current user as admin"""
    unit = membership_service.create_unit(unit_data.name, current_user.id)
    return RouterResponse.created(
        data=UnitResponse.model_validate(unit), message="Unit created successfully"
    )


@router.get("", response_model=Dict[str, Any])
@handle_service_errors
async def list_my_units(
    current_user: User = Depends(get_current_user),
    unit_service: UnitService = Depends(get_unit_service),
):
    """Units the current user belongs to"""
    units = [
        UnitSummary(
            **UnitResponse.model_validate(row["unit"]).model_dump(),
            role=row["role"],
            member_count=row["member_count"],
            task_count=row["task_count"],
        )
        for row in unit_service.list_user_units(current_user.id)
    ]
    return RouterResponse.success(data=units)


@router.get("/{unit_id}", response_model=Dict[str, Any])
@handle_service_errors
async def get_unit_details(
    unit_id: int,
    current_user: User = Depends(get_current_user),
    unit_service: UnitService = Depends(get_unit_service),
):
    """Unit with members and recent tasks"""
    details = unit_service.get_unit_details(unit_id, current_user.id)
    return RouterResponse.success(
        data=UnitDetails(
            **UnitResponse.model_validate(details["unit"]).model_dump(),
            members=[UnitMemberResponse.model_validate(m) for m in details["members"]],
            recent_tasks=[TaskResponse.model_validate(t) for t in details["tasks"]],
        )
    )


@router.put("/{unit_id}", response_model=Dict[str, Any])
@handle_service_errors
async def update_unit(
    unit_id: int,
    unit_update: UnitUpdate,
    current_user: User = Depends(get_current_user),
    unit_service: UnitService = Depends(get_unit_service),
):
    """Rename a unit (admin only)"""
    unit = unit_service.update_unit(unit_id, current_user.id, unit_update.name)
    return RouterResponse.updated(
        data=UnitResponse.model_validate(unit), message="Unit updated successfully"
    )


@router.delete("/{unit_id}", response_model=Dict[str, Any])
@handle_service_errors
async def delete_unit(
    unit_id: int,
    current_user: User = Depends(get_current_user),
    unit_service: UnitService = Depends(get_unit_service),
):
    """Delete a unit with its members and tasks (admin only)"""
    unit_service.delete_unit(unit_id, current_user.id)
    return RouterResponse.deleted(message="Unit deleted successfully")


@router.get("/{unit_id}/members", response_model=Dict[str, Any])
@handle_service_errors
async def list_unit_members(
    unit_id: int,
    current_user: User = Depends(get_current_user),
    membership_service: MembershipService = Depends(get_membership_service),
):
    members = membership_service.list_members(unit_id, current_user.id)
    return RouterResponse.success(
        data=[UnitMemberResponse.model_validate(m) for m in members]
    )


@router.post(
    "/{unit_id}/members",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
)
@handle_service_errors
async def invite_member(
    unit_id: int,
    invitation: MemberInvite,
    current_user: User = Depends(get_current_user),
    membership_service: MembershipService = Depends(get_membership_service),
):
    """Invite a registered user by e-mail (admin only)"""
    membership = membership_service.invite_member(
        unit_id=unit_id,
        requester_id=current_user.id,
        email=invitation.email,
        role=invitation.role,
    )
    return RouterResponse.created(
        data=UnitMemberResponse.model_validate(membership),
        message="Invitation sent successfully",
    )


@router.put("/{unit_id}/members/{member_id}", response_model=Dict[str, Any])
@handle_service_errors
async def update_member_role(
    unit_id: int,
    member_id: int,
    role_data: MemberRoleUpdate,
    current_user: User = Depends(get_current_user),
    membership_service: MembershipService = Depends(get_membership_service),
):
    """Update member role (admin only)"""
    membership = membership_service.update_member_role(
        unit_id=unit_id,
        member_id=member_id,
        new_role=role_data.role,
        requester_id=current_user.id,
    )
    return RouterResponse.updated(
        data=UnitMemberResponse.model_validate(membership),
        message=f"Member role updated to {membership.role}",
    )


@router.delete("/{unit_id}/members/{member_id}", response_model=Dict[str, Any])
@handle_service_errors
async def remove_member(
    unit_id: int,
    member_id: int,
    current_user: User = Depends(get_current_user),
    membership_service: MembershipService = Depends(get_membership_service),
):
    """Remove a member (admin) or leave the unit (self)"""
    result = membership_service.remove_member(
        unit_id=unit_id, member_id=member_id, requester_id=current_user.id
    )
    return RouterResponse.deleted(data=result, message="Member removed successfully")


@router.post("/{unit_id}/members/{member_id}/block", response_model=Dict[str, Any])
@handle_service_errors
async def block_member(
    unit_id: int,
    member_id: int,
    current_user: User = Depends(get_current_user),
    membership_service: MembershipService = Depends(get_membership_service),
):
    """Block a member (admin only)"""
    membership = membership_service.block_member(
        unit_id=unit_id, member_id=member_id, requester_id=current_user.id
    )
    return RouterResponse.updated(
        data=UnitMemberResponse.model_validate(membership),
        message="Member blocked",
    )
