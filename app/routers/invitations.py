from fastapi import APIRouter, Depends
from typing import Dict, Any
from ..models.user import User
from ..services.membership_service import MembershipService
from ..schemas.unit_member import (
    InvitationResponse,
    InvitationRespond,
    UnitMemberResponse,
)
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_membership_service
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["invitations"])


@router.get("", response_model=Dict[str, Any])
@handle_service_errors
async def list_my_invitations(
    current_user: User = Depends(get_current_user),
    membership_service: MembershipService = Depends(get_membership_service),
):
    """Pending invitations for the current user"""
    invitations = membership_service.list_invitations(current_user.id)
    return RouterResponse.success(
        data=[InvitationResponse.model_validate(i) for i in invitations]
    )


@router.put("/{invitation_id}", response_model=Dict[str, Any])
@handle_service_errors
async def respond_to_invitation(
    invitation_id: int,
    response: InvitationRespond,
    current_user: User = Depends(get_current_user),
    membership_service: MembershipService = Depends(get_membership_service),
):
    """Accept or reject an invitation"""
    membership = membership_service.respond_to_invitation(
        invitation_id=invitation_id,
        user_id=current_user.id,
        accept=response.accept,
    )

    if membership is None:
        return RouterResponse.success(message="Invitation rejected successfully")

    return RouterResponse.success(
        data=UnitMemberResponse.model_validate(membership),
        message="Invitation accepted successfully",
    )
