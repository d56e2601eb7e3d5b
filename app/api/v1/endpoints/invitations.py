"""
Organization Invitations API Endpoints
"""
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_current_active_user
from app.models.user import User
from app.schemas import organization_invitation as schemas_invitation, token as schemas_token
from app.schemas.page import Page
from app.services import invitation_service
from app.api.v1.endpoints.auth import issue_token

router = APIRouter()


def _with_link(invitation) -> schemas_invitation.OrganizationInvitationWithLink:
    data = schemas_invitation.OrganizationInvitation.model_validate(invitation).model_dump()
    return schemas_invitation.OrganizationInvitationWithLink(
        **data, invitation_link=invitation_service.get_invitation_link(invitation.token)
    )


@router.get("/", response_model=Page)
def list_invitations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    List all invitations of the current organization, newest first.
    """
    invitations = invitation_service.list_invitations(db, actor=current_user)
    return Page(component="Invitations/Index", props={
        "invitations": [_with_link(invitation) for invitation in invitations],
    })


@router.post("/", response_model=schemas_invitation.OrganizationInvitationWithLink,
             status_code=status.HTTP_201_CREATED)
def send_invitation(
    invitation_data: schemas_invitation.OrganizationInvitationCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Create an invitation and email it after the response is sent.
    Returns the invitation with a copy-able link.
    """
    invitation = invitation_service.send_invitation(db, actor=current_user, invitation_data=invitation_data)
    background_tasks.add_task(
        invitation_service.dispatch_invitation_email,
        **invitation_service.build_invitation_email(invitation)
    )
    return _with_link(invitation)


@router.post("/{invitation_id}/resend", response_model=schemas_invitation.OrganizationInvitationWithLink)
def resend_invitation(
    invitation_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """
    Resend invitation email and push its expiry out again.
    """
    invitation = invitation_service.resend_invitation(db, actor=current_user, invitation_id=invitation_id)
    background_tasks.add_task(
        invitation_service.dispatch_invitation_email,
        **invitation_service.build_invitation_email(invitation)
    )
    return _with_link(invitation)


@router.delete("/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_invitation(
    invitation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    invitation_service.cancel_invitation(db, actor=current_user, invitation_id=invitation_id)
    return None


# Public endpoints (no authentication required)

@router.get("/{token}/accept", response_model=Page)
def show_invitation(token: str, db: Session = Depends(get_db)):
    invitation = invitation_service.get_invitation_for_acceptance(db, token)
    return Page(component="Invitations/Accept", props={
        "invitation": schemas_invitation.PublicInvitation.model_validate(invitation),
        "token": token,
    })


@router.post("/{token}/accept", response_model=schemas_token.Token, status_code=status.HTTP_201_CREATED)
def accept_invitation(
    token: str,
    request: schemas_invitation.AcceptInvitationRequest,
    db: Session = Depends(get_db)
):
    """
    Accept an invitation, create the member account and log it in.
    """
    user = invitation_service.accept_invitation(db, token, request)
    return issue_token(user)
