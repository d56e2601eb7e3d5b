"""
Invitation Service
Handles organization invitations - send, resend, cancel, expire, accept
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationFailure
from app.models.organization_invitation import OrganizationInvitation, InvitationStatus
from app.models.user import UserRole
from app.schemas.organization_invitation import OrganizationInvitationCreate, AcceptInvitationRequest
from app.services import user_service
from app.services.authorization_service import Action, authorize
from app.services.email_service import EmailDeliveryError, is_configured, send_email_smtp

logger = logging.getLogger(__name__)

INVALID_INVITATION = "Invalid or expired invitation."
EMAIL_UNAVAILABLE = "This email is already a member of your organization or has a pending invitation."


def generate_invitation_token() -> str:
    return str(uuid.uuid4())


def get_invitation_link(token: str) -> str:
    """Generate the full acceptance link"""
    return f"{settings.FRONTEND_URL.rstrip('/')}/invitations/{token}/accept"


def _expiry_from(now: datetime) -> datetime:
    return now + timedelta(days=settings.INVITATION_EXPIRY_DAYS)


def _with_relations(query):
    return query.options(
        joinedload(OrganizationInvitation.organization),
        joinedload(OrganizationInvitation.invited_by)
    )


def get_invitation(db: Session, invitation_id: int) -> Optional[OrganizationInvitation]:
    return _with_relations(db.query(OrganizationInvitation)).filter(
        OrganizationInvitation.id == invitation_id
    ).first()


def get_invitation_or_404(db: Session, invitation_id: int) -> OrganizationInvitation:
    invitation = get_invitation(db, invitation_id)
    if invitation is None:
        raise NotFoundError("Invitation not found.")
    return invitation


def get_invitation_by_token(db: Session, token: str) -> Optional[OrganizationInvitation]:
    return _with_relations(db.query(OrganizationInvitation)).filter(
        OrganizationInvitation.token == token
    ).first()


def reconcile_expiry(db: Session, invitation: OrganizationInvitation, now: Optional[datetime] = None) -> bool:
    """
    Persist EXPIRED on a pending invitation that is past its expiry.
    Returns True when the status changed. Does not commit.
    """
    if invitation.status == InvitationStatus.PENDING and invitation.is_expired(now):
        invitation.status = InvitationStatus.EXPIRED
        db.flush()
        logger.info("Invitation %s for %s expired", invitation.id, invitation.email)
        return True
    return False


def expire_stale_invitations(db: Session, organization_id: Optional[int] = None,
                             now: Optional[datetime] = None) -> int:
    """Bulk expiry of pending invitations, optionally for one organization. Does not commit."""
    query = db.query(OrganizationInvitation).filter(
        OrganizationInvitation.status == InvitationStatus.PENDING,
        OrganizationInvitation.expires_at <= (now or datetime.utcnow())
    )
    if organization_id is not None:
        query = query.filter(OrganizationInvitation.organization_id == organization_id)
    expired = query.update({OrganizationInvitation.status: InvitationStatus.EXPIRED}, synchronize_session=False)
    if expired:
        logger.info("Expired %s stale invitations", expired)
    return expired


def build_invitation_email(invitation: OrganizationInvitation) -> Dict[str, Any]:
    """Plain values for the notification, read while the session is still open"""
    return {
        "recipient": invitation.email,
        "organization_name": invitation.organization.name,
        "inviter_name": invitation.invited_by.name if invitation.invited_by else "Your administrator",
        "acceptance_link": get_invitation_link(invitation.token),
        "expires_at": invitation.expires_at,
    }


async def dispatch_invitation_email(
    recipient: str,
    organization_name: str,
    inviter_name: str,
    acceptance_link: str,
    expires_at: datetime
) -> bool:
    """
    Send the invitation email. Delivery failures are logged and never raised.
    """
    if not is_configured():
        logger.warning("SMTP not configured, skipping invitation email to %s", recipient)
        return False

    expires_on = expires_at.strftime("%B %d, %Y")

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
    </head>
    <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
        <h1 style="font-size: 24px;">Hello!</h1>
        <p style="font-size: 16px;">
            You've been invited by <strong>{inviter_name}</strong> to join <strong>{organization_name}</strong>.
        </p>
        <p style="font-size: 14px;">Click the button below to accept the invitation and create your account.</p>
        <div style="text-align: center; margin: 30px 0;">
            <a href="{acceptance_link}" style="display: inline-block; background: #1f2937; color: white; text-decoration: none; padding: 12px 28px; border-radius: 6px; font-weight: 600;">
                Accept Invitation
            </a>
        </div>
        <p style="font-size: 12px; color: #999;">This invitation will expire on {expires_on}.</p>
        <p style="font-size: 12px; color: #999;">If you didn't expect this invitation, you can safely ignore this email.</p>
        <p style="font-size: 14px;">Best regards,<br>The {organization_name} Team</p>
    </body>
    </html>
    """

    text_content = f"""
Hello!

You've been invited by {inviter_name} to join {organization_name}.

Click the link below to accept the invitation and create your account:
{acceptance_link}

This invitation will expire on {expires_on}.

If you didn't expect this invitation, you can safely ignore this email.

Best regards,
The {organization_name} Team
    """

    try:
        await send_email_smtp(
            to_email=recipient,
            subject=f"You're invited to join {organization_name}",
            html_content=html_content,
            text_content=text_content,
            from_name=settings.SMTP_FROM_NAME or organization_name,
        )
    except EmailDeliveryError:
        logger.exception("Failed to send invitation email to %s", recipient)
        return False
    except Exception:
        logger.exception("Unexpected error sending invitation email to %s", recipient)
        return False
    return True


def _ensure_email_available(db: Session, email: str, organization_id: int):
    if user_service.get_user_by_email(db, email):
        raise ValidationFailure({"email": EMAIL_UNAVAILABLE})

    pending = db.query(OrganizationInvitation).filter(
        OrganizationInvitation.email == email,
        OrganizationInvitation.organization_id == organization_id,
        OrganizationInvitation.status == InvitationStatus.PENDING
    ).first()
    if pending is not None:
        raise ValidationFailure({"email": EMAIL_UNAVAILABLE})


def send_invitation(db: Session, actor, invitation_data: OrganizationInvitationCreate) -> OrganizationInvitation:
    """
    Create a pending invitation in the actor's organization.
    The caller schedules the email once this returns.
    """
    authorize(actor, Action.SEND_INVITATION)

    # Stale pending rows must not block a fresh invitation
    expire_stale_invitations(db, actor.organization_id)
    _ensure_email_available(db, invitation_data.email, actor.organization_id)

    now = datetime.utcnow()
    invitation = OrganizationInvitation(
        email=invitation_data.email,
        organization_id=actor.organization_id,
        invited_by_user_id=actor.id,
        token=generate_invitation_token(),
        status=InvitationStatus.PENDING,
        expires_at=_expiry_from(now),
    )
    db.add(invitation)
    db.commit()
    logger.info("Invitation %s sent to %s by user %s", invitation.id, invitation.email, actor.id)
    return get_invitation(db, invitation.id)


def list_invitations(db: Session, actor) -> List[OrganizationInvitation]:
    """All invitations of the actor's organization, newest first"""
    authorize(actor, Action.MANAGE_INVITATION)
    if expire_stale_invitations(db, actor.organization_id):
        db.commit()
    return _with_relations(db.query(OrganizationInvitation)).filter(
        OrganizationInvitation.organization_id == actor.organization_id
    ).order_by(OrganizationInvitation.created_at.desc(), OrganizationInvitation.id.desc()).all()


def resend_invitation(db: Session, actor, invitation_id: int) -> OrganizationInvitation:
    """Push the expiry out again; the token stays the same."""
    authorize(actor, Action.MANAGE_INVITATION)
    invitation = get_invitation_or_404(db, invitation_id)
    authorize(actor, Action.MANAGE_INVITATION, invitation, message="Unauthorized action.")

    if reconcile_expiry(db, invitation):
        db.commit()
    if invitation.status != InvitationStatus.PENDING:
        raise ForbiddenError("Only pending invitations can be resent.")

    invitation.expires_at = _expiry_from(datetime.utcnow())
    db.commit()
    db.refresh(invitation)
    logger.info("Invitation %s resent to %s", invitation.id, invitation.email)
    return invitation


def cancel_invitation(db: Session, actor, invitation_id: int) -> None:
    authorize(actor, Action.MANAGE_INVITATION)
    invitation = get_invitation_or_404(db, invitation_id)
    authorize(actor, Action.MANAGE_INVITATION, invitation, message="Unauthorized action.")

    db.delete(invitation)
    db.commit()
    logger.info("Invitation %s cancelled by user %s", invitation_id, actor.id)


def get_invitation_for_acceptance(db: Session, token: str) -> OrganizationInvitation:
    """Resolve a public token to a usable invitation or fail with a generic 404"""
    invitation = get_invitation_by_token(db, token)
    if invitation is None:
        raise NotFoundError(INVALID_INVITATION)

    if reconcile_expiry(db, invitation):
        db.commit()
    if not invitation.is_valid():
        raise NotFoundError(INVALID_INVITATION)
    return invitation


def accept_invitation(db: Session, token: str, request: AcceptInvitationRequest):
    """
    Create the member account for a valid invitation and mark it accepted.
    Returns the new user.
    """
    invitation = get_invitation_for_acceptance(db, token)

    if user_service.get_user_by_email(db, invitation.email):
        raise ConflictError(
            "An account with this email already exists. Please log in instead.",
            redirect_to="/login",
        )

    user = user_service.build_user(
        name=request.name,
        email=invitation.email,
        password=request.password,
        organization_id=invitation.organization_id,
        role=UserRole.MEMBER,
    )
    db.add(user)
    invitation.status = InvitationStatus.ACCEPTED
    invitation.accepted_at = datetime.utcnow()
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(
            "An account with this email already exists. Please log in instead.",
            redirect_to="/login",
        )
    db.refresh(user)
    logger.info("Invitation %s accepted, user %s joined organization %s",
                invitation.id, user.id, invitation.organization_id)
    return user
