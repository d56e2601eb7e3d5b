"""
Member Service
Organization member administration - list, show, create, change role, delete
"""
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import ConflictError, NotFoundError
from app.models import user as models_user, check_in as models_check_in, organization_invitation as models_invitation
from app.models import team_membership as models_team_membership
from app.models.user import UserRole
from app.schemas import user as schemas_user
from app.services import organization_service, team_service, user_service
from app.services.authorization_service import Action, authorize

logger = logging.getLogger(__name__)


def get_member_or_404(db: Session, member_id: int):
    member = db.query(models_user.User).options(
        selectinload(models_user.User.teams)
    ).filter(models_user.User.id == member_id).first()
    if member is None:
        raise NotFoundError("Member not found.")
    return member


def list_members(db: Session, actor):
    """
    Members of the actor's organization ordered by name, together with the
    organization's teams.
    """
    authorize(actor, Action.VIEW_MEMBERS)
    organization = organization_service.get_organization(db, actor.organization_id)
    if organization is None:
        raise NotFoundError("Organization not found.")

    members = db.query(models_user.User).options(
        selectinload(models_user.User.teams)
    ).filter(
        models_user.User.organization_id == organization.id
    ).order_by(models_user.User.name).all()
    teams = team_service.get_organization_teams(db, organization.id)
    return organization, members, teams


def get_member(db: Session, actor, member_id: int):
    authorize(actor, Action.VIEW_MEMBERS, message="Only admins and owners can view member details.")
    member = get_member_or_404(db, member_id)
    authorize(actor, Action.VIEW_MEMBERS, member, message="Unauthorized action.")
    return member


def create_member(db: Session, actor, user: schemas_user.UserCreate):
    authorize(actor, Action.CREATE_MEMBER)
    authorize(actor, Action.CREATE_MEMBER, new_role=user.role, message="Admins cannot create owners.")
    return user_service.create_user(db, user, organization_id=actor.organization_id)


def update_member_role(db: Session, actor, member_id: int, role: UserRole):
    authorize(actor, Action.VIEW_MEMBERS, message="Only admins and owners can update member roles.")
    member = get_member_or_404(db, member_id)
    authorize(actor, Action.VIEW_MEMBERS, member, message="Unauthorized action.")

    if actor.id == member.id:
        raise ConflictError("You cannot change your own role.")

    if actor.role == UserRole.ADMIN and member.role == UserRole.OWNER:
        message = "Admins cannot change owner roles."
    else:
        message = "Admins cannot promote users to owner."
    authorize(actor, Action.UPDATE_MEMBER_ROLE, member, new_role=role, message=message)

    previous = member.role
    member.role = role
    db.commit()
    db.refresh(member)
    logger.info("User %s role changed from %s to %s by %s", member.id, previous.value, role.value, actor.id)
    return member


def delete_member(db: Session, actor, member_id: int):
    authorize(actor, Action.VIEW_MEMBERS, message="Only admins and owners can delete organization members.")
    member = get_member_or_404(db, member_id)
    authorize(actor, Action.VIEW_MEMBERS, member, message="Unauthorized action.")

    if actor.id == member.id:
        raise ConflictError("You cannot delete your own account.")
    authorize(actor, Action.DELETE_MEMBER, member)

    membership_count = db.query(models_team_membership.TeamMembership).filter(
        models_team_membership.TeamMembership.user_id == member.id
    ).count()
    if membership_count > 0:
        raise ConflictError("Cannot delete members who are assigned to teams. Please remove them from all teams first.")

    # Rows owned by the member go with it
    db.query(models_check_in.CheckIn).filter(
        or_(
            models_check_in.CheckIn.assigned_user_id == member.id,
            models_check_in.CheckIn.created_by_user_id == member.id,
        )
    ).delete(synchronize_session=False)
    db.query(models_invitation.OrganizationInvitation).filter(
        models_invitation.OrganizationInvitation.invited_by_user_id == member.id
    ).delete(synchronize_session=False)
    db.delete(member)
    db.commit()
    logger.info("User %s deleted by %s", member_id, actor.id)
