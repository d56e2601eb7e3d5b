import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.exceptions import ConflictError
from app.models import team_membership as models_team_membership
from app.services import team_service, member_service
from app.services.authorization_service import Action, authorize

logger = logging.getLogger(__name__)


def get_membership(db: Session, user_id: int, team_id: int):
    return db.query(models_team_membership.TeamMembership).filter(
        models_team_membership.TeamMembership.user_id == user_id,
        models_team_membership.TeamMembership.team_id == team_id
    ).first()

def is_user_in_team(db: Session, user_id: int, team_id: int) -> bool:
    return get_membership(db, user_id, team_id) is not None



def _load_member_and_team(db: Session, actor, member_id: int, team_id: int):
    # Role check first so members learn nothing about ids in other organizations
    authorize(actor, Action.VIEW_MEMBERS, message="Only admins and owners can manage team assignments.")
    member = member_service.get_member_or_404(db, member_id)
    team = team_service.get_team_or_404(db, team_id)
    authorize(actor, Action.MANAGE_TEAM_MEMBERSHIP, member, team=team, message="Unauthorized action.")
    return member, team


def assign_member_to_team(db: Session, actor, member_id: int, team_id: int):
    member, team = _load_member_and_team(db, actor, member_id, team_id)

    if is_user_in_team(db, member.id, team.id):
        raise ConflictError("Member is already assigned to this team.")

    db_membership = models_team_membership.TeamMembership(user_id=member.id, team_id=team.id)
    db.add(db_membership)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request attached the same pair first
        db.rollback()
        raise ConflictError("Member is already assigned to this team.")
    db.refresh(db_membership)
    logger.info("User %s assigned to team %s by %s", member.id, team.id, actor.id)
    return db_membership


def remove_member_from_team(db: Session, actor, member_id: int, team_id: int):
    member, team = _load_member_and_team(db, actor, member_id, team_id)

    db_membership = get_membership(db, member.id, team.id)
    if db_membership is None:
        raise ConflictError("Member is not assigned to this team.")

    db.delete(db_membership)
    db.commit()
    logger.info("User %s removed from team %s by %s", member.id, team.id, actor.id)
    return db_membership
