import logging

from sqlalchemy.orm import Session, joinedload, selectinload
from app.core.exceptions import NotFoundError
from app.models import team as models_team, team_membership as models_team_membership, check_in as models_check_in
from app.models.check_in import CheckInStatus
from app.schemas import team as schemas_team
from app.services.authorization_service import Action, authorize

logger = logging.getLogger(__name__)

RECENT_CHECK_INS_LIMIT = 5


def get_team(db: Session, team_id: int):
    return db.query(models_team.Team).options(
        selectinload(models_team.Team.members)
    ).filter(models_team.Team.id == team_id).first()

def get_team_or_404(db: Session, team_id: int):
    db_team = get_team(db, team_id)
    if db_team is None:
        raise NotFoundError("Team not found.")
    return db_team

def get_organization_teams(db: Session, organization_id: int):
    return db.query(models_team.Team).filter(
        models_team.Team.organization_id == organization_id
    ).order_by(models_team.Team.name).all()

def get_user_teams(db: Session, user_id: int):
    """Teams the user belongs to, with their members"""
    return db.query(models_team.Team).join(models_team_membership.TeamMembership).options(
        selectinload(models_team.Team.members)
    ).filter(
        models_team_membership.TeamMembership.user_id == user_id
    ).order_by(models_team.Team.name).all()


def create_team(db: Session, actor, team: schemas_team.TeamCreate):
    """Create a team in the actor's organization; the creator joins it."""
    authorize(actor, Action.CREATE_TEAM, message="You must belong to an organization to create teams.")

    db_team = models_team.Team(name=team.name, organization_id=actor.organization_id)
    db.add(db_team)
    db.flush()
    db.add(models_team_membership.TeamMembership(team_id=db_team.id, user_id=actor.id))
    db.commit()
    db.refresh(db_team)
    logger.info("Team %s created by user %s", db_team.id, actor.id)
    return db_team


def show_team(db: Session, actor, team_id: int):
    """Return the team and its most recently completed check-ins."""
    db_team = get_team_or_404(db, team_id)
    authorize(actor, Action.VIEW_TEAM, db_team)

    recent_check_ins = db.query(models_check_in.CheckIn).options(
        joinedload(models_check_in.CheckIn.assigned_user),
        joinedload(models_check_in.CheckIn.created_by),
        joinedload(models_check_in.CheckIn.team),
    ).filter(
        models_check_in.CheckIn.team_id == db_team.id,
        models_check_in.CheckIn.status == CheckInStatus.COMPLETED
    ).order_by(models_check_in.CheckIn.completed_at.desc()).limit(RECENT_CHECK_INS_LIMIT).all()

    return db_team, recent_check_ins
