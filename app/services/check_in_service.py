"""
Check-in Service
Role-scoped listing, CRUD and the assigned-user status lifecycle of check-ins.
"""
import logging
import math
from datetime import date, datetime
from typing import Optional

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailure
from app.models import check_in as models_check_in, team as models_team, user as models_user
from app.models.check_in import CheckInStatus
from app.schemas import check_in as schemas_check_in
from app.services.authorization_service import Action, authorize, has_admin_capability

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "scheduled_date": models_check_in.CheckIn.scheduled_date,
    "title": models_check_in.CheckIn.title,
    "status": models_check_in.CheckIn.status,
    "created_at": models_check_in.CheckIn.created_at,
    "completed_at": models_check_in.CheckIn.completed_at,
}

# Statuses the bulk overdue reconciliation is allowed to overwrite
OPEN_STATUSES = (CheckInStatus.PENDING, CheckInStatus.IN_PROGRESS)


def _with_relations(query):
    return query.options(
        joinedload(models_check_in.CheckIn.team),
        joinedload(models_check_in.CheckIn.assigned_user),
        joinedload(models_check_in.CheckIn.created_by),
    )


def _scoped_query(db: Session, actor):
    """Owners and admins see their organization, members only their own assignments."""
    query = db.query(models_check_in.CheckIn)
    if has_admin_capability(actor.role):
        return query.join(models_team.Team, models_check_in.CheckIn.team_id == models_team.Team.id).filter(
            models_team.Team.organization_id == actor.organization_id
        )
    return query.filter(models_check_in.CheckIn.assigned_user_id == actor.id)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def get_check_in(db: Session, check_in_id: int):
    return _with_relations(db.query(models_check_in.CheckIn)).filter(
        models_check_in.CheckIn.id == check_in_id
    ).first()

def get_check_in_or_404(db: Session, check_in_id: int):
    db_check_in = get_check_in(db, check_in_id)
    if db_check_in is None:
        raise NotFoundError("Check-in not found.")
    return db_check_in


def list_check_ins(db: Session, actor, filters: schemas_check_in.CheckInFilters, page: int = 1,
                   per_page: Optional[int] = None):
    per_page = per_page or settings.CHECK_INS_PER_PAGE
    page = max(page, 1)

    sort_column = SORTABLE_COLUMNS.get(filters.sort_by)
    if sort_column is None:
        raise ValidationFailure({"sort_by": "The selected sort by is invalid."})
    if filters.sort_direction not in ("asc", "desc"):
        raise ValidationFailure({"sort_direction": "The selected sort direction is invalid."})

    query = _scoped_query(db, actor)
    if filters.status is not None:
        query = query.filter(models_check_in.CheckIn.status == filters.status)
    if filters.team_id is not None:
        query = query.filter(models_check_in.CheckIn.team_id == filters.team_id)
    if filters.search:
        pattern = f"%{_escape_like(filters.search)}%"
        query = query.filter(or_(
            models_check_in.CheckIn.title.ilike(pattern, escape="\\"),
            models_check_in.CheckIn.description.ilike(pattern, escape="\\"),
        ))

    total = query.count()
    order = sort_column.asc() if filters.sort_direction == "asc" else sort_column.desc()
    items = _with_relations(query).order_by(order, models_check_in.CheckIn.id).offset(
        (page - 1) * per_page
    ).limit(per_page).all()

    return schemas_check_in.PaginatedCheckIns(
        data=[schemas_check_in.CheckIn.model_validate(item) for item in items],
        current_page=page,
        per_page=per_page,
        total=total,
        last_page=max(1, math.ceil(total / per_page)),
    )


def get_stats(db: Session, actor) -> schemas_check_in.CheckInStats:
    """Counts over the actor's visible check-ins; overdue is derived from the date."""
    CheckIn = models_check_in.CheckIn
    today = date.today()

    def count_where(condition):
        return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

    row = _scoped_query(db, actor).with_entities(
        func.count(CheckIn.id),
        count_where(CheckIn.status == CheckInStatus.PENDING),
        count_where(CheckIn.status == CheckInStatus.IN_PROGRESS),
        count_where(CheckIn.status == CheckInStatus.COMPLETED),
        count_where((CheckIn.scheduled_date < today) & (CheckIn.status != CheckInStatus.COMPLETED)),
    ).one()

    total, pending, in_progress, completed, overdue = (int(value or 0) for value in row)
    completion_rate = round(completed / total * 100, 1) if total > 0 else 0
    return schemas_check_in.CheckInStats(
        total=total,
        pending=pending,
        in_progress=in_progress,
        completed=completed,
        overdue=overdue,
        completion_rate=completion_rate,
    )


def get_form_options(db: Session, actor):
    """Teams and users of the actor's organization for the create/edit forms."""
    teams = db.query(models_team.Team).filter(
        models_team.Team.organization_id == actor.organization_id
    ).order_by(models_team.Team.name).all()
    users = db.query(models_user.User).filter(
        models_user.User.organization_id == actor.organization_id
    ).order_by(models_user.User.name).all()
    return teams, users


def _validate_references(db: Session, actor, team_id: Optional[int], assigned_user_id: Optional[int]):
    errors = {}
    if team_id is not None:
        team = db.query(models_team.Team).filter(
            models_team.Team.id == team_id,
            models_team.Team.organization_id == actor.organization_id
        ).first()
        if team is None:
            errors["team_id"] = "The selected team is invalid."
    if assigned_user_id is not None:
        user = db.query(models_user.User).filter(
            models_user.User.id == assigned_user_id,
            models_user.User.organization_id == actor.organization_id
        ).first()
        if user is None:
            errors["assigned_user_id"] = "The selected user is invalid."
    if errors:
        raise ValidationFailure(errors)


def create_check_in(db: Session, actor, check_in: schemas_check_in.CheckInCreate):
    authorize(actor, Action.CREATE_CHECK_IN)
    _validate_references(db, actor, check_in.team_id, check_in.assigned_user_id)

    db_check_in = models_check_in.CheckIn(
        title=check_in.title,
        description=check_in.description,
        team_id=check_in.team_id,
        assigned_user_id=check_in.assigned_user_id,
        created_by_user_id=actor.id,
        scheduled_date=check_in.scheduled_date,
        status=CheckInStatus.PENDING,
    )
    db.add(db_check_in)
    db.commit()
    logger.info("Check-in %s created by user %s for user %s", db_check_in.id, actor.id, db_check_in.assigned_user_id)
    return get_check_in(db, db_check_in.id)


def show_check_in(db: Session, actor, check_in_id: int):
    db_check_in = get_check_in_or_404(db, check_in_id)
    authorize(actor, Action.VIEW_CHECK_IN, db_check_in)
    return db_check_in


def edit_check_in(db: Session, actor, check_in_id: int):
    db_check_in = get_check_in_or_404(db, check_in_id)
    authorize(actor, Action.UPDATE_CHECK_IN, db_check_in)
    teams, users = get_form_options(db, actor)
    return db_check_in, teams, users


def update_check_in(db: Session, actor, check_in_id: int, check_in: schemas_check_in.CheckInUpdate):
    """Content edits only; status moves through the mark operations."""
    db_check_in = get_check_in_or_404(db, check_in_id)
    authorize(actor, Action.UPDATE_CHECK_IN, db_check_in)

    update_data = check_in.model_dump(exclude_unset=True)
    _validate_references(db, actor, update_data.get("team_id"), update_data.get("assigned_user_id"))

    for key, value in update_data.items():
        setattr(db_check_in, key, value)
    db.commit()
    return get_check_in(db, check_in_id)


def delete_check_in(db: Session, actor, check_in_id: int):
    db_check_in = get_check_in_or_404(db, check_in_id)
    authorize(actor, Action.DELETE_CHECK_IN, db_check_in)
    db.delete(db_check_in)
    db.commit()
    logger.info("Check-in %s deleted by user %s", check_in_id, actor.id)


def _transition(db_check_in, status: CheckInStatus):
    if not db_check_in.can_transition_to(status):
        raise ConflictError(
            f"Cannot mark a {db_check_in.status.label.lower()} check-in as {status.label.lower()}."
        )
    db_check_in.status = status


def mark_in_progress(db: Session, actor, check_in_id: int):
    db_check_in = get_check_in_or_404(db, check_in_id)
    authorize(actor, Action.MARK_CHECK_IN_IN_PROGRESS, db_check_in)
    _transition(db_check_in, CheckInStatus.IN_PROGRESS)
    db.commit()
    db.refresh(db_check_in)
    return db_check_in


def mark_complete(db: Session, actor, check_in_id: int, notes: Optional[str] = None):
    db_check_in = get_check_in_or_404(db, check_in_id)
    authorize(actor, Action.MARK_CHECK_IN_COMPLETE, db_check_in)
    _transition(db_check_in, CheckInStatus.COMPLETED)
    db_check_in.completed_at = datetime.utcnow()
    db_check_in.notes = notes
    db.commit()
    db.refresh(db_check_in)
    logger.info("Check-in %s completed by user %s", db_check_in.id, actor.id)
    return db_check_in


def update_overdue_status(db: Session, actor, check_in_id: int):
    """Persist OVERDUE when the check-in is past its date and still open."""
    db_check_in = get_check_in_or_404(db, check_in_id)
    authorize(actor, Action.UPDATE_CHECK_IN, db_check_in)
    if db_check_in.is_overdue and db_check_in.status != CheckInStatus.OVERDUE:
        db_check_in.status = CheckInStatus.OVERDUE
        db.commit()
        db.refresh(db_check_in)
        logger.info("Check-in %s marked overdue", db_check_in.id)
    return db_check_in


def reconcile_overdue_check_ins(db: Session, today: Optional[date] = None) -> int:
    """Bulk variant for the periodic job. Returns the number of rows changed."""
    today = today or date.today()
    updated = db.query(models_check_in.CheckIn).filter(
        models_check_in.CheckIn.scheduled_date < today,
        models_check_in.CheckIn.status.in_(OPEN_STATUSES)
    ).update({models_check_in.CheckIn.status: CheckInStatus.OVERDUE}, synchronize_session=False)
    db.commit()
    if updated:
        logger.info("Marked %s check-ins as overdue", updated)
    return updated
