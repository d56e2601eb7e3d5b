from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_current_active_user
from app.models import user as models_user
from app.schemas import check_in as schemas_check_in, team as schemas_team, user as schemas_user
from app.schemas.page import Page
from app.services import check_in_service
from app.services.authorization_service import Action, authorize

router = APIRouter()


def _form_props(teams, users):
    return {
        "teams": [schemas_team.TeamSummary.model_validate(team) for team in teams],
        "users": [schemas_user.UserSummary.model_validate(user) for user in users],
    }


@router.get("/", response_model=Page)
def read_check_ins(
    filters: schemas_check_in.CheckInFilters = Depends(),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    check_ins = check_in_service.list_check_ins(db, actor=current_user, filters=filters, page=page)
    teams, _ = check_in_service.get_form_options(db, current_user)
    return Page(component="CheckIns/Index", props={
        "check_ins": check_ins,
        "teams": [schemas_team.TeamSummary.model_validate(team) for team in teams],
        "stats": check_in_service.get_stats(db, actor=current_user),
        "filters": filters.model_dump(exclude_none=True),
    })


@router.get("/create", response_model=Page)
def create_check_in_form(
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    authorize(current_user, Action.CREATE_CHECK_IN)
    teams, users = check_in_service.get_form_options(db, current_user)
    return Page(component="CheckIns/Create", props=_form_props(teams, users))


@router.post("/", response_model=schemas_check_in.CheckIn, status_code=status.HTTP_201_CREATED)
def create_check_in(
    check_in: schemas_check_in.CheckInCreate,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    return check_in_service.create_check_in(db, actor=current_user, check_in=check_in)


@router.get("/{check_in_id}", response_model=Page)
def read_check_in(
    check_in_id: int,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    db_check_in = check_in_service.show_check_in(db, actor=current_user, check_in_id=check_in_id)
    return Page(component="CheckIns/Show", props={
        "check_in": schemas_check_in.CheckIn.model_validate(db_check_in),
    })


@router.get("/{check_in_id}/edit", response_model=Page)
def edit_check_in_form(
    check_in_id: int,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    db_check_in, teams, users = check_in_service.edit_check_in(db, actor=current_user, check_in_id=check_in_id)
    props = _form_props(teams, users)
    props["check_in"] = schemas_check_in.CheckIn.model_validate(db_check_in)
    return Page(component="CheckIns/Edit", props=props)


@router.put("/{check_in_id}", response_model=schemas_check_in.CheckIn)
def update_check_in(
    check_in_id: int,
    check_in: schemas_check_in.CheckInUpdate,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    return check_in_service.update_check_in(db, actor=current_user, check_in_id=check_in_id, check_in=check_in)


@router.delete("/{check_in_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_check_in(
    check_in_id: int,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    check_in_service.delete_check_in(db, actor=current_user, check_in_id=check_in_id)
    return None


@router.patch("/{check_in_id}/complete", response_model=schemas_check_in.CheckIn)
def mark_complete(
    check_in_id: int,
    request: schemas_check_in.MarkCompleteRequest,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    return check_in_service.mark_complete(db, actor=current_user, check_in_id=check_in_id, notes=request.notes)


@router.patch("/{check_in_id}/in-progress", response_model=schemas_check_in.CheckIn)
def mark_in_progress(
    check_in_id: int,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    return check_in_service.mark_in_progress(db, actor=current_user, check_in_id=check_in_id)


@router.patch("/{check_in_id}/overdue", response_model=schemas_check_in.CheckIn)
def update_overdue_status(
    check_in_id: int,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    return check_in_service.update_overdue_status(db, actor=current_user, check_in_id=check_in_id)
