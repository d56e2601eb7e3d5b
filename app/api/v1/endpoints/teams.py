from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_current_active_user
from app.models import user as models_user
from app.schemas import team as schemas_team, check_in as schemas_check_in
from app.schemas.page import Page
from app.services import team_service

router = APIRouter()


@router.get("/", response_model=Page)
def read_teams(
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    teams = team_service.get_user_teams(db, current_user.id)
    return Page(component="Teams/Index", props={
        "teams": [schemas_team.Team.model_validate(team) for team in teams],
    })


@router.post("/", response_model=schemas_team.Team, status_code=status.HTTP_201_CREATED)
def create_team(
    team: schemas_team.TeamCreate,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    return team_service.create_team(db=db, actor=current_user, team=team)


@router.get("/{team_id}", response_model=Page)
def read_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    db_team, recent_check_ins = team_service.show_team(db, actor=current_user, team_id=team_id)
    return Page(component="Teams/Show", props={
        "team": schemas_team.Team.model_validate(db_team),
        "recent_check_ins": [schemas_check_in.CheckIn.model_validate(c) for c in recent_check_ins],
    })
