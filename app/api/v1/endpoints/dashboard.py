from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_current_active_user
from app.models import user as models_user
from app.schemas import team as schemas_team
from app.schemas.page import Page
from app.services import team_service

router = APIRouter()


@router.get("/", response_model=Page)
def dashboard(
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    teams = team_service.get_user_teams(db, current_user.id)
    return Page(component="Dashboard", props={
        "teams": [schemas_team.Team.model_validate(team) for team in teams],
    })
