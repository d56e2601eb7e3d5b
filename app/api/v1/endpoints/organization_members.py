"""
Organization member administration endpoints (owners and admins)
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_current_active_user
from app.models import user as models_user
from app.schemas import (
    organization as schemas_organization,
    team as schemas_team,
    team_membership as schemas_team_membership,
    user as schemas_user,
)
from app.schemas.page import Page
from app.services import member_service, team_membership_service

router = APIRouter()


@router.get("/", response_model=Page)
def read_members(
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    organization, members, teams = member_service.list_members(db, actor=current_user)
    return Page(component="Organization/Members", props={
        "organization": schemas_organization.Organization.model_validate(organization),
        "members": [schemas_user.UserWithTeams.model_validate(member) for member in members],
        "teams": [schemas_team.TeamSummary.model_validate(team) for team in teams],
    })


@router.post("/", response_model=schemas_user.User, status_code=status.HTTP_201_CREATED)
def create_member(
    user: schemas_user.UserCreate,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    return member_service.create_member(db, actor=current_user, user=user)


@router.get("/{member_id}", response_model=Page)
def read_member(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    member = member_service.get_member(db, actor=current_user, member_id=member_id)
    return Page(component="Organization/MemberShow", props={
        "member": schemas_user.UserWithTeams.model_validate(member),
    })


@router.post("/{member_id}/teams/{team_id}", response_model=schemas_team_membership.TeamMembership,
             status_code=status.HTTP_201_CREATED)
def assign_to_team(
    member_id: int,
    team_id: int,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    return team_membership_service.assign_member_to_team(db, actor=current_user, member_id=member_id, team_id=team_id)


@router.delete("/{member_id}/teams/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_from_team(
    member_id: int,
    team_id: int,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    team_membership_service.remove_member_from_team(db, actor=current_user, member_id=member_id, team_id=team_id)
    return None


@router.patch("/{member_id}/role", response_model=schemas_user.User)
def update_role(
    member_id: int,
    role_update: schemas_user.RoleUpdate,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    return member_service.update_member_role(db, actor=current_user, member_id=member_id, role=role_update.role)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_member(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: models_user.User = Depends(get_current_active_user)
):
    member_service.delete_member(db, actor=current_user, member_id=member_id)
    return None
