from fastapi import APIRouter

from app.api.v1.endpoints import auth, dashboard, teams, organization_members, check_ins, invitations


api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(teams.router, prefix="/teams", tags=["teams"])
api_router.include_router(organization_members.router, prefix="/organization/members", tags=["organization-members"])
api_router.include_router(check_ins.router, prefix="/check-ins", tags=["check-ins"])
api_router.include_router(invitations.router, prefix="/invitations", tags=["invitations"])
