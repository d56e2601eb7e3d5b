from app.schemas.organization import Organization
from app.schemas.user import User, UserCreate, UserSummary, UserWithTeams, RoleUpdate, SignupRequest
from app.schemas.team import Team, TeamCreate, TeamSummary
from app.schemas.team_membership import TeamMembership
from app.schemas.check_in import CheckIn, CheckInCreate, CheckInUpdate, MarkCompleteRequest, CheckInStats, CheckInFilters, PaginatedCheckIns
from app.schemas.organization_invitation import (
    OrganizationInvitation,
    OrganizationInvitationCreate,
    OrganizationInvitationWithLink,
    PublicInvitation,
    AcceptInvitationRequest,
)
from app.schemas.token import Token
from app.schemas.page import Page
