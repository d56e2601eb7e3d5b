from app.models.organization import Organization
from app.models.user import User, UserRole
from app.models.team import Team
from app.models.team_membership import TeamMembership
from app.models.check_in import CheckIn, CheckInStatus
from app.models.organization_invitation import OrganizationInvitation, InvitationStatus
