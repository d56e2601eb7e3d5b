"""
Authorization Service
Role-based rules deciding who may act on whom.

`can()` is a pure evaluation over already-loaded entities: it never queries
or mutates. Every rule that involves a target also requires the actor and
the target to live in the same organization.
"""
import enum
from typing import Any, Callable, Dict, Optional

from app.core.exceptions import ForbiddenError
from app.models.check_in import CheckIn
from app.models.team import Team
from app.models.user import User, UserRole


class Action(str, enum.Enum):
    CREATE_CHECK_IN = "check_in:create"
    VIEW_CHECK_IN = "check_in:view"
    UPDATE_CHECK_IN = "check_in:update"
    DELETE_CHECK_IN = "check_in:delete"
    MARK_CHECK_IN_IN_PROGRESS = "check_in:mark_in_progress"
    MARK_CHECK_IN_COMPLETE = "check_in:mark_complete"
    VIEW_TEAM = "team:view"
    CREATE_TEAM = "team:create"
    VIEW_MEMBERS = "member:view"
    CREATE_MEMBER = "member:create"
    UPDATE_MEMBER_ROLE = "member:update_role"
    DELETE_MEMBER = "member:delete"
    MANAGE_TEAM_MEMBERSHIP = "team_membership:manage"
    SEND_INVITATION = "invitation:send"
    MANAGE_INVITATION = "invitation:manage"


DEFAULT_MESSAGES = {
    Action.CREATE_CHECK_IN: "Only admins and owners can create check-ins.",
    Action.MARK_CHECK_IN_IN_PROGRESS: "Only the assigned user can mark this check-in as in progress.",
    Action.MARK_CHECK_IN_COMPLETE: "Only the assigned user can mark this check-in as completed.",
    Action.VIEW_MEMBERS: "Only admins and owners can view organization members.",
    Action.CREATE_MEMBER: "Only admins and owners can create organization members.",
    Action.UPDATE_MEMBER_ROLE: "Only admins and owners can update member roles.",
    Action.DELETE_MEMBER: "Only admins and owners can delete organization members.",
    Action.MANAGE_TEAM_MEMBERSHIP: "Only admins and owners can manage team assignments.",
    Action.SEND_INVITATION: "Only admins and owners can send invitations.",
    Action.MANAGE_INVITATION: "Only admins and owners can manage invitations.",
}


def has_admin_capability(role: Optional[UserRole]) -> bool:
    return role in (UserRole.ADMIN, UserRole.OWNER)


def same_organization(actor: User, organization_id: Optional[int]) -> bool:
    return actor.organization_id is not None and actor.organization_id == organization_id


def _is_assignee(actor: User, check_in: CheckIn) -> bool:
    return check_in.assigned_user_id == actor.id and same_organization(actor, check_in.organization_id)


# Check-in rules

def _create_check_in(actor: User, target: Any = None, **_) -> bool:
    return has_admin_capability(actor.role) and actor.organization_id is not None


def _view_check_in(actor: User, check_in: CheckIn, **_) -> bool:
    if not same_organization(actor, check_in.organization_id):
        return False
    return check_in.assigned_user_id == actor.id or has_admin_capability(actor.role)


def _change_check_in(actor: User, check_in: CheckIn, **_) -> bool:
    if not same_organization(actor, check_in.organization_id):
        return False
    return check_in.created_by_user_id == actor.id or actor.role == UserRole.OWNER


def _mark_check_in(actor: User, check_in: CheckIn, **_) -> bool:
    return _is_assignee(actor, check_in)


# Team rules

def _view_team(actor: User, team: Team, **_) -> bool:
    if not same_organization(actor, team.organization_id):
        return False
    return any(member.id == actor.id for member in team.members)


def _create_team(actor: User, target: Any = None, **_) -> bool:
    return actor.organization_id is not None


# Member rules

def _admin_in_organization(actor: User, target: Any = None, **_) -> bool:
    if not has_admin_capability(actor.role) or actor.organization_id is None:
        return False
    if target is None:
        return True
    return same_organization(actor, target.organization_id)


def _create_member(actor: User, target: Any = None, new_role: Optional[UserRole] = None, **_) -> bool:
    if not _admin_in_organization(actor):
        return False
    return not (actor.role == UserRole.ADMIN and new_role == UserRole.OWNER)


def _update_member_role(actor: User, member: User, new_role: Optional[UserRole] = None, **_) -> bool:
    if not _admin_in_organization(actor, member) or actor.id == member.id:
        return False
    if actor.role == UserRole.ADMIN:
        # Admins cannot touch owners nor hand out ownership
        return member.role != UserRole.OWNER and new_role != UserRole.OWNER
    return True


def _delete_member(actor: User, member: User, **_) -> bool:
    return _admin_in_organization(actor, member) and actor.id != member.id


def _manage_team_membership(actor: User, member: User, team: Optional[Team] = None, **_) -> bool:
    if team is None or not _admin_in_organization(actor, member):
        return False
    return same_organization(actor, team.organization_id)


RULES: Dict[Action, Callable[..., bool]] = {
    Action.CREATE_CHECK_IN: _create_check_in,
    Action.VIEW_CHECK_IN: _view_check_in,
    Action.UPDATE_CHECK_IN: _change_check_in,
    Action.DELETE_CHECK_IN: _change_check_in,
    Action.MARK_CHECK_IN_IN_PROGRESS: _mark_check_in,
    Action.MARK_CHECK_IN_COMPLETE: _mark_check_in,
    Action.VIEW_TEAM: _view_team,
    Action.CREATE_TEAM: _create_team,
    Action.VIEW_MEMBERS: _admin_in_organization,
    Action.CREATE_MEMBER: _create_member,
    Action.UPDATE_MEMBER_ROLE: _update_member_role,
    Action.DELETE_MEMBER: _delete_member,
    Action.MANAGE_TEAM_MEMBERSHIP: _manage_team_membership,
    Action.SEND_INVITATION: _admin_in_organization,
    Action.MANAGE_INVITATION: _admin_in_organization,
}

# Actions that are meaningless without a target entity
TARGETED_ACTIONS = {
    Action.VIEW_CHECK_IN,
    Action.UPDATE_CHECK_IN,
    Action.DELETE_CHECK_IN,
    Action.MARK_CHECK_IN_IN_PROGRESS,
    Action.MARK_CHECK_IN_COMPLETE,
    Action.VIEW_TEAM,
    Action.UPDATE_MEMBER_ROLE,
    Action.DELETE_MEMBER,
    Action.MANAGE_TEAM_MEMBERSHIP,
}


def can(actor: Optional[User], action: Action, target: Any = None, **context) -> bool:
    """
    Decide whether `actor` may perform `action` on `target`.

    Extra context is passed by keyword: `new_role` for role changes and
    member creation, `team` for team assignments.
    """
    if actor is None or actor.is_active is False:
        return False
    if action in TARGETED_ACTIONS and target is None:
        return False
    return RULES[action](actor, target, **context)


def authorize(actor: Optional[User], action: Action, target: Any = None, message: Optional[str] = None, **context) -> None:
    """Raise ForbiddenError unless the action is permitted."""
    if not can(actor, action, target, **context):
        raise ForbiddenError(message or DEFAULT_MESSAGES.get(action, "This action is unauthorized."))
