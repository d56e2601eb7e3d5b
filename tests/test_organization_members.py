from datetime import datetime, timedelta

from app.models import CheckIn, OrganizationInvitation, TeamMembership, User, UserRole
from app.models.organization_invitation import InvitationStatus
from app.services import team_membership_service, user_service

API = "/api/v1/organization/members"


def test_members_index(client, owner, admin, member, make_team, auth_headers):
    make_team(owner.organization, "Zeta", members=[member])
    make_team(owner.organization, "Alpha", members=[member, admin])

    response = client.get(f"{API}/", headers=auth_headers(admin))
    assert response.status_code == 200
    page = response.json()
    assert page["component"] == "Organization/Members"
    assert page["props"]["organization"]["name"] == "Acme"
    assert [m["name"] for m in page["props"]["members"]] == ["Adam Admin", "Mia Member", "Olivia Owner"]
    assert [t["name"] for t in page["props"]["teams"]] == ["Alpha", "Zeta"]
    mia = page["props"]["members"][1]
    assert [t["name"] for t in mia["teams"]] == ["Alpha", "Zeta"]


def test_member_cannot_list_members(client, member, auth_headers):
    response = client.get(f"{API}/", headers=auth_headers(member))
    assert response.status_code == 403


def test_member_show(client, owner, member, make_organization, make_user, auth_headers):
    response = client.get(f"{API}/{member.id}", headers=auth_headers(owner))
    assert response.status_code == 200
    assert response.json()["component"] == "Organization/MemberShow"
    assert response.json()["props"]["member"]["email"] == "member@example.com"

    outsider = make_user(make_organization("Globex"), UserRole.MEMBER)
    response = client.get(f"{API}/{outsider.id}", headers=auth_headers(owner))
    assert response.status_code == 403

    response = client.get(f"{API}/9999", headers=auth_headers(owner))
    assert response.status_code == 404


def test_create_member(client, db, admin, auth_headers):
    response = client.post(f"{API}/", headers=auth_headers(admin), json={
        "name": "New Person",
        "email": "new.person@example.com",
        "password": "s3cret-pass",
        "role": "admin",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "admin"
    assert body["organization_id"] == admin.organization_id

    response = client.post(f"{API}/", headers=auth_headers(admin), json={
        "name": "Duplicate",
        "email": "new.person@example.com",
        "password": "s3cret-pass",
    })
    assert response.status_code == 422
    assert response.json()["errors"]["email"] == "The email has already been taken."


def test_admin_cannot_create_owner(client, db, admin, auth_headers):
    response = client.post(f"{API}/", headers=auth_headers(admin), json={
        "name": "Boss",
        "email": "boss@example.com",
        "password": "s3cret-pass",
        "role": "owner",
    })
    assert response.status_code == 403
    assert db.query(User).filter(User.email == "boss@example.com").first() is None


def test_role_updates(client, db, owner, admin, member, make_user, auth_headers):
    second_owner = make_user(owner.organization, UserRole.OWNER)

    response = client.patch(f"{API}/{member.id}/role", headers=auth_headers(admin), json={"role": "admin"})
    assert response.status_code == 200
    assert response.json()["role"] == "admin"

    response = client.patch(f"{API}/{second_owner.id}/role", headers=auth_headers(admin), json={"role": "member"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Admins cannot change owner roles."

    response = client.patch(f"{API}/{member.id}/role", headers=auth_headers(admin), json={"role": "owner"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Admins cannot promote users to owner."

    response = client.patch(f"{API}/{second_owner.id}/role", headers=auth_headers(owner), json={"role": "admin"})
    assert response.status_code == 200
    assert response.json()["role"] == "admin"

    response = client.patch(f"{API}/{owner.id}/role", headers=auth_headers(owner), json={"role": "member"})
    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot change your own role."


def test_member_cannot_update_roles(client, member, admin, auth_headers):
    response = client.patch(f"{API}/{admin.id}/role", headers=auth_headers(member), json={"role": "member"})
    assert response.status_code == 403


def test_cannot_update_role_in_other_organization(client, owner, make_organization, make_user, auth_headers):
    outsider = make_user(make_organization("Globex"), UserRole.MEMBER)
    response = client.patch(f"{API}/{outsider.id}/role", headers=auth_headers(owner), json={"role": "admin"})
    assert response.status_code == 403


def test_assign_and_remove_team_membership(client, db, admin, member, make_team, auth_headers):
    team = make_team(admin.organization)

    response = client.post(f"{API}/{member.id}/teams/{team.id}", headers=auth_headers(admin))
    assert response.status_code == 201

    response = client.post(f"{API}/{member.id}/teams/{team.id}", headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Member is already assigned to this team."
    assert db.query(TeamMembership).filter_by(user_id=member.id, team_id=team.id).count() == 1

    response = client.delete(f"{API}/{member.id}/teams/{team.id}", headers=auth_headers(admin))
    assert response.status_code == 204
    assert db.query(TeamMembership).filter_by(user_id=member.id, team_id=team.id).count() == 0

    response = client.delete(f"{API}/{member.id}/teams/{team.id}", headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Member is not assigned to this team."


def test_assign_to_team_of_other_organization(client, admin, member, make_organization, make_team, auth_headers):
    foreign_team = make_team(make_organization("Globex"), "Beta")
    response = client.post(f"{API}/{member.id}/teams/{foreign_team.id}", headers=auth_headers(admin))
    assert response.status_code == 403


def test_member_cannot_assign_teams(client, member, make_team, auth_headers):
    team = make_team(member.organization)
    response = client.post(f"{API}/{member.id}/teams/{team.id}", headers=auth_headers(member))
    assert response.status_code == 403


def test_delete_member_with_teams_is_rejected(client, db, owner, member, make_team, auth_headers):
    make_team(owner.organization, members=[member])

    response = client.delete(f"{API}/{member.id}", headers=auth_headers(owner))
    assert response.status_code == 400
    assert response.json()["detail"] == (
        "Cannot delete members who are assigned to teams. Please remove them from all teams first."
    )
    assert db.get(User, member.id) is not None


def test_delete_member_without_teams(client, db, owner, admin, member, make_team, make_check_in, auth_headers):
    team = make_team(owner.organization, members=[owner])
    check_in = make_check_in(team, owner, member)
    db.add(OrganizationInvitation(
        email="guest@example.com",
        organization_id=owner.organization_id,
        invited_by_user_id=member.id,
        token="member-sent-token",
        status=InvitationStatus.PENDING,
        expires_at=datetime.utcnow() + timedelta(days=7),
    ))
    db.commit()
    member_id = member.id
    check_in_id = check_in.id

    response = client.delete(f"{API}/{member_id}", headers=auth_headers(admin))
    assert response.status_code == 204

    db.expire_all()
    assert db.get(User, member_id) is None
    assert db.get(CheckIn, check_in_id) is None
    assert db.query(OrganizationInvitation).filter_by(invited_by_user_id=member_id).count() == 0


def test_cannot_delete_self(client, owner, auth_headers):
    response = client.delete(f"{API}/{owner.id}", headers=auth_headers(owner))
    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot delete your own account."


def test_member_cannot_delete_members(client, member, admin, auth_headers):
    response = client.delete(f"{API}/{admin.id}", headers=auth_headers(member))
    assert response.status_code == 403


def test_assignment_race_maps_unique_violation_to_conflict(client, db, admin, member, make_team, auth_headers,
                                                           monkeypatch):
    team = make_team(admin.organization, members=[member])
    monkeypatch.setattr(team_membership_service, "is_user_in_team", lambda *args: False)

    response = client.post(f"{API}/{member.id}/teams/{team.id}", headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Member is already assigned to this team."
    assert db.query(TeamMembership).filter_by(user_id=member.id, team_id=team.id).count() == 1

    response = client.get(f"{API}/", headers=auth_headers(admin))
    assert response.status_code == 200


def test_create_member_race_maps_unique_violation_to_validation_error(client, db, admin, member, auth_headers,
                                                                      monkeypatch):
    monkeypatch.setattr(user_service, "get_user_by_email", lambda *args, **kwargs: None)

    response = client.post(f"{API}/", headers=auth_headers(admin), json={
        "name": "Twin",
        "email": member.email,
        "password": "s3cret-pass",
    })
    assert response.status_code == 422
    assert response.json()["errors"]["email"] == "The email has already been taken."
    assert db.query(User).filter_by(email=member.email).count() == 1

    response = client.get(f"{API}/", headers=auth_headers(admin))
    assert response.status_code == 200
