from datetime import date, timedelta

from app.models import CheckIn, CheckInStatus, UserRole
from app.services import check_in_service

API = "/api/v1/check-ins"


def future(days=7):
    return (date.today() + timedelta(days=days)).isoformat()


def test_end_to_end_check_in_lifecycle(client, db, acme, owner, make_user, make_team, auth_headers):
    member_x = make_user(acme, UserRole.MEMBER, name="Member X", email="x@example.com")
    member_y = make_user(acme, UserRole.MEMBER, name="Member Y", email="y@example.com")
    alpha = make_team(acme, "Alpha", members=[owner, member_x, member_y])

    response = client.post(f"{API}/", headers=auth_headers(owner), json={
        "title": "Audit",
        "team_id": alpha.id,
        "assigned_user_id": member_x.id,
        "scheduled_date": future(7),
    })
    assert response.status_code == 201
    created = response.json()
    assert created["status"] == "pending"
    assert created["created_by_user_id"] == owner.id
    assert created["team"]["name"] == "Alpha"
    check_in_id = created["id"]

    response = client.patch(f"{API}/{check_in_id}/in-progress", headers=auth_headers(member_x))
    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"

    response = client.patch(f"{API}/{check_in_id}/complete", headers=auth_headers(member_x), json={"notes": "done"})
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["completed_at"] is not None
    assert body["notes"] == "done"

    response = client.patch(f"{API}/{check_in_id}/complete", headers=auth_headers(member_y), json={})
    assert response.status_code == 403


def test_complete_without_notes_stores_null(client, owner, member, make_team, make_check_in, auth_headers):
    team = make_team(owner.organization, members=[owner, member])
    check_in = make_check_in(team, member, owner)

    response = client.patch(f"{API}/{check_in.id}/complete", headers=auth_headers(member), json={})
    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["notes"] is None


def test_completed_check_in_is_terminal(client, owner, member, make_team, make_check_in, auth_headers):
    team = make_team(owner.organization, members=[member])
    check_in = make_check_in(team, member, owner, status=CheckInStatus.COMPLETED)

    response = client.patch(f"{API}/{check_in.id}/in-progress", headers=auth_headers(member))
    assert response.status_code == 400

    response = client.patch(f"{API}/{check_in.id}/complete", headers=auth_headers(member), json={"notes": "again"})
    assert response.status_code == 400


def test_creator_cannot_mark_someone_elses_check_in(client, owner, member, make_team, make_check_in, auth_headers):
    team = make_team(owner.organization, members=[member])
    check_in = make_check_in(team, member, owner)

    response = client.patch(f"{API}/{check_in.id}/in-progress", headers=auth_headers(owner))
    assert response.status_code == 403
    assert response.json()["detail"] == "Only the assigned user can mark this check-in as in progress."


def test_member_cannot_create_check_in(client, member, make_team, auth_headers):
    team = make_team(member.organization, members=[member])
    response = client.post(f"{API}/", headers=auth_headers(member), json={
        "title": "Sneaky",
        "team_id": team.id,
        "assigned_user_id": member.id,
        "scheduled_date": future(),
    })
    assert response.status_code == 403


def test_create_rejects_past_date(client, owner, member, make_team, auth_headers):
    team = make_team(owner.organization, members=[member])
    response = client.post(f"{API}/", headers=auth_headers(owner), json={
        "title": "Late",
        "team_id": team.id,
        "assigned_user_id": member.id,
        "scheduled_date": (date.today() - timedelta(days=1)).isoformat(),
    })
    assert response.status_code == 422
    assert response.json()["errors"]["scheduled_date"] == "The scheduled date must be today or in the future."


def test_create_rejects_missing_title(client, owner, member, make_team, auth_headers):
    team = make_team(owner.organization, members=[member])
    response = client.post(f"{API}/", headers=auth_headers(owner), json={
        "team_id": team.id,
        "assigned_user_id": member.id,
        "scheduled_date": future(),
    })
    assert response.status_code == 422
    assert "title" in response.json()["errors"]


def test_create_rejects_team_and_user_of_other_organization(client, owner, make_organization, make_user, make_team,
                                                            auth_headers):
    globex = make_organization("Globex")
    outsider = make_user(globex, UserRole.MEMBER)
    foreign_team = make_team(globex, "Beta", members=[outsider])

    response = client.post(f"{API}/", headers=auth_headers(owner), json={
        "title": "Cross",
        "team_id": foreign_team.id,
        "assigned_user_id": outsider.id,
        "scheduled_date": future(),
    })
    assert response.status_code == 422
    errors = response.json()["errors"]
    assert errors["team_id"] == "The selected team is invalid."
    assert errors["assigned_user_id"] == "The selected user is invalid."


def test_index_is_scoped_by_role(client, owner, admin, member, make_user, make_team, make_check_in, auth_headers):
    other = make_user(owner.organization, UserRole.MEMBER)
    team = make_team(owner.organization, members=[member, other])
    make_check_in(team, member, owner, title="Mine")
    make_check_in(team, other, owner, title="Theirs")

    response = client.get(f"{API}/", headers=auth_headers(member))
    assert response.status_code == 200
    page = response.json()
    assert page["component"] == "CheckIns/Index"
    titles = [item["title"] for item in page["props"]["check_ins"]["data"]]
    assert titles == ["Mine"]
    assert page["props"]["stats"]["total"] == 1

    for actor in (owner, admin):
        response = client.get(f"{API}/", headers=auth_headers(actor))
        assert response.json()["props"]["check_ins"]["total"] == 2


def test_index_filters_sorting_and_pagination(client, owner, member, make_team, make_check_in, auth_headers):
    team = make_team(owner.organization, members=[member])
    other_team = make_team(owner.organization, "Beta", members=[member])
    for day in range(1, 18):
        make_check_in(team, member, owner, title=f"Standup {day:02d}", scheduled_date=date.today() + timedelta(days=day))
    make_check_in(other_team, member, owner, title="Retro", status=CheckInStatus.COMPLETED)

    response = client.get(f"{API}/", headers=auth_headers(owner))
    listing = response.json()["props"]["check_ins"]
    assert listing["total"] == 18
    assert listing["per_page"] == 15
    assert listing["last_page"] == 2
    assert len(listing["data"]) == 15

    response = client.get(f"{API}/", headers=auth_headers(owner), params={"page": 2})
    assert len(response.json()["props"]["check_ins"]["data"]) == 3

    response = client.get(f"{API}/", headers=auth_headers(owner), params={"team_id": other_team.id})
    assert [c["title"] for c in response.json()["props"]["check_ins"]["data"]] == ["Retro"]

    response = client.get(f"{API}/", headers=auth_headers(owner), params={"status": "completed"})
    assert response.json()["props"]["check_ins"]["total"] == 1

    response = client.get(f"{API}/", headers=auth_headers(owner), params={"search": "standup 1"})
    assert response.json()["props"]["check_ins"]["total"] == 8

    response = client.get(f"{API}/", headers=auth_headers(owner),
                          params={"sort_by": "title", "sort_direction": "desc"})
    assert response.json()["props"]["check_ins"]["data"][0]["title"] == "Standup 17"
    assert response.json()["props"]["filters"]["sort_by"] == "title"


def test_index_rejects_unknown_sort_column(client, owner, auth_headers):
    response = client.get(f"{API}/", headers=auth_headers(owner), params={"sort_by": "password"})
    assert response.status_code == 422
    assert "sort_by" in response.json()["errors"]


def test_stats(db, owner, member, make_team, make_check_in):
    team = make_team(owner.organization, members=[member])
    make_check_in(team, member, owner, status=CheckInStatus.PENDING)
    make_check_in(team, member, owner, status=CheckInStatus.IN_PROGRESS)
    make_check_in(team, member, owner, status=CheckInStatus.COMPLETED)
    make_check_in(team, member, owner, status=CheckInStatus.COMPLETED,
                  scheduled_date=date.today() - timedelta(days=3))
    make_check_in(team, member, owner, status=CheckInStatus.PENDING,
                  scheduled_date=date.today() - timedelta(days=2))

    stats = check_in_service.get_stats(db, owner)
    assert stats.total == 5
    assert stats.pending == 2
    assert stats.in_progress == 1
    assert stats.completed == 2
    assert stats.overdue == 1
    assert stats.completion_rate == 40.0


def test_stats_without_check_ins(db, member):
    stats = check_in_service.get_stats(db, member)
    assert stats.total == 0
    assert stats.completion_rate == 0


def test_show_check_in(client, owner, member, make_user, make_team, make_check_in, auth_headers):
    other = make_user(owner.organization, UserRole.MEMBER)
    team = make_team(owner.organization, members=[member, other])
    check_in = make_check_in(team, member, owner)

    response = client.get(f"{API}/{check_in.id}", headers=auth_headers(member))
    assert response.status_code == 200
    assert response.json()["component"] == "CheckIns/Show"
    assert response.json()["props"]["check_in"]["assigned_user"]["id"] == member.id

    response = client.get(f"{API}/{check_in.id}", headers=auth_headers(other))
    assert response.status_code == 403

    response = client.get(f"{API}/9999", headers=auth_headers(owner))
    assert response.status_code == 404


def test_create_and_edit_forms(client, owner, member, make_team, make_check_in, auth_headers):
    team = make_team(owner.organization, members=[member])
    check_in = make_check_in(team, member, owner)

    response = client.get(f"{API}/create", headers=auth_headers(owner))
    assert response.status_code == 200
    props = response.json()["props"]
    assert [t["id"] for t in props["teams"]] == [team.id]
    assert {u["id"] for u in props["users"]} == {owner.id, member.id}

    response = client.get(f"{API}/create", headers=auth_headers(member))
    assert response.status_code == 403

    response = client.get(f"{API}/{check_in.id}/edit", headers=auth_headers(owner))
    assert response.status_code == 200
    assert response.json()["component"] == "CheckIns/Edit"
    assert response.json()["props"]["check_in"]["id"] == check_in.id


def test_update_check_in(client, owner, admin, member, make_team, make_check_in, auth_headers):
    team = make_team(owner.organization, members=[member])
    check_in = make_check_in(team, member, admin, title="Old title")

    response = client.put(f"{API}/{check_in.id}", headers=auth_headers(admin),
                          json={"title": "New title", "description": "Details"})
    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "New title"
    assert body["description"] == "Details"
    assert body["status"] == "pending"

    response = client.put(f"{API}/{check_in.id}", headers=auth_headers(member), json={"title": "Mine now"})
    assert response.status_code == 403

    response = client.put(f"{API}/{check_in.id}", headers=auth_headers(owner), json={"title": None})
    assert response.status_code == 422


def test_delete_check_in(client, db, owner, admin, member, make_team, make_check_in, auth_headers):
    team = make_team(owner.organization, members=[member])
    check_in = make_check_in(team, member, owner)

    response = client.delete(f"{API}/{check_in.id}", headers=auth_headers(admin))
    assert response.status_code == 403

    response = client.delete(f"{API}/{check_in.id}", headers=auth_headers(owner))
    assert response.status_code == 204
    assert db.query(CheckIn).filter(CheckIn.id == check_in.id).first() is None


def test_overdue_is_derived_until_reconciled(client, db, owner, member, make_team, make_check_in, auth_headers):
    team = make_team(owner.organization, members=[member])
    check_in = make_check_in(team, member, owner, scheduled_date=date.today() - timedelta(days=1))

    response = client.get(f"{API}/{check_in.id}", headers=auth_headers(member))
    shown = response.json()["props"]["check_in"]
    assert shown["is_overdue"] is True
    assert shown["status"] == "pending"

    response = client.patch(f"{API}/{check_in.id}/overdue", headers=auth_headers(owner))
    assert response.status_code == 200
    assert response.json()["status"] == "overdue"

    response = client.patch(f"{API}/{check_in.id}/in-progress", headers=auth_headers(member))
    assert response.json()["status"] == "in_progress"


def test_reconcile_overdue_check_ins(db, owner, member, make_team, make_check_in):
    team = make_team(owner.organization, members=[member])
    late = make_check_in(team, member, owner, scheduled_date=date.today() - timedelta(days=2))
    late_started = make_check_in(team, member, owner, scheduled_date=date.today() - timedelta(days=1),
                                 status=CheckInStatus.IN_PROGRESS)
    done = make_check_in(team, member, owner, scheduled_date=date.today() - timedelta(days=2),
                         status=CheckInStatus.COMPLETED)
    upcoming = make_check_in(team, member, owner)

    assert check_in_service.reconcile_overdue_check_ins(db) == 2

    db.expire_all()
    assert db.get(CheckIn, late.id).status == CheckInStatus.OVERDUE
    assert db.get(CheckIn, late_started.id).status == CheckInStatus.OVERDUE
    assert db.get(CheckIn, done.id).status == CheckInStatus.COMPLETED
    assert db.get(CheckIn, upcoming.id).status == CheckInStatus.PENDING


def test_search_treats_wildcards_literally(client, owner, member, make_team, make_check_in, auth_headers):
    team = make_team(owner.organization, "Alpha", members=[owner, member])
    make_check_in(team, member, owner, title="Hit 100% of goals")
    make_check_in(team, member, owner, title="Quarterly review")
    make_check_in(team, member, owner, title="snake_case cleanup")
    make_check_in(team, member, owner, title="snakecase docs")

    response = client.get(f"{API}/", headers=auth_headers(owner), params={"search": "100%"})
    assert [c["title"] for c in response.json()["props"]["check_ins"]["data"]] == ["Hit 100% of goals"]

    response = client.get(f"{API}/", headers=auth_headers(owner), params={"search": "%"})
    assert response.json()["props"]["check_ins"]["total"] == 1

    response = client.get(f"{API}/", headers=auth_headers(owner), params={"search": "snake_"})
    assert [c["title"] for c in response.json()["props"]["check_ins"]["data"]] == ["snake_case cleanup"]
