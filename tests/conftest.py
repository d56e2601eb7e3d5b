import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.core.dependencies import get_db
from app.core.security import create_access_token
from app.main import app
from app.models import CheckIn, CheckInStatus, Organization, Team, TeamMembership, User, UserRole

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_organization(db):
    def _make(name="Acme"):
        organization = Organization(name=name, type="team")
        db.add(organization)
        db.commit()
        db.refresh(organization)
        return organization
    return _make


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(organization, role=UserRole.MEMBER, name=None, email=None):
        counter["n"] += 1
        user = User(
            name=name or f"User {counter['n']}",
            email=email or f"user{counter['n']}@example.com",
            hashed_password="not-a-real-hash",
            role=role,
            organization_id=organization.id if organization else None,
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_team(db):
    def _make(organization, name="Alpha", members=()):
        team = Team(name=name, organization_id=organization.id)
        db.add(team)
        db.flush()
        for member in members:
            db.add(TeamMembership(team_id=team.id, user_id=member.id))
        db.commit()
        db.refresh(team)
        return team
    return _make


@pytest.fixture
def make_check_in(db):
    def _make(team, assignee, creator, title="Weekly sync", scheduled_date=None, status=CheckInStatus.PENDING):
        check_in = CheckIn(
            title=title,
            team_id=team.id,
            assigned_user_id=assignee.id,
            created_by_user_id=creator.id,
            scheduled_date=scheduled_date or date.today() + timedelta(days=7),
            status=status,
        )
        db.add(check_in)
        db.commit()
        db.refresh(check_in)
        return check_in
    return _make


@pytest.fixture
def acme(make_organization):
    return make_organization("Acme")


@pytest.fixture
def owner(acme, make_user):
    return make_user(acme, UserRole.OWNER, name="Olivia Owner", email="owner@example.com")


@pytest.fixture
def admin(acme, make_user):
    return make_user(acme, UserRole.ADMIN, name="Adam Admin", email="admin@example.com")


@pytest.fixture
def member(acme, make_user):
    return make_user(acme, UserRole.MEMBER, name="Mia Member", email="member@example.com")


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(data={"sub": user.email})
        return {"Authorization": f"Bearer {token}"}
    return _headers
