"""Shared fixtures: in-memory SQLite database, seeded tenants and an API client."""
import os

# Point settings at SQLite before tracker_core creates its engine
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tracker_core import models
from tracker_core.api.main import app
from tracker_core.database import get_db


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=engine)
    yield engine
    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def tenants(db):
    """Two organizations: A with an admin and a member, B with a member."""
    org_a = models.Organization(name="Org A")
    org_b = models.Organization(name="Org B")
    db.add_all([org_a, org_b])
    db.flush()

    users = {
        "admin_a": models.User(name="Alice Admin", email="alice@a.example", role=models.Role.ADMIN, organization_id=org_a.id),
        "member_a": models.User(name="Mark Member", email="mark@a.example", role=models.Role.MEMBER, organization_id=org_a.id),
        "member_b": models.User(name="Bob Other", email="bob@b.example", role=models.Role.MEMBER, organization_id=org_b.id),
    }
    db.add_all(users.values())
    db.commit()

    return {
        "org_a": org_a.id,
        "org_b": org_b.id,
        **{name: user.id for name, user in users.items()},
    }


@pytest.fixture
def client(session_factory):
    """API client whose requests use the test database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def headers(tenants):
    """Build tenant headers for a seeded user."""

    def build(user: str, org: str, role: str) -> dict:
        return {
            "x-user-id": str(tenants[user]),
            "x-org-id": str(tenants[org]),
            "x-user-role": role,
        }

    return build
