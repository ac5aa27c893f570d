import os
import tempfile

# Must be set before the application modules are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="factory_ops_logs_"))
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app

FACTORY_ID = "factory-1"
OWNER_PASSWORD = "owner-pass-123"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    """A session for exercising crud functions directly."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def login(client, email, password):
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def owner_headers(client):
    response = client.post("/signup", json={
        "email": "owner@acme.test",
        "password": OWNER_PASSWORD,
        "name": "Olive Owner",
        "factory_name": "Acme Works",
    })
    assert response.status_code == 200, response.text
    return login(client, "owner@acme.test", OWNER_PASSWORD)


@pytest.fixture()
def staff_headers(client, owner_headers):
    """Factory returning auth headers for a new staff member with the given role."""
    def make(role):
        email = f"{role.lower().replace(' ', '.')}@acme.test"
        response = client.post("/users", headers=owner_headers, json={
            "email": email,
            "password": "staff-pass-123",
            "name": role,
            "role": role,
        })
        assert response.status_code == 201, response.text
        return login(client, email, "staff-pass-123")
    return make
