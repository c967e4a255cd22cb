import os

# The engine in app.database is built at import time from DATABASE_URL.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, get_db
from app.main import app as fastapi_app

BUTARO_USER = {
    "name": "Jeanne Uwase",
    "email": "jeanne@butaro.rw",
    "password": "secret123",
    "province": "Northern",
    "district": "Burera",
    "hospital": "BUTARO HOSPITAL",
}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = _get_db
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


def register(client, **overrides):
    payload = {**BUTARO_USER, **overrides}
    return client.post("/api/auth/register", json=payload)


def login(client, email=BUTARO_USER["email"], password=BUTARO_USER["password"]):
    return client.post("/api/auth/login", data={"username": email, "password": password})


@pytest.fixture
def auth_headers(client):
    assert register(client).status_code == 201
    response = login(client)
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def hiv_plan(client, auth_headers):
    response = client.post(
        "/api/plans",
        json={
            "facility_name": "BUTARO HOSPITAL",
            "facility_type": "Hospital",
            "program": "HIV",
            "fiscal_year": "FY 2024",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
