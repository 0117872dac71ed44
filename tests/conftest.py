import pytest
from fastapi.testclient import TestClient

from finance_tracker.config import Settings
from finance_tracker.database import build_engine, build_sessionmaker, init_db
from finance_tracker.main import create_app


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        jwt_secret="test-secret",
        log_level="WARNING",
    )


@pytest.fixture
def db(settings):
    """A session on a fresh in-memory database."""
    engine = build_engine(settings)
    init_db(engine)
    session = build_sessionmaker(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # entering the context runs the lifespan, which opens the database
    with TestClient(app) as c:
        yield c


def register(client, email="ada@example.com", password="s3cret-pass", name="Ada"):
    return client.post(
        "/api/users/register",
        json={"name": name, "email": email, "password": password},
    )


def login_headers(client, email="ada@example.com", password="s3cret-pass", name="Ada"):
    register(client, email=email, password=password, name=name)
    res = client.post("/api/users/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    return login_headers(client)


@pytest.fixture
def other_headers(client):
    return login_headers(client, email="grace@example.com", name="Grace")
