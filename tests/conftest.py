from datetime import date, timedelta

import pytest

from tripmate.api.database import db
from tripmate.main import create_app


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "LOG_LEVEL": "WARNING",
        "WEBSOCKET": {"async_mode": "threading"},
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def socketio(app):
    return app.extensions["socketio"]


@pytest.fixture
def make_client(app):
    """Factory returning a fresh test client (own cookie jar) per user."""

    def _make():
        return app.test_client()

    return _make


def register_user(client, name="Alice", email="alice@example.com", password="secret123", city="Pune", age=27):
    response = client.post("/api/auth/register", json={
        "name": name,
        "email": email,
        "password": password,
        "city": city,
        "age": age,
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()["user"]


@pytest.fixture
def alice(make_client):
    client = make_client()
    user = register_user(client)
    return client, user


@pytest.fixture
def bob(make_client):
    client = make_client()
    user = register_user(client, name="Bob", email="bob@example.com", city="Mumbai")
    return client, user


@pytest.fixture
def carol(make_client):
    client = make_client()
    user = register_user(client, name="Carol", email="carol@example.com", city="Goa")
    return client, user


def future_date(days=10):
    return (date.today() + timedelta(days=days)).isoformat()


def trip_payload(**overrides):
    payload = {
        "title": "Weekend trip to Goa",
        "description": "Driving down the coast, sharing fuel and stays.",
        "fromCity": "Pune",
        "toCity": "Goa",
        "travelDate": future_date(),
        "travelTime": "07:30",
        "maxParticipants": 3,
        "transportMode": "car",
        "estimatedCost": "",
        "notes": "",
    }
    payload.update(overrides)
    return payload


def create_trip(client, **overrides):
    response = client.post("/api/posts", json=trip_payload(**overrides))
    assert response.status_code == 201, response.get_json()
    return response.get_json()["post"]


def open_chat(client, other_id, post_id=None):
    url = f"/api/chat/{other_id}"
    if post_id:
        url += f"?postId={post_id}"
    response = client.get(url)
    assert response.status_code == 200, response.get_json()
    return response.get_json()
