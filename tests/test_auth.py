"""Account endpoints."""

from conftest import register_user


def test_register_logs_user_in(make_client):
    client = make_client()
    user = register_user(client)

    assert user["email"] == "alice@example.com"
    assert user["id"] == user["_id"]
    assert "password_hash" not in user

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    body = me.get_json()
    assert body["name"] == "Alice"
    assert body["tripsCreated"] == []
    assert body["tripsJoined"] == []


def test_register_rejects_duplicate_email(make_client):
    register_user(make_client())
    response = make_client().post("/api/auth/register", json={
        "name": "Other Alice",
        "email": "ALICE@example.com",
        "password": "secret123",
        "city": "Delhi",
        "age": 30,
    })
    assert response.status_code == 409
    assert response.get_json()["message"] == "User already exists with this email"


def test_register_validation_details(make_client):
    response = make_client().post("/api/auth/register", json={
        "name": "A",
        "email": "not-an-email",
        "password": "123",
        "city": "",
        "age": 12,
    })
    assert response.status_code == 400
    details = response.get_json()["details"]
    assert set(details) >= {"name", "email", "password", "city", "age"}


def test_login_and_logout(make_client):
    register_user(make_client())
    client = make_client()

    bad = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong"})
    assert bad.status_code == 401

    ok = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert ok.status_code == 200
    assert ok.get_json()["user"]["name"] == "Alice"
    assert client.get("/api/auth/me").status_code == 200

    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/me").status_code == 401


def test_me_requires_login(make_client):
    response = make_client().get("/api/auth/me")
    assert response.status_code == 401
    assert response.get_json()["message"] == "Authentication required"


def test_update_profile(alice):
    client, _ = alice
    response = client.put("/api/auth/profile", json={"bio": "Loves road trips", "age": "", "city": "Nashik"})
    assert response.status_code == 200
    user = response.get_json()["user"]
    assert user["bio"] == "Loves road trips"
    assert user["city"] == "Nashik"
    assert user["age"] == 27

    cleared = client.put("/api/auth/profile", json={"bio": ""}).get_json()["user"]
    assert cleared["bio"] == ""


def test_public_profile(alice, bob):
    _, alice_user = alice
    bob_client, _ = bob

    response = bob_client.get(f"/api/users/profile/{alice_user['_id']}")
    assert response.status_code == 200
    profile = response.get_json()
    assert profile["name"] == "Alice"
    assert "email" not in profile

    assert bob_client.get("/api/users/profile/does-not-exist").status_code == 404
