from jose import jwt

from streak_tracker.config import ALGORITHM, SECRET_KEY


def _signup(client, **overrides):
    body = {"name": "Grace", "email": "grace@example.com", "password": "hunter22"}
    body.update(overrides)
    return client.post("/signup", json=body)


def test_signup_returns_user_and_token(client):
    resp = _signup(client)
    assert resp.status_code == 200
    data = resp.json()
    assert data["user"]["email"] == "grace@example.com"
    assert data["user"]["name"] == "Grace"
    assert "password" not in data["user"]
    payload = jwt.decode(data["token"], SECRET_KEY, algorithms=[ALGORITHM])
    assert payload["sub"] == str(data["user"]["id"])


def test_signup_requires_all_fields(client):
    resp = _signup(client, password="")
    assert resp.status_code == 400
    assert resp.json() == {"error": "All fields are required"}


def test_signup_duplicate_email(client):
    _signup(client)
    resp = _signup(client, name="Other")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Email already registered"}


def test_signin(client):
    user_id = _signup(client).json()["user"]["id"]

    resp = client.post("/signin", json={"email": "grace@example.com", "password": "hunter22"})
    assert resp.status_code == 200
    assert resp.json()["user"] == {"id": user_id, "name": "Grace", "email": "grace@example.com"}


def test_signin_bad_password(client):
    _signup(client)
    resp = client.post("/signin", json={"email": "grace@example.com", "password": "nope"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid credentials"}


def test_signin_unknown_email(client):
    resp = client.post("/signin", json={"email": "nobody@example.com", "password": "x"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid credentials"}


def test_me_with_bearer_token(client):
    token = _signup(client).json()["token"]

    resp = client.get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["email"] == "grace@example.com"


def test_me_rejects_bad_token(client):
    resp = client.get("/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
