import os
import sys

from fastapi.testclient import TestClient

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from servicehub.main import app

client = TestClient(app)


def _login(email: str, password: str) -> str:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def test_health_and_ready():
    assert client.get("/health").json()["status"] == "ok"
    ready = client.get("/ready")
    assert ready.status_code == 200
    assert ready.json()["status"] == "ready"


def test_login_and_me_hide_password():
    login = client.post("/auth/login", json={"email": "Provider@Example.com", "password": "provider123"})
    assert login.status_code == 200
    payload = login.json()
    assert payload["token_type"] == "bearer"
    assert payload["user"]["id"] == "provider-1"
    assert "password" not in payload["user"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {payload['access_token']}"})
    assert me.status_code == 200
    assert me.json()["full_name"] == "Sarah Johnson"
    assert "password" not in me.json()


def test_login_rejects_bad_credentials():
    response = client.post("/auth/login", json={"email": "client@example.com", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_me_requires_token():
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_signup_client_can_log_in_immediately():
    signup = client.post(
        "/auth/signup",
        json={"email": "new.client@example.com", "password": "secret1", "full_name": "New Client"},
    )
    assert signup.status_code == 200
    user = signup.json()
    assert user["id"].startswith("client-")
    assert user["is_approved"] is True
    _login("new.client@example.com", "secret1")


def test_signup_provider_waits_for_approval():
    signup = client.post(
        "/auth/signup",
        json={"email": "pro@example.com", "password": "secret1", "full_name": "Pat Pro", "role": "provider"},
    )
    assert signup.status_code == 200
    provider_id = signup.json()["id"]
    assert signup.json()["is_approved"] is False

    blocked = client.post("/auth/login", json={"email": "pro@example.com", "password": "secret1"})
    assert blocked.status_code == 403
    assert blocked.json()["detail"] == "Account not approved yet"

    approve = client.post(f"/admin/users/{provider_id}/approve", json={"actor_user_id": "admin-1"})
    assert approve.status_code == 200
    _login("pro@example.com", "secret1")


def test_signup_duplicate_email_conflicts():
    response = client.post(
        "/auth/signup",
        json={"email": "CLIENT@example.com", "password": "secret1", "full_name": "Copy Cat"},
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "User already exists"


def test_token_must_match_acting_user():
    token = _login("client@example.com", "client123")
    response = client.get(
        "/client/dashboard",
        params={"user_id": "client-2"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "Token user does not match actor user"


def test_role_gate_rejects_other_areas():
    assert client.get("/admin/dashboard", params={"user_id": "client-1"}).status_code == 403
    assert client.get("/provider/dashboard", params={"user_id": "admin-1"}).status_code == 403
    response = client.get("/client/dashboard", params={"user_id": "provider-1"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Client access required"
    assert client.get("/client/dashboard", params={"user_id": "ghost"}).status_code == 404


def test_navigation_menus_by_role():
    response = client.get("/navigation/provider")
    assert response.status_code == 200
    hrefs = [item["href"] for item in response.json()]
    assert hrefs[0] == "/provider"
    assert "/provider/promotions" in hrefs
    assert client.get("/navigation/guest").status_code == 404
