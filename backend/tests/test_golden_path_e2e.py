import os
import sys
from datetime import date, timedelta
from uuid import uuid4

from fastapi.testclient import TestClient

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from servicehub.main import app

client = TestClient(app)


def _login(email: str, password: str) -> tuple[str, str]:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    payload = response.json()
    return payload["access_token"], payload["user"]["id"]


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_golden_path_signup_service_promo_booking_payment_chat(open_day):
    email = f"golden_{uuid4().hex[:8]}@example.com"
    signup = client.post(
        "/auth/signup",
        json={"email": email, "password": "golden123", "full_name": "Goldie Groomer", "role": "provider"},
    )
    assert signup.status_code == 200
    provider_id = signup.json()["id"]

    admin_token, admin_id = _login("admin@example.com", "admin123")
    pending = client.get(
        "/admin/users",
        params={"user_id": admin_id, "status": "pending"},
        headers=_auth(admin_token),
    ).json()
    assert [u["id"] for u in pending] == [provider_id]
    approved = client.post(
        f"/admin/users/{provider_id}/approve",
        json={"actor_user_id": admin_id},
        headers=_auth(admin_token),
    )
    assert approved.status_code == 200

    provider_token, _ = _login(email, "golden123")
    service = client.post(
        "/provider/services",
        json={
            "user_id": provider_id,
            "name": "Golden Grooming",
            "description": "Full groom with a golden finish",
            "price": 90,
            "duration": 60,
            "category_id": "cat-1",
        },
        headers=_auth(provider_token),
    )
    assert service.status_code == 200
    service_id = service.json()["id"]

    today = date.today()
    promo = client.post(
        "/provider/promotions",
        json={
            "user_id": provider_id,
            "code": "GOLD25",
            "discount_type": "percentage",
            "discount_value": 25,
            "min_amount": 50,
            "max_uses": 1,
            "start_date": (today - timedelta(days=1)).isoformat(),
            "end_date": (today + timedelta(days=30)).isoformat(),
        },
        headers=_auth(provider_token),
    )
    assert promo.status_code == 200

    client_token, client_id = _login("john@example.com", "john123")
    found = client.get("/client/services", params={"user_id": client_id, "q": "golden"}, headers=_auth(client_token))
    assert [s["id"] for s in found.json()] == [service_id]

    quote = client.post("/client/promotions/apply", json={"service_id": service_id, "code": "gold25"})
    assert quote.json()["final_price"] == 67.5

    booking = client.post(
        "/client/bookings",
        json={
            "user_id": client_id,
            "service_id": service_id,
            "date": open_day.isoformat(),
            "time": "14:00",
            "promo_code": "GOLD25",
        },
        headers=_auth(client_token),
    )
    assert booking.status_code == 200
    appointment = booking.json()
    assert appointment["total_amount"] == 67.5
    assert appointment["commission_amount"] == 6.75

    exhausted = client.post("/client/promotions/apply", json={"service_id": service_id, "code": "GOLD25"})
    assert exhausted.status_code == 400

    provider_notes = client.get("/notifications", params={"user_id": provider_id}).json()
    assert provider_notes[0]["title"] == "New Appointment Booked"
    assert "John Doe" in provider_notes[0]["message"]

    confirmed = client.post(
        f"/provider/appointments/{appointment['id']}/status",
        json={"user_id": provider_id, "status": "confirmed"},
        headers=_auth(provider_token),
    )
    assert confirmed.status_code == 200
    too_early = client.post(
        f"/provider/appointments/{appointment['id']}/status",
        json={"user_id": provider_id, "status": "completed"},
        headers=_auth(provider_token),
    )
    assert too_early.status_code == 400

    paid = client.post(
        f"/client/payments/{appointment['id']}",
        json={"user_id": client_id, "method": "paypal"},
        headers=_auth(client_token),
    )
    assert paid.status_code == 200
    assert paid.json()["amount"] == 67.5

    upcoming = client.get("/client/appointments", params={"user_id": client_id}, headers=_auth(client_token)).json()
    assert upcoming["upcoming"][0]["id"] == appointment["id"]

    sent = client.post(
        f"/chat/conversations/{provider_id}/messages",
        json={"user_id": client_id, "message": "Looking forward to it!"},
        headers=_auth(client_token),
    )
    assert sent.status_code == 200
    inbox = client.get("/chat/conversations", params={"user_id": provider_id}, headers=_auth(provider_token)).json()
    assert inbox[0]["counterpart"]["id"] == client_id
    assert inbox[0]["unread_count"] == 1

    notes = client.get("/notifications", params={"user_id": provider_id, "unread_only": True}).json()
    read = client.post(
        f"/notifications/{notes[0]['id']}/read",
        params={"user_id": provider_id},
        headers=_auth(provider_token),
    )
    assert read.status_code == 200
    assert read.json()["is_read"] is True

    dashboard = client.get("/provider/dashboard", params={"user_id": provider_id}, headers=_auth(provider_token)).json()
    assert dashboard["upcoming_appointments"][0]["id"] == appointment["id"]
    assert dashboard["stats"]["total_clients"] == 1
