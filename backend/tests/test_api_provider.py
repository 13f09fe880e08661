import os
import sys
from datetime import date, timedelta

from fastapi.testclient import TestClient

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from servicehub.main import app
from servicehub.services.notification_store import notification_store

client = TestClient(app)

SARAH = {"user_id": "provider-1"}


def test_dashboard_stats_and_reviews():
    payload = client.get("/provider/dashboard", params=SARAH).json()
    assert payload["stats"] == {
        "total_appointments": 3,
        "completed_appointments": 1,
        "total_revenue": 45.0,
        "total_clients": 2,
        "average_rating": 5.0,
        "total_reviews": 1,
    }
    assert payload["upcoming_appointments"] == []
    assert payload["recent_reviews"][0]["client"]["full_name"] == "John Doe"


def test_service_crud_is_owner_only():
    created = client.post(
        "/provider/services",
        json={
            "user_id": "provider-1",
            "name": "Beard Trim",
            "description": "Quick tidy-up",
            "price": 25,
            "duration": 30,
            "category_id": "cat-1",
        },
    )
    assert created.status_code == 200
    service = created.json()
    assert service["category"]["name"] == "Beauty & Spa"

    own = client.get("/provider/services", params=SARAH).json()
    assert service["id"] in [s["id"] for s in own]
    assert all(s["provider_id"] == "provider-1" for s in own)

    hijack = client.put(
        f"/provider/services/{service['id']}",
        json={"user_id": "provider-2", "name": "Mine now", "price": 1, "duration": 10, "category_id": "cat-1"},
    )
    assert hijack.status_code == 403

    updated = client.put(
        f"/provider/services/{service['id']}",
        json={"user_id": "provider-1", "name": "Beard Trim Deluxe", "price": 35, "duration": 45, "category_id": "cat-1"},
    )
    assert updated.json()["name"] == "Beard Trim Deluxe"
    assert updated.json()["price"] == 35

    toggled = client.post(f"/provider/services/{service['id']}/toggle", json={"user_id": "provider-1"})
    assert toggled.json()["is_active"] is False
    deleted = client.delete(f"/provider/services/{service['id']}", params=SARAH)
    assert deleted.status_code == 200


def test_service_fields_are_validated():
    base = {"user_id": "provider-1", "name": "Broken", "price": 10, "duration": 30, "category_id": "cat-1"}
    assert client.post("/provider/services", json={**base, "price": -1}).status_code == 400
    assert client.post("/provider/services", json={**base, "duration": 0}).status_code == 400
    assert client.post("/provider/services", json={**base, "category_id": "cat-404"}).status_code == 400


def test_appointments_grouped_by_status():
    grouped = client.get("/provider/appointments", params=SARAH).json()
    assert [a["id"] for a in grouped["confirmed"]] == ["apt-1"]
    assert [a["id"] for a in grouped["completed"]] == ["apt-3"]
    assert [a["id"] for a in grouped["cancelled"]] == ["apt-6"]
    assert grouped["pending"] == []


def test_status_transitions_are_enforced():
    confirm = client.post(
        "/provider/appointments/apt-2/status",
        json={"user_id": "provider-2", "status": "confirmed"},
    )
    assert confirm.status_code == 200
    assert confirm.json()["status"] == "confirmed"
    assert notification_store.list_for_user("client-1")[0].title == "Appointment Confirmed"

    backwards = client.post(
        "/provider/appointments/apt-3/status",
        json={"user_id": "provider-1", "status": "confirmed"},
    )
    assert backwards.status_code == 400
    assert "Invalid status transition" in backwards.json()["detail"]

    not_mine = client.post(
        "/provider/appointments/apt-2/status",
        json={"user_id": "provider-1", "status": "completed"},
    )
    assert not_mine.status_code == 403

    completed = client.post(
        "/provider/appointments/apt-1/status",
        json={"user_id": "provider-1", "status": "completed"},
    )
    assert completed.status_code == 200
    assert completed.json()["client"]["id"] == "client-1"


def test_revenue_and_invoices():
    revenue = client.get("/provider/revenue", params={"user_id": "provider-3"}).json()
    assert revenue["totals"] == {"net_revenue": 67.5, "commission": 7.5, "gross": 75.0, "transactions": 1}
    assert revenue["by_service"][0]["service_name"] == "Personal Training"
    assert [t["id"] for t in revenue["recent_transactions"]] == ["apt-4"]

    invoices = client.get("/provider/invoices", params={"user_id": "provider-3", "q": "jane"}).json()
    assert [i["id"] for i in invoices["invoices"]] == ["inv-apt-4"]
    assert invoices["summary"]["provider_earnings"] == 67.5
    assert client.get("/provider/invoices", params={"user_id": "provider-3", "status": "bogus"}).status_code == 400


def test_promotions_lifecycle():
    listed = client.get("/provider/promotions", params={"user_id": "provider-2"}).json()
    relax = listed[0]
    assert relax["code"] == "RELAX10"
    assert relax["is_expired"] is True
    assert relax["is_currently_active"] is False

    today = date.today()
    payload = {
        "user_id": "provider-2",
        "code": "spring15",
        "description": "Spring sale",
        "discount_type": "percentage",
        "discount_value": 15,
        "start_date": today.isoformat(),
        "end_date": (today + timedelta(days=30)).isoformat(),
    }
    created = client.post("/provider/promotions", json=payload)
    assert created.status_code == 200
    promo = created.json()
    assert promo["code"] == "SPRING15"
    assert promo["min_amount"] == 0
    assert promo["max_uses"] is None
    assert promo["is_currently_active"] is True

    duplicate = client.post("/provider/promotions", json=payload)
    assert duplicate.status_code == 409
    too_big = client.post("/provider/promotions", json={**payload, "code": "HUGE", "discount_value": 150})
    assert too_big.status_code == 400
    backwards = client.post(
        "/provider/promotions",
        json={**payload, "code": "BACK", "end_date": (today - timedelta(days=1)).isoformat()},
    )
    assert backwards.status_code == 400

    toggled = client.post(f"/provider/promotions/{promo['id']}/toggle", json={"user_id": "provider-2"})
    assert toggled.json()["is_currently_active"] is False
    updated = client.put(
        f"/provider/promotions/{promo['id']}",
        json={**payload, "discount_type": "fixed", "discount_value": 12, "max_uses": 3},
    )
    assert updated.status_code == 200
    assert updated.json()["discount_type"] == "fixed"
    assert updated.json()["max_uses"] == 3

    foreign = client.delete(f"/provider/promotions/{promo['id']}", params={"user_id": "provider-1"})
    assert foreign.status_code == 403
    assert client.delete(f"/provider/promotions/{promo['id']}", params={"user_id": "provider-2"}).status_code == 200


def test_clients_badges_and_segments():
    clients = client.get("/provider/clients", params=SARAH).json()
    assert [c["client"]["id"] for c in clients] == ["client-1", "client-2"]
    john = clients[1]
    assert john["total_spent"] == 50.0
    assert john["badges"] == ["New"]
    assert john["average_rating"] == 5.0

    new_only = client.get("/provider/clients", params={**SARAH, "segment": "new"}).json()
    assert [c["client"]["id"] for c in new_only] == ["client-2"]
    assert client.get("/provider/clients", params={**SARAH, "segment": "vip"}).json() == []
    assert client.get("/provider/clients", params={**SARAH, "q": "jane"}).json()[0]["client"]["id"] == "client-1"
    assert client.get("/provider/clients", params={**SARAH, "segment": "gold"}).status_code == 400
