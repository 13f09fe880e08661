import os
import sys

from fastapi.testclient import TestClient

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from servicehub.main import app
from servicehub.services.notification_store import notification_store

client = TestClient(app)

ADMIN = {"user_id": "admin-1"}


def test_dashboard_headline_counts():
    response = client.get("/admin/dashboard", params=ADMIN)
    assert response.status_code == 200
    assert response.json() == {
        "users": 6,
        "pending_approvals": 0,
        "services": 8,
        "appointments": 6,
        "pending_refunds": 1,
        "platform_commission": 12.5,
    }


def test_list_users_filters_and_sorts_newest_first():
    response = client.get("/admin/users", params=ADMIN)
    assert response.status_code == 200
    ids = [u["id"] for u in response.json()]
    assert ids[0] == "client-2"
    assert ids[-1] == "admin-1"
    assert all("password" not in u for u in response.json())

    providers = client.get("/admin/users", params={**ADMIN, "role": "provider", "q": "MIKE"}).json()
    assert [u["id"] for u in providers] == ["provider-2"]

    bad = client.get("/admin/users", params={**ADMIN, "status": "banned"})
    assert bad.status_code == 400


def test_user_stats():
    response = client.get("/admin/users/stats", params=ADMIN)
    assert response.json() == {"total": 6, "admins": 1, "providers": 3, "clients": 2, "pending_approval": 0}


def test_create_user_validates_form():
    response = client.post(
        "/admin/users",
        json={"actor_user_id": "admin-1", "full_name": "", "email": "client@example.com", "password": "abc"},
    )
    assert response.status_code == 422
    errors = response.json()["detail"]["errors"]
    assert errors["full_name"] == "Full name is required"
    assert errors["email"] == "This email is already registered"
    assert errors["password"] == "Password must be at least 6 characters"


def test_create_user_normalizes_fields():
    response = client.post(
        "/admin/users",
        json={
            "actor_user_id": "admin-1",
            "full_name": "  Nora Nurse ",
            "email": "Nora@Example.com",
            "password": "secret99",
            "role": "provider",
            "location": " ",
        },
    )
    assert response.status_code == 200
    user = response.json()
    assert user["full_name"] == "Nora Nurse"
    assert user["email"] == "nora@example.com"
    assert user["location"] is None
    assert user["role"] == "provider"

    listed = client.get("/admin/users", params=ADMIN).json()
    assert listed[0]["id"] == user["id"]


def test_suspend_and_approve_user():
    suspended = client.post("/admin/users/provider-2/suspend", json={"actor_user_id": "admin-1"})
    assert suspended.status_code == 200
    assert suspended.json()["is_approved"] is False
    assert client.get("/admin/users/stats", params=ADMIN).json()["pending_approval"] == 1

    approved = client.post("/admin/users/provider-2/approve", json={"actor_user_id": "admin-1"})
    assert approved.json()["is_approved"] is True
    titles = [n.title for n in notification_store.list_for_user("provider-2")]
    assert "Account Approved" in titles


def test_delete_user_and_missing_user():
    assert client.delete("/admin/users/client-2", params={"actor_user_id": "admin-1"}).status_code == 200
    assert client.get("/admin/users/client-2", params=ADMIN).status_code == 404
    assert client.delete("/admin/users/client-2", params={"actor_user_id": "admin-1"}).status_code == 404
    assert client.delete("/admin/users/admin-1", params={"actor_user_id": "admin-1"}).status_code == 409


def test_csv_preview_import_and_export():
    csv_text = (
        "name,email,role,approved\n"
        "Tess Tutor,tess@example.com,provider,true\n"
        "Dup Client,client@example.com,client,true\n"
        ",missing@example.com,client,true\n"
    )
    preview = client.post("/admin/users/import/preview", json={"actor_user_id": "admin-1", "csv_text": csv_text})
    assert preview.status_code == 200
    rows = preview.json()
    assert [r["email"] for r in rows] == ["tess@example.com", "client@example.com"]
    assert all("password" not in r for r in rows)

    imported = client.post("/admin/users/import", json={"actor_user_id": "admin-1", "csv_text": csv_text})
    assert imported.status_code == 200
    result = imported.json()
    assert result["imported"] == 1
    assert result["skipped_duplicates"] == 1
    assert result["users"][0]["id"].startswith("import-")

    login = client.post("/auth/login", json={"email": "tess@example.com", "password": "imported123"})
    assert login.status_code == 200

    export = client.get("/admin/users/export", params=ADMIN)
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert "users_export_" in export.headers["content-disposition"]
    lines = export.text.splitlines()
    assert lines[0] == "full_name,email,phone,role,is_approved,location,created_at"
    assert any(line.startswith("Tess Tutor,tess@example.com") for line in lines)


def test_import_without_valid_rows_is_rejected():
    response = client.post("/admin/users/import", json={"actor_user_id": "admin-1", "csv_text": "full_name,email\n"})
    assert response.status_code == 400


def test_sample_csv_and_generated_password():
    sample = client.get("/admin/users/sample-csv", params=ADMIN)
    assert sample.text.splitlines()[0] == "full_name,email,phone,role,is_approved,location,bio"
    password = client.get("/admin/users/generate-password", params={**ADMIN, "length": 16}).json()["password"]
    assert len(password) == 16


def test_categories_crud_and_guarded_delete():
    listed = client.get("/admin/categories", params=ADMIN).json()
    counts = {c["id"]: c["service_count"] for c in listed}
    assert counts == {"cat-1": 3, "cat-2": 1, "cat-3": 2, "cat-4": 1, "cat-5": 1}
    stats = client.get("/admin/categories/stats", params=ADMIN).json()
    assert stats == {"total_categories": 5, "total_services": 8, "categories_in_use": 5}

    blocked = client.delete("/admin/categories/cat-1", params={"actor_user_id": "admin-1"})
    assert blocked.status_code == 409
    assert blocked.json()["detail"].startswith("Cannot delete category with existing services")

    created = client.post(
        "/admin/categories",
        json={"actor_user_id": "admin-1", "name": "Pets", "description": "Pet care", "icon": "Dog"},
    )
    assert created.status_code == 200
    category_id = created.json()["id"]
    assert created.json()["service_count"] == 0

    renamed = client.put(
        f"/admin/categories/{category_id}",
        json={"actor_user_id": "admin-1", "name": "Pet Care", "icon": "Dog"},
    )
    assert renamed.json()["name"] == "Pet Care"
    assert client.get("/admin/categories", params={**ADMIN, "q": "pet"}).json()[0]["id"] == category_id

    assert client.delete(f"/admin/categories/{category_id}", params={"actor_user_id": "admin-1"}).status_code == 200
    blank = client.post("/admin/categories", json={"actor_user_id": "admin-1", "name": "  "})
    assert blank.status_code == 400


def test_services_filters_toggle_and_stats():
    stats = client.get("/admin/services/stats", params=ADMIN).json()
    assert stats == {"total": 8, "active": 8, "inactive": 0, "average_price": 76.25}

    by_provider = client.get("/admin/services", params={**ADMIN, "q": "alex"}).json()
    assert sorted(s["id"] for s in by_provider) == ["service-3", "service-6"]
    assert by_provider[0]["provider"]["full_name"] == "Alex Rodriguez"

    toggled = client.post("/admin/services/service-8/toggle", json={"actor_user_id": "admin-1"})
    assert toggled.json()["is_active"] is False
    inactive = client.get("/admin/services", params={**ADMIN, "status": "inactive"}).json()
    assert [s["id"] for s in inactive] == ["service-8"]

    assert client.delete("/admin/services/service-8", params={"actor_user_id": "admin-1"}).status_code == 200
    assert client.get("/admin/services/stats", params=ADMIN).json()["total"] == 7


def test_appointments_sorted_with_stats():
    response = client.get("/admin/appointments", params=ADMIN)
    payload = response.json()
    assert [a["id"] for a in payload["appointments"]][:2] == ["apt-5", "apt-2"]
    assert payload["stats"]["completed"] == 2
    assert payload["stats"]["pending"] == 1
    assert payload["stats"]["platform_revenue"] == 12.5

    searched = client.get("/admin/appointments", params={**ADMIN, "q": "massage"}).json()
    assert [a["id"] for a in searched["appointments"]] == ["apt-2"]
    recent = client.get("/admin/appointments", params={**ADMIN, "date_range": "week"}).json()
    assert recent["appointments"] == []
    assert client.get("/admin/appointments", params={**ADMIN, "date_range": "year"}).status_code == 400


def test_revenue_report():
    report = client.get("/admin/revenue", params=ADMIN).json()
    assert report["totals"]["platform_commission"] == 12.5
    assert report["by_provider"][0]["provider_name"] == "Alex Rodriguez"
    assert report["by_month"][0]["month"] == "January 2024"
    assert report["top_transactions"][0]["id"] == "apt-4"


def test_invoices_filter_by_provider_and_status():
    payload = client.get("/admin/invoices", params=ADMIN).json()
    assert [i["id"] for i in payload["invoices"]] == ["inv-apt-4", "inv-apt-3"]
    assert payload["summary"]["providers"] == 2

    sarah = client.get("/admin/invoices", params={**ADMIN, "provider_id": "provider-1"}).json()
    assert [i["id"] for i in sarah["invoices"]] == ["inv-apt-3"]
    refunded = client.get("/admin/invoices", params={**ADMIN, "status": "refunded"}).json()
    assert refunded["invoices"] == []


def test_refund_decisions():
    listed = client.get("/admin/refunds", params=ADMIN).json()
    assert [r["id"] for r in listed["refunds"]] == ["refund-2", "refund-3", "refund-1"]
    assert listed["stats"]["approved_amount"] == 65.0

    pending = client.get("/admin/refunds", params={**ADMIN, "status": "pending"}).json()["refunds"]
    assert pending[0]["service"]["name"] == "Personal Training"

    decided = client.post(
        "/admin/refunds/refund-2/decision",
        json={"actor_user_id": "admin-1", "action": "approve"},
    )
    assert decided.status_code == 200
    body = decided.json()
    assert body["status"] == "approved"
    assert body["admin_notes"] == "Refund approved"
    assert body["processed_at"] is not None
    assert notification_store.list_for_user("client-1")[0].title == "Refund Approved"

    again = client.post(
        "/admin/refunds/refund-2/decision",
        json={"actor_user_id": "admin-1", "action": "reject"},
    )
    assert again.status_code == 409

    invoices = client.get("/admin/invoices", params={**ADMIN, "status": "refunded"}).json()["invoices"]
    assert [i["id"] for i in invoices] == ["inv-apt-4"]
