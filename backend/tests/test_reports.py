import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from servicehub.services import reports
from servicehub.services.marketplace_store import marketplace_store


def test_revenue_totals_cover_completed_appointments_only():
    totals = reports.revenue_totals(marketplace_store.completed_appointments())
    assert totals == {
        "transactions": 2,
        "total_revenue": 125.0,
        "platform_commission": 12.5,
        "provider_earnings": 112.5,
    }


def test_revenue_by_provider_sorted_by_commission():
    rows = reports.revenue_by_provider(marketplace_store.completed_appointments())
    assert [row["provider_name"] for row in rows] == ["Alex Rodriguez", "Sarah Johnson"]
    assert rows[0]["earnings"] == 67.5


def test_revenue_by_month_uses_month_labels():
    rows = reports.revenue_by_month(marketplace_store.completed_appointments())
    assert rows == [{"month": "January 2024", "count": 2, "gross": 125.0, "commission": 12.5, "net": 112.5}]


def test_revenue_by_category_names_categories():
    names = {c.id: c.name for c in marketplace_store.list_categories()}
    rows = reports.revenue_by_category(marketplace_store.completed_appointments(), names)
    assert [row["category_name"] for row in rows] == ["Fitness", "Beauty & Spa"]


def test_invoice_is_derived_from_appointment():
    appointment = next(a for a in marketplace_store.completed_appointments() if a.id == "apt-3")
    invoice = reports.build_invoice(appointment)
    assert invoice.id == "inv-apt-3"
    assert invoice.payment_intent_id == "pi_apt-3"
    assert invoice.amount == 45.0
    assert invoice.gross_amount == 50.0
    assert invoice.payment_status == "paid"
    assert reports.build_invoice(appointment, refunded=True).payment_status == "refunded"
    assert reports.invoice_matches(invoice, "sarah")
    assert not reports.invoice_matches(invoice, "yoga")


def test_invoice_totals_count_distinct_providers():
    invoices = marketplace_store.list_invoices()
    summary = reports.invoice_totals(invoices)
    assert summary["count"] == 2
    assert summary["gross"] == 125.0
    assert summary["provider_earnings"] == 112.5
    assert summary["providers"] == 2
