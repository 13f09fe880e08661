"""Revenue and invoice aggregations over joined appointment views.

Callers pass completed appointments only; every figure here is derived, nothing
is stored.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from servicehub.models import AppointmentView, Invoice
from servicehub.services.pricing import round_money


def _month_key(value: datetime) -> Tuple[int, int]:
    return value.year, value.month


def month_label(value: datetime) -> str:
    return value.strftime("%B %Y")


def revenue_totals(appointments: Iterable[AppointmentView]) -> Dict[str, float]:
    rows = list(appointments)
    gross = sum(apt.total_amount for apt in rows)
    commission = sum(apt.commission_amount for apt in rows)
    return {
        "transactions": len(rows),
        "total_revenue": round_money(gross),
        "platform_commission": round_money(commission),
        "provider_earnings": round_money(gross - commission),
    }


def revenue_by_provider(appointments: Iterable[AppointmentView], limit: int = 10) -> List[Dict[str, Any]]:
    buckets: Dict[str, Dict[str, Any]] = {}
    for apt in appointments:
        name = apt.provider.full_name if apt.provider else "Unknown Provider"
        bucket = buckets.setdefault(
            name,
            {
                "provider_id": apt.provider_id,
                "provider_name": name,
                "count": 0,
                "total_revenue": 0.0,
                "commission": 0.0,
                "earnings": 0.0,
            },
        )
        bucket["count"] += 1
        bucket["total_revenue"] += apt.total_amount
        bucket["commission"] += apt.commission_amount
        bucket["earnings"] += apt.total_amount - apt.commission_amount
    rows = sorted(buckets.values(), key=lambda row: row["commission"], reverse=True)[:limit]
    return [_rounded(row, "total_revenue", "commission", "earnings") for row in rows]


def revenue_by_category(
    appointments: Iterable[AppointmentView],
    category_names: Dict[str, str],
) -> List[Dict[str, Any]]:
    buckets: Dict[str, Dict[str, Any]] = {}
    for apt in appointments:
        category_id = apt.service.category_id if apt.service else ""
        name = category_names.get(category_id, "Unknown Category")
        bucket = buckets.setdefault(name, {"category_name": name, "count": 0, "revenue": 0.0, "commission": 0.0})
        bucket["count"] += 1
        bucket["revenue"] += apt.total_amount
        bucket["commission"] += apt.commission_amount
    rows = sorted(buckets.values(), key=lambda row: row["commission"], reverse=True)
    return [_rounded(row, "revenue", "commission") for row in rows]


def revenue_by_month(appointments: Iterable[AppointmentView]) -> List[Dict[str, Any]]:
    buckets: Dict[Tuple[int, int], Dict[str, Any]] = {}
    for apt in appointments:
        key = _month_key(apt.appointment_date)
        bucket = buckets.setdefault(
            key,
            {
                "month": month_label(apt.appointment_date),
                "count": 0,
                "gross": 0.0,
                "commission": 0.0,
                "net": 0.0,
            },
        )
        bucket["count"] += 1
        bucket["gross"] += apt.total_amount
        bucket["commission"] += apt.commission_amount
        bucket["net"] += apt.total_amount - apt.commission_amount
    return [_rounded(buckets[key], "gross", "commission", "net") for key in sorted(buckets)]


def revenue_by_service(appointments: Iterable[AppointmentView]) -> List[Dict[str, Any]]:
    buckets: Dict[str, Dict[str, Any]] = {}
    for apt in appointments:
        name = apt.service.name if apt.service else "Unknown Service"
        bucket = buckets.setdefault(name, {"service_name": name, "count": 0, "revenue": 0.0, "gross": 0.0})
        bucket["count"] += 1
        bucket["revenue"] += apt.total_amount - apt.commission_amount
        bucket["gross"] += apt.total_amount
    return [_rounded(row, "revenue", "gross") for row in buckets.values()]


def top_transactions(appointments: Iterable[AppointmentView], limit: int = 10) -> List[AppointmentView]:
    return sorted(appointments, key=lambda apt: apt.commission_amount, reverse=True)[:limit]


def build_invoice(appointment: AppointmentView, refunded: bool = False) -> Invoice:
    return Invoice(
        id=f"inv-{appointment.id}",
        appointment_id=appointment.id,
        provider_id=appointment.provider_id,
        client_id=appointment.client_id,
        service_id=appointment.service_id,
        amount=round_money(appointment.total_amount - appointment.commission_amount),
        commission_amount=appointment.commission_amount,
        gross_amount=appointment.total_amount,
        payment_status="refunded" if refunded else "paid",
        payment_intent_id=f"pi_{appointment.id}",
        created_at=appointment.created_at,
        paid_at=appointment.paid_at or appointment.updated_at,
        client=appointment.client,
        provider=appointment.provider,
        service=appointment.service,
    )


def invoice_matches(invoice: Invoice, q: Optional[str]) -> bool:
    term = (q or "").strip().lower()
    if not term:
        return True
    haystack = [
        invoice.id,
        invoice.client.full_name if invoice.client else "",
        invoice.provider.full_name if invoice.provider else "",
        invoice.service.name if invoice.service else "",
    ]
    return any(term in value.lower() for value in haystack)


def invoice_totals(invoices: Iterable[Invoice]) -> Dict[str, Any]:
    rows = list(invoices)
    return {
        "count": len(rows),
        "gross": round_money(sum(inv.gross_amount for inv in rows)),
        "commission": round_money(sum(inv.commission_amount for inv in rows)),
        "provider_earnings": round_money(sum(inv.amount for inv in rows)),
        "providers": len({inv.provider_id for inv in rows}),
    }


def _rounded(row: Dict[str, Any], *fields: str) -> Dict[str, Any]:
    for field in fields:
        row[field] = round_money(row[field])
    return row
