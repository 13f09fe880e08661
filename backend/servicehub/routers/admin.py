from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, HTTPException, Query
from fastapi.responses import Response

from servicehub.models import (
    AdminActionRequest,
    AdminRevenueReport,
    AppointmentListResponse,
    CategoryUpsertRequest,
    CategoryView,
    InvoiceListResponse,
    PublicUser,
    RefundDecisionRequest,
    RefundListResponse,
    RefundView,
    Service,
    ServiceView,
    UserCreateRequest,
    UserImportRequest,
    UserImportResult,
    UserStats,
)
from servicehub.routers.common import authorize_role, raise_store_http_error
from servicehub.services import reports
from servicehub.services.marketplace_store import MarketplaceStoreError, marketplace_store
from servicehub.services.notification_store import notification_store
from servicehub.services.user_csv import SAMPLE_CSV, export_filename
from servicehub.services.user_validation import generate_random_password

router = APIRouter(prefix="/admin", tags=["admin"])


def _csv_response(body: str, filename: str) -> Response:
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/dashboard", response_model=dict)
def dashboard(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    return marketplace_store.admin_dashboard()


# ----- users -----


@router.get("/users", response_model=list[PublicUser])
def list_users(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    role: str = Query(default="all"),
    status: str = Query(default="all"),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    try:
        return [marketplace_store.public_user(u) for u in marketplace_store.list_users(q=q, role=role, status=status)]
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.get("/users/stats", response_model=UserStats)
def user_stats(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    return UserStats(**marketplace_store.user_stats())


@router.get("/users/export")
def export_users(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    return _csv_response(marketplace_store.export_users(), export_filename())


@router.get("/users/sample-csv")
def sample_csv(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    return _csv_response(SAMPLE_CSV, "user_import_sample.csv")


@router.get("/users/generate-password", response_model=dict)
def generate_password(
    user_id: str = Query(...),
    length: int = Query(default=12, ge=6, le=64),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    return {"password": generate_random_password(length)}


@router.post("/users/import/preview", response_model=list[Dict[str, Any]])
def preview_import(
    payload: UserImportRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.actor_user_id, "admin", authorization)
    rows = marketplace_store.preview_user_import(payload.csv_text)
    return [{key: value for key, value in row.items() if key != "password"} for row in rows]


@router.post("/users/import", response_model=UserImportResult)
def import_users(
    payload: UserImportRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.actor_user_id, "admin", authorization)
    imported, skipped = marketplace_store.import_users(payload.csv_text)
    if not imported and not skipped:
        raise HTTPException(status_code=400, detail="No valid users found in CSV")
    return UserImportResult(
        imported=len(imported),
        skipped_duplicates=skipped,
        users=[marketplace_store.public_user(u) for u in imported],
    )


@router.post("/users", response_model=PublicUser)
def create_user(
    payload: UserCreateRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.actor_user_id, "admin", authorization)
    try:
        user = marketplace_store.create_user(payload.model_dump(exclude={"actor_user_id"}))
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return marketplace_store.public_user(user)


@router.get("/users/{target_user_id}", response_model=PublicUser)
def get_user(
    target_user_id: str,
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    try:
        return marketplace_store.public_user(marketplace_store.require_user(target_user_id))
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.post("/users/{target_user_id}/approve", response_model=PublicUser)
def approve_user(
    target_user_id: str,
    payload: AdminActionRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.actor_user_id, "admin", authorization)
    try:
        user = marketplace_store.set_user_approval(target_user_id, True)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    notification_store.create(
        user_id=user.id,
        title="Account Approved",
        message="Your account has been approved. You can now sign in.",
        type="system",
    )
    return marketplace_store.public_user(user)


@router.post("/users/{target_user_id}/suspend", response_model=PublicUser)
def suspend_user(
    target_user_id: str,
    payload: AdminActionRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.actor_user_id, "admin", authorization)
    try:
        return marketplace_store.public_user(marketplace_store.set_user_approval(target_user_id, False))
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.delete("/users/{target_user_id}", response_model=dict)
def delete_user(
    target_user_id: str,
    actor_user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(actor_user_id, "admin", authorization)
    try:
        marketplace_store.delete_user(target_user_id, actor_user_id=actor_user_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return {"status": "deleted", "id": target_user_id}


# ----- categories -----


@router.get("/categories", response_model=list[CategoryView])
def list_categories(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    return marketplace_store.list_categories(q=q)


@router.get("/categories/stats", response_model=dict)
def category_stats(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    return marketplace_store.category_stats()


@router.post("/categories", response_model=CategoryView)
def create_category(
    payload: CategoryUpsertRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.actor_user_id, "admin", authorization)
    try:
        return marketplace_store.create_category(
            name=payload.name, description=payload.description, icon=payload.icon
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.put("/categories/{category_id}", response_model=CategoryView)
def update_category(
    category_id: str,
    payload: CategoryUpsertRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.actor_user_id, "admin", authorization)
    try:
        return marketplace_store.update_category(
            category_id, name=payload.name, description=payload.description, icon=payload.icon
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.delete("/categories/{category_id}", response_model=dict)
def delete_category(
    category_id: str,
    actor_user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(actor_user_id, "admin", authorization)
    try:
        marketplace_store.delete_category(category_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return {"status": "deleted", "id": category_id}


# ----- services -----


@router.get("/services", response_model=list[ServiceView])
def list_services(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    category_id: Optional[str] = Query(default=None),
    status: str = Query(default="all"),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    try:
        return marketplace_store.list_services(q=q, category_id=category_id, status=status)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.get("/services/stats", response_model=dict)
def service_stats(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    return marketplace_store.service_stats()


@router.post("/services/{service_id}/toggle", response_model=Service)
def toggle_service(
    service_id: str,
    payload: AdminActionRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.actor_user_id, "admin", authorization)
    try:
        return marketplace_store.toggle_service(service_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.delete("/services/{service_id}", response_model=dict)
def delete_service(
    service_id: str,
    actor_user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(actor_user_id, "admin", authorization)
    try:
        marketplace_store.delete_service(service_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return {"status": "deleted", "id": service_id}


# ----- appointments, revenue, invoices -----


@router.get("/appointments", response_model=AppointmentListResponse)
def list_appointments(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    status: str = Query(default="all"),
    date_range: str = Query(default="all"),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    try:
        rows = marketplace_store.list_appointments(q=q, status=status, date_range=date_range)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return AppointmentListResponse(appointments=rows, stats=marketplace_store.appointment_stats())


@router.get("/revenue", response_model=AdminRevenueReport)
def revenue(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    return AdminRevenueReport(**marketplace_store.admin_revenue())


@router.get("/invoices", response_model=InvoiceListResponse)
def list_invoices(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    status: str = Query(default="all"),
    provider_id: Optional[str] = Query(default=None),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    try:
        invoices = marketplace_store.list_invoices(
            provider_id=provider_id if provider_id != "all" else None, q=q, status=status
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return InvoiceListResponse(invoices=invoices, summary=reports.invoice_totals(invoices))


# ----- refunds -----


@router.get("/refunds", response_model=RefundListResponse)
def list_refunds(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    status: str = Query(default="all"),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "admin", authorization)
    try:
        rows = marketplace_store.list_refunds(q=q, status=status)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return RefundListResponse(refunds=rows, stats=marketplace_store.refund_stats(marketplace_store.list_refunds()))


@router.post("/refunds/{refund_id}/decision", response_model=RefundView)
def decide_refund(
    refund_id: str,
    payload: RefundDecisionRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.actor_user_id, "admin", authorization)
    try:
        refund = marketplace_store.decide_refund(refund_id, action=payload.action, admin_notes=payload.admin_notes)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    outcome = "approved" if refund.status == "approved" else "rejected"
    notification_store.create(
        user_id=refund.client_id,
        title=f"Refund {outcome.capitalize()}",
        message=f"Your refund request of ${refund.amount:.2f} was {outcome}. {refund.admin_notes or ''}".strip(),
        type="payment",
    )
    return next(r for r in marketplace_store.list_refunds() if r.id == refund.id)
