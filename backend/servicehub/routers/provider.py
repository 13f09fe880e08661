from typing import Optional

from fastapi import APIRouter, Header, Query

from servicehub.models import (
    AppointmentStatusUpdateRequest,
    AppointmentView,
    InvoiceListResponse,
    OwnerActionRequest,
    PromotionUpsertRequest,
    PromotionView,
    ProviderClient,
    ProviderDashboard,
    ProviderRevenueReport,
    Service,
    ServiceUpsertRequest,
    ServiceView,
)
from servicehub.routers.common import authorize_role, raise_store_http_error
from servicehub.services import reports
from servicehub.services.marketplace_store import MarketplaceStoreError, marketplace_store
from servicehub.services.notification_store import notification_store

router = APIRouter(prefix="/provider", tags=["provider"])

STATUS_MESSAGES = {
    "confirmed": ("Appointment Confirmed", "Your {service} appointment on {when} has been confirmed."),
    "cancelled": ("Appointment Cancelled", "Your {service} appointment on {when} has been cancelled by the provider."),
    "completed": ("Appointment Completed", "Your {service} appointment is complete. Leave a review!"),
}


@router.get("/dashboard", response_model=ProviderDashboard)
def dashboard(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "provider", authorization)
    return ProviderDashboard(**marketplace_store.provider_dashboard(user_id))


# ----- services -----


@router.get("/services", response_model=list[ServiceView])
def list_services(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "provider", authorization)
    return marketplace_store.list_services(q=q, provider_id=user_id)


@router.post("/services", response_model=ServiceView)
def create_service(
    payload: ServiceUpsertRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "provider", authorization)
    try:
        return marketplace_store.create_service(
            provider_id=payload.user_id,
            name=payload.name,
            description=payload.description,
            price=payload.price,
            duration=payload.duration,
            category_id=payload.category_id,
            is_active=payload.is_active,
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.put("/services/{service_id}", response_model=ServiceView)
def update_service(
    service_id: str,
    payload: ServiceUpsertRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "provider", authorization)
    try:
        return marketplace_store.update_service(
            service_id,
            provider_id=payload.user_id,
            name=payload.name,
            description=payload.description,
            price=payload.price,
            duration=payload.duration,
            category_id=payload.category_id,
            is_active=payload.is_active,
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.post("/services/{service_id}/toggle", response_model=Service)
def toggle_service(
    service_id: str,
    payload: OwnerActionRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "provider", authorization)
    try:
        return marketplace_store.toggle_service(service_id, owner_id=payload.user_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.delete("/services/{service_id}", response_model=dict)
def delete_service(
    service_id: str,
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "provider", authorization)
    try:
        marketplace_store.delete_service(service_id, owner_id=user_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return {"status": "deleted", "id": service_id}


# ----- appointments -----


@router.get("/appointments", response_model=dict[str, list[AppointmentView]])
def list_appointments(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "provider", authorization)
    grouped: dict[str, list[AppointmentView]] = {
        "pending": [],
        "confirmed": [],
        "completed": [],
        "cancelled": [],
    }
    for apt in marketplace_store.list_appointments(provider_id=user_id):
        grouped[apt.status].append(apt)
    return grouped


@router.post("/appointments/{appointment_id}/status", response_model=AppointmentView)
def update_appointment_status(
    appointment_id: str,
    payload: AppointmentStatusUpdateRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "provider", authorization)
    try:
        appointment = marketplace_store.update_appointment_status(
            appointment_id, provider_id=payload.user_id, status=payload.status
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    service = marketplace_store.get_service(appointment.service_id)
    title, template = STATUS_MESSAGES[appointment.status]
    notification_store.create(
        user_id=appointment.client_id,
        title=title,
        message=template.format(
            service=service.name if service else "service",
            when=appointment.appointment_date.strftime("%b %d, %Y at %I:%M %p"),
        ),
        type="appointment",
    )
    return next(
        apt for apt in marketplace_store.list_appointments(provider_id=payload.user_id) if apt.id == appointment.id
    )


# ----- revenue & invoices -----


@router.get("/revenue", response_model=ProviderRevenueReport)
def revenue(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "provider", authorization)
    return ProviderRevenueReport(**marketplace_store.provider_revenue(user_id))


@router.get("/invoices", response_model=InvoiceListResponse)
def list_invoices(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    status: str = Query(default="all"),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "provider", authorization)
    try:
        invoices = marketplace_store.list_invoices(provider_id=user_id, q=q, status=status)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return InvoiceListResponse(invoices=invoices, summary=reports.invoice_totals(invoices))


# ----- promotions -----


@router.get("/promotions", response_model=list[PromotionView])
def list_promotions(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "provider", authorization)
    return marketplace_store.list_promotions(user_id)


@router.post("/promotions", response_model=PromotionView)
def create_promotion(
    payload: PromotionUpsertRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "provider", authorization)
    try:
        return marketplace_store.create_promotion(
            provider_id=payload.user_id,
            **payload.model_dump(exclude={"user_id"}),
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.put("/promotions/{promotion_id}", response_model=PromotionView)
def update_promotion(
    promotion_id: str,
    payload: PromotionUpsertRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "provider", authorization)
    try:
        return marketplace_store.update_promotion(
            promotion_id,
            provider_id=payload.user_id,
            **payload.model_dump(exclude={"user_id"}),
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.post("/promotions/{promotion_id}/toggle", response_model=PromotionView)
def toggle_promotion(
    promotion_id: str,
    payload: OwnerActionRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "provider", authorization)
    try:
        return marketplace_store.toggle_promotion(promotion_id, provider_id=payload.user_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.delete("/promotions/{promotion_id}", response_model=dict)
def delete_promotion(
    promotion_id: str,
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "provider", authorization)
    try:
        marketplace_store.delete_promotion(promotion_id, provider_id=user_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return {"status": "deleted", "id": promotion_id}


# ----- clients -----


@router.get("/clients", response_model=list[ProviderClient])
def list_clients(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    segment: str = Query(default="all"),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "provider", authorization)
    try:
        return marketplace_store.provider_clients(user_id, q=q, segment=segment)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
