from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Query

from servicehub.models import (
    Appointment,
    AppointmentView,
    BookingRequest,
    BookingView,
    ClientAppointmentsResponse,
    ClientDashboard,
    ClientRefundsResponse,
    Favorite,
    FavoriteCreateRequest,
    FavoriteListResponse,
    OwnerActionRequest,
    PaymentReceipt,
    PaymentRequest,
    PromoApplyRequest,
    PromoQuote,
    Refund,
    RefundCreateRequest,
    RescheduleRequest,
    Review,
    ReviewCreateRequest,
    ReviewListResponse,
    ReviewUpdateRequest,
    ServiceView,
)
from servicehub.routers.common import authorize_role, raise_store_http_error
from servicehub.services.marketplace_store import MarketplaceStoreError, marketplace_store
from servicehub.services.notification_store import notification_store
from servicehub.services.payment_simulator import PaymentDetailsError, payment_simulator

router = APIRouter(prefix="/client", tags=["client"])


def _when(appointment: Appointment) -> str:
    return appointment.appointment_date.strftime("%b %d, %Y at %I:%M %p")


def _client_name(client_id: str) -> str:
    user = marketplace_store.get_user(client_id)
    return user.full_name if user else "A client"


def _service_name(service_id: str) -> str:
    service = marketplace_store.get_service(service_id)
    return service.name if service else "service"


@router.get("/dashboard", response_model=ClientDashboard)
def dashboard(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "client", authorization)
    return ClientDashboard(**marketplace_store.client_dashboard(user_id))


# ----- search & booking -----


@router.get("/services", response_model=list[ServiceView])
def search_services(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    category_id: Optional[str] = Query(default=None),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "client", authorization)
    return marketplace_store.list_services(q=q, category_id=category_id, status="active")


@router.get("/services/{service_id}", response_model=BookingView)
def booking_view(
    service_id: str,
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "client", authorization)
    try:
        return BookingView(**marketplace_store.booking_view(service_id))
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.post("/promotions/apply", response_model=PromoQuote)
def apply_promotion(payload: PromoApplyRequest):
    try:
        return marketplace_store.quote_promotion(payload.service_id, payload.code)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.post("/bookings", response_model=Appointment)
def book_service(
    payload: BookingRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "client", authorization)
    try:
        appointment = marketplace_store.book_service(
            client_id=payload.user_id,
            service_id=payload.service_id,
            slot_date=payload.date,
            slot_time=payload.time,
            notes=payload.notes,
            promo_code=payload.promo_code,
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    notification_store.create(
        user_id=appointment.provider_id,
        title="New Appointment Booked",
        message=(
            f"{_client_name(appointment.client_id)} has booked "
            f"{_service_name(appointment.service_id)} for {_when(appointment)}"
        ),
        type="appointment",
    )
    return appointment


@router.post("/payments/{appointment_id}", response_model=PaymentReceipt)
def pay_appointment(
    appointment_id: str,
    payload: PaymentRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "client", authorization)
    try:
        appointment = marketplace_store.payable_appointment(appointment_id, client_id=payload.user_id)
        transaction_id = payment_simulator.charge(payload, appointment.total_amount)
        appointment = marketplace_store.mark_paid(appointment_id, client_id=payload.user_id)
    except PaymentDetailsError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    amount = f"${appointment.total_amount:.2f}"
    service_name = _service_name(appointment.service_id)
    notification_store.create(
        user_id=appointment.client_id,
        title="Payment Successful",
        message=f"Your payment of {amount} for {service_name} was processed.",
        type="payment",
    )
    notification_store.create(
        user_id=appointment.provider_id,
        title="Payment Received",
        message=f"Payment of {amount} received for {service_name} service",
        type="payment",
    )
    return PaymentReceipt(
        appointment_id=appointment.id,
        transaction_id=transaction_id,
        method=payload.method,
        amount=appointment.total_amount,
        paid_at=appointment.paid_at or datetime.now(timezone.utc),
    )


# ----- appointments -----


@router.get("/appointments", response_model=ClientAppointmentsResponse)
def list_appointments(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "client", authorization)
    now = datetime.now(timezone.utc)
    upcoming: list[AppointmentView] = []
    past: list[AppointmentView] = []
    for apt in marketplace_store.list_appointments(client_id=user_id):
        if apt.status in {"pending", "confirmed"} and apt.appointment_date > now:
            upcoming.append(apt)
        else:
            past.append(apt)
    return ClientAppointmentsResponse(upcoming=upcoming, past=past)


@router.post("/appointments/{appointment_id}/cancel", response_model=Appointment)
def cancel_appointment(
    appointment_id: str,
    payload: OwnerActionRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "client", authorization)
    try:
        appointment = marketplace_store.cancel_appointment(appointment_id, client_id=payload.user_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    notification_store.create(
        user_id=appointment.provider_id,
        title="Appointment Cancelled",
        message=(
            f"{_client_name(appointment.client_id)} cancelled "
            f"{_service_name(appointment.service_id)} on {_when(appointment)}"
        ),
        type="appointment",
    )
    return appointment


@router.post("/appointments/{appointment_id}/reschedule", response_model=Appointment)
def reschedule_appointment(
    appointment_id: str,
    payload: RescheduleRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "client", authorization)
    try:
        appointment = marketplace_store.reschedule_appointment(
            appointment_id,
            client_id=payload.user_id,
            new_date=payload.date,
            new_time=payload.time,
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    notification_store.create(
        user_id=appointment.provider_id,
        title="Appointment Rescheduled",
        message=(
            f"{_client_name(appointment.client_id)} moved "
            f"{_service_name(appointment.service_id)} to {_when(appointment)}. Please confirm."
        ),
        type="appointment",
    )
    return appointment


# ----- favorites -----


@router.get("/favorites", response_model=FavoriteListResponse)
def list_favorites(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "client", authorization)
    favorites = marketplace_store.list_favorites(user_id, q=q)
    services = [f.service for f in favorites if f.service]
    return FavoriteListResponse(
        favorites=favorites,
        providers=len({s.provider_id for s in services}),
        categories=len({s.category_id for s in services}),
    )


@router.post("/favorites", response_model=Favorite)
def add_favorite(
    payload: FavoriteCreateRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "client", authorization)
    try:
        return marketplace_store.add_favorite(client_id=payload.user_id, service_id=payload.service_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.delete("/favorites/{favorite_id}", response_model=dict)
def remove_favorite(
    favorite_id: str,
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "client", authorization)
    try:
        marketplace_store.remove_favorite(favorite_id, client_id=user_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return {"status": "deleted", "id": favorite_id}


# ----- reviews -----


@router.get("/reviews", response_model=ReviewListResponse)
def list_reviews(
    user_id: str = Query(...),
    q: Optional[str] = Query(default=None),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "client", authorization)
    reviews = marketplace_store.list_reviews(client_id=user_id, q=q)
    ratings = [r.rating for r in reviews]
    return ReviewListResponse(
        reviews=reviews,
        average_rating=round(sum(ratings) / len(ratings), 2) if ratings else 0.0,
        reviewable_appointments=marketplace_store.reviewable_appointments(user_id),
    )


@router.post("/reviews", response_model=Review)
def create_review(
    payload: ReviewCreateRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "client", authorization)
    try:
        review = marketplace_store.create_review(
            client_id=payload.user_id,
            appointment_id=payload.appointment_id,
            rating=payload.rating,
            comment=payload.comment,
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    notification_store.create(
        user_id=review.provider_id,
        title="New Review",
        message=f"{_client_name(review.client_id)} left a {review.rating}-star review for {_service_name(review.service_id)}",
        type="review",
    )
    return review


@router.put("/reviews/{review_id}", response_model=Review)
def update_review(
    review_id: str,
    payload: ReviewUpdateRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "client", authorization)
    try:
        return marketplace_store.update_review(
            review_id, client_id=payload.user_id, rating=payload.rating, comment=payload.comment
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)


@router.delete("/reviews/{review_id}", response_model=dict)
def delete_review(
    review_id: str,
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "client", authorization)
    try:
        marketplace_store.delete_review(review_id, client_id=user_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return {"status": "deleted", "id": review_id}


# ----- refunds -----


@router.get("/refunds", response_model=ClientRefundsResponse)
def list_refunds(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(user_id, "client", authorization)
    refunds = marketplace_store.list_refunds(client_id=user_id)
    return ClientRefundsResponse(
        refunds=refunds,
        stats=marketplace_store.refund_stats(refunds),
        eligible_appointments=marketplace_store.refund_eligible_appointments(user_id),
    )


@router.post("/refunds", response_model=Refund)
def request_refund(
    payload: RefundCreateRequest,
    authorization: Optional[str] = Header(default=None),
):
    authorize_role(payload.user_id, "client", authorization)
    try:
        refund = marketplace_store.request_refund(
            client_id=payload.user_id,
            appointment_id=payload.appointment_id,
            amount=payload.amount,
            reason=payload.reason,
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    notification_store.create(
        user_id=refund.provider_id,
        title="Refund Requested",
        message=f"{_client_name(refund.client_id)} requested a refund of ${refund.amount:.2f}",
        type="payment",
    )
    return refund
