import calendar
import copy
import logging
from datetime import date, datetime, time, timedelta, timezone
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional, Tuple, TypeVar
from uuid import uuid4

from pydantic import BaseModel

from servicehub import data
from servicehub.models import (
    Appointment,
    AppointmentView,
    Category,
    CategoryView,
    Favorite,
    FavoriteView,
    Invoice,
    PromoQuote,
    Promotion,
    PromotionView,
    PublicUser,
    Refund,
    RefundView,
    Review,
    ReviewView,
    Service,
    ServiceView,
    User,
)
from servicehub.services import reports
from servicehub.services.pricing import (
    commission_for,
    compute_discount,
    promotion_is_expired,
    promotion_is_redeemable,
    round_money,
)
from servicehub.services.user_csv import export_users_csv, parse_users_csv
from servicehub.services.user_validation import (
    format_user_data,
    is_valid_email,
    is_valid_phone,
    validate_user_form,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

APPOINTMENT_STATUSES = {"pending", "confirmed", "completed", "cancelled"}
UPCOMING_STATUSES = {"pending", "confirmed"}
REFUNDABLE_STATUSES = {"completed", "cancelled"}
REFUND_OPEN_STATUSES = {"pending", "processing"}
DATE_RANGES = {"all", "today", "week", "month"}
CLIENT_SEGMENTS = {"all", "regular", "new", "vip"}
VIP_SPEND_THRESHOLD = 200.0

# Status changes a provider may apply from the appointments board.
PROVIDER_TRANSITIONS: Dict[str, set[str]] = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed"},
}


class MarketplaceStoreError(ValueError):
    """Base class for user-visible marketplace errors."""


class MarketplaceStoreValidationError(MarketplaceStoreError):
    pass


class MarketplaceStoreNotFoundError(MarketplaceStoreError):
    pass


class MarketplaceStoreConflictError(MarketplaceStoreError):
    pass


class MarketplaceStorePermissionError(MarketplaceStoreError):
    pass


class UserFormError(MarketplaceStoreValidationError):
    def __init__(self, errors: Dict[str, str]):
        super().__init__("User form is invalid")
        self.errors = errors


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:10]}"


def _find(rows: Iterable[ModelT], row_id: Optional[str]) -> Optional[ModelT]:
    if not row_id:
        return None
    for row in rows:
        if getattr(row, "id", None) == row_id:
            return row
    return None


def _replace(rows: List[ModelT], updated: ModelT) -> ModelT:
    for idx, row in enumerate(rows):
        if getattr(row, "id", None) == getattr(updated, "id", None):
            rows[idx] = updated
            return updated
    raise MarketplaceStoreNotFoundError("Record not found")


def _contains(term: str, *values: Optional[str]) -> bool:
    return any(term in (value or "").lower() for value in values)


def _months_ago(moment: datetime, months: int) -> datetime:
    year, month = moment.year, moment.month - months
    while month < 1:
        month += 12
        year -= 1
    return moment.replace(year=year, month=month, day=min(moment.day, calendar.monthrange(year, month)[1]))


def _average(values: List[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0.0


class MarketplaceStore:
    def __init__(self):
        self._lock = RLock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._users = [User.model_validate(row) for row in copy.deepcopy(data.users)]
            self._categories = [Category.model_validate(row) for row in copy.deepcopy(data.categories)]
            self._services = [Service.model_validate(row) for row in copy.deepcopy(data.services)]
            self._appointments = [Appointment.model_validate(row) for row in copy.deepcopy(data.appointments)]
            self._reviews = [Review.model_validate(row) for row in copy.deepcopy(data.reviews)]
            self._favorites = [Favorite.model_validate(row) for row in copy.deepcopy(data.favorites)]
            self._promotions = [Promotion.model_validate(row) for row in copy.deepcopy(data.promotions)]
            self._refunds = [Refund.model_validate(row) for row in copy.deepcopy(data.refunds)]

    # ----- lookups -----

    def get_user(self, user_id: str) -> Optional[User]:
        return _find(self._users, user_id)

    def get_service(self, service_id: str) -> Optional[Service]:
        return _find(self._services, service_id)

    def get_category(self, category_id: str) -> Optional[Category]:
        return _find(self._categories, category_id)

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return _find(self._appointments, appointment_id)

    def public_user(self, user: Optional[User]) -> Optional[PublicUser]:
        if user is None:
            return None
        return PublicUser.model_validate(user.model_dump(exclude={"password"}))

    def require_user(self, user_id: str) -> User:
        user = self.get_user(user_id)
        if not user:
            raise MarketplaceStoreNotFoundError("User not found")
        return user

    def require_role(self, user_id: str, role: str) -> User:
        user = self.require_user(user_id)
        if user.role != role:
            raise MarketplaceStorePermissionError(f"{role.capitalize()} access required")
        return user

    def _require_service(self, service_id: str) -> Service:
        service = self.get_service(service_id)
        if not service:
            raise MarketplaceStoreNotFoundError("Service not found")
        return service

    def _require_appointment(self, appointment_id: str) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        if not appointment:
            raise MarketplaceStoreNotFoundError("Appointment not found")
        return appointment

    def _service_view(self, service: Service) -> ServiceView:
        return ServiceView(
            **service.model_dump(),
            provider=self.public_user(self.get_user(service.provider_id)),
            category=self.get_category(service.category_id),
        )

    def _appointment_view(self, appointment: Appointment) -> AppointmentView:
        return AppointmentView(
            **appointment.model_dump(),
            client=self.public_user(self.get_user(appointment.client_id)),
            provider=self.public_user(self.get_user(appointment.provider_id)),
            service=self.get_service(appointment.service_id),
        )

    def _review_view(self, review: Review) -> ReviewView:
        return ReviewView(
            **review.model_dump(),
            client=self.public_user(self.get_user(review.client_id)),
            provider=self.public_user(self.get_user(review.provider_id)),
            service=self.get_service(review.service_id),
            appointment=self.get_appointment(review.appointment_id),
        )

    def _refund_view(self, refund: Refund) -> RefundView:
        appointment = self.get_appointment(refund.appointment_id)
        return RefundView(
            **refund.model_dump(),
            client=self.public_user(self.get_user(refund.client_id)),
            provider=self.public_user(self.get_user(refund.provider_id)),
            appointment=appointment,
            service=self.get_service(appointment.service_id) if appointment else None,
        )

    # ----- auth -----

    def signup(self, *, email: str, password: str, full_name: str, role: str = "client") -> User:
        if role not in {"provider", "client"}:
            raise MarketplaceStoreValidationError("Role must be provider or client")
        with self._lock:
            if any(user.email.lower() == email.strip().lower() for user in self._users):
                raise MarketplaceStoreConflictError("User already exists")
            if not is_valid_email(email.strip()):
                raise MarketplaceStoreValidationError("Please enter a valid email address")
            if len(password) < 6:
                raise MarketplaceStoreValidationError("Password must be at least 6 characters")
            if not full_name.strip():
                raise MarketplaceStoreValidationError("Full name is required")
            now = _utcnow()
            user = User(
                id=_new_id(role),
                email=email.strip().lower(),
                password=password,
                full_name=full_name.strip(),
                role=role,  # type: ignore[arg-type]
                # Providers wait for admin approval before they can sign in.
                is_approved=role == "client",
                created_at=now,
                updated_at=now,
            )
            self._users.append(user)
        logger.info("Signed up %s account %s", role, user.id)
        return user

    def authenticate(self, *, email: str, password: str) -> Optional[User]:
        """Return the matching user, or None when the pair is unknown."""
        needle = email.strip().lower()
        user = next((u for u in self._users if u.email.lower() == needle and u.password == password), None)
        if user and not user.is_approved:
            raise MarketplaceStorePermissionError("Account not approved yet")
        return user

    # ----- admin: users -----

    def list_users(self, q: Optional[str] = None, role: str = "all", status: str = "all") -> List[User]:
        role_key = (role or "all").strip().lower()
        status_key = (status or "all").strip().lower()
        if role_key not in {"all", "admin", "provider", "client"}:
            raise MarketplaceStoreValidationError("Invalid role filter. Allowed: all, admin, provider, client")
        if status_key not in {"all", "approved", "pending"}:
            raise MarketplaceStoreValidationError("Invalid status filter. Allowed: all, approved, pending")
        term = (q or "").strip().lower()
        result: List[User] = []
        for user in self._users:
            if term and not _contains(term, user.full_name, user.email):
                continue
            if role_key != "all" and user.role != role_key:
                continue
            if status_key == "approved" and not user.is_approved:
                continue
            if status_key == "pending" and user.is_approved:
                continue
            result.append(user)
        result.sort(key=lambda u: u.created_at, reverse=True)
        return result

    def user_stats(self) -> Dict[str, int]:
        users = list(self._users)
        return {
            "total": len(users),
            "admins": sum(1 for u in users if u.role == "admin"),
            "providers": sum(1 for u in users if u.role == "provider"),
            "clients": sum(1 for u in users if u.role == "client"),
            "pending_approval": sum(1 for u in users if u.role == "provider" and not u.is_approved),
        }

    def create_user(self, form: Dict[str, Any]) -> User:
        with self._lock:
            errors = validate_user_form(form, self._users)
            if errors:
                logger.warning("Rejected user form: %s", sorted(errors))
                raise UserFormError(errors)
            fields = format_user_data(form)
            now = _utcnow()
            user = User(
                id=_new_id(str(fields["role"])),
                email=fields["email"],
                password=str(fields["password"]),
                full_name=fields["full_name"],
                phone=fields["phone"],
                role=fields["role"],
                is_approved=bool(fields.get("is_approved", True)),
                bio=fields["bio"],
                location=fields["location"],
                created_at=now,
                updated_at=now,
            )
            self._users.insert(0, user)
        logger.info("Created %s user %s", user.role, user.id)
        return user

    def set_user_approval(self, user_id: str, approved: bool) -> User:
        with self._lock:
            user = self.require_user(user_id)
            updated = user.model_copy(update={"is_approved": approved, "updated_at": _utcnow()})
            return _replace(self._users, updated)

    def delete_user(self, user_id: str, actor_user_id: Optional[str] = None) -> None:
        with self._lock:
            self.require_user(user_id)
            if actor_user_id and actor_user_id == user_id:
                raise MarketplaceStoreConflictError("You cannot delete your own account")
            self._users = [u for u in self._users if u.id != user_id]
        logger.info("Deleted user %s", user_id)

    def preview_user_import(self, csv_text: str) -> List[Dict[str, Any]]:
        return parse_users_csv(csv_text)

    def import_users(self, csv_text: str) -> Tuple[List[User], int]:
        rows = parse_users_csv(csv_text)
        imported: List[User] = []
        skipped = 0
        with self._lock:
            existing = {user.email.lower() for user in self._users}
            now = _utcnow()
            for index, row in enumerate(rows):
                email = str(row["email"]).strip().lower()
                if email in existing:
                    skipped += 1
                    continue
                existing.add(email)
                imported.append(
                    User(
                        id=f"import-{uuid4().hex[:8]}-{index}",
                        email=email,
                        password=row["password"],
                        full_name=row["full_name"],
                        phone=row.get("phone") or None,
                        role=row["role"],
                        is_approved=bool(row["is_approved"]),
                        bio=row.get("bio") or None,
                        location=row.get("location") or None,
                        created_at=now,
                        updated_at=now,
                    )
                )
            self._users = imported + self._users
        logger.info("Imported %d users (%d duplicate emails skipped)", len(imported), skipped)
        return imported, skipped

    def export_users(self) -> str:
        return export_users_csv(self.list_users())

    # ----- admin: categories -----

    def _category_view(self, category: Category) -> CategoryView:
        count = sum(1 for s in self._services if s.category_id == category.id)
        return CategoryView(**category.model_dump(), service_count=count)

    def list_categories(self, q: Optional[str] = None) -> List[CategoryView]:
        term = (q or "").strip().lower()
        return [self._category_view(c) for c in self._categories if not term or term in c.name.lower()]

    def category_stats(self) -> Dict[str, int]:
        views = self.list_categories()
        return {
            "total_categories": len(views),
            "total_services": sum(v.service_count for v in views),
            "categories_in_use": sum(1 for v in views if v.service_count > 0),
        }

    def create_category(self, *, name: str, description: str = "", icon: str = "") -> CategoryView:
        if not name.strip():
            raise MarketplaceStoreValidationError("Category name is required")
        category = Category(
            id=_new_id("cat"),
            name=name.strip(),
            description=description.strip(),
            icon=icon.strip(),
            created_at=_utcnow(),
        )
        with self._lock:
            self._categories.append(category)
        return self._category_view(category)

    def update_category(self, category_id: str, *, name: str, description: str = "", icon: str = "") -> CategoryView:
        if not name.strip():
            raise MarketplaceStoreValidationError("Category name is required")
        with self._lock:
            category = self.get_category(category_id)
            if not category:
                raise MarketplaceStoreNotFoundError("Category not found")
            updated = category.model_copy(
                update={"name": name.strip(), "description": description.strip(), "icon": icon.strip()}
            )
            _replace(self._categories, updated)
        return self._category_view(updated)

    def delete_category(self, category_id: str) -> None:
        with self._lock:
            category = self.get_category(category_id)
            if not category:
                raise MarketplaceStoreNotFoundError("Category not found")
            if self._category_view(category).service_count > 0:
                raise MarketplaceStoreConflictError(
                    "Cannot delete category with existing services. Please move or delete services first."
                )
            self._categories = [c for c in self._categories if c.id != category_id]

    # ----- services -----

    def list_services(
        self,
        q: Optional[str] = None,
        category_id: Optional[str] = None,
        status: str = "all",
        provider_id: Optional[str] = None,
    ) -> List[ServiceView]:
        status_key = (status or "all").strip().lower()
        if status_key not in {"all", "active", "inactive"}:
            raise MarketplaceStoreValidationError("Invalid status filter. Allowed: all, active, inactive")
        term = (q or "").strip().lower()
        result: List[ServiceView] = []
        for service in self._services:
            if provider_id and service.provider_id != provider_id:
                continue
            if category_id and category_id != "all" and service.category_id != category_id:
                continue
            if status_key == "active" and not service.is_active:
                continue
            if status_key == "inactive" and service.is_active:
                continue
            view = self._service_view(service)
            if term and not _contains(
                term,
                view.name,
                view.description,
                view.provider.full_name if view.provider else None,
            ):
                continue
            result.append(view)
        return result

    def service_stats(self) -> Dict[str, Any]:
        services = list(self._services)
        return {
            "total": len(services),
            "active": sum(1 for s in services if s.is_active),
            "inactive": sum(1 for s in services if not s.is_active),
            "average_price": _average([s.price for s in services]),
        }

    def _owned_service(self, service_id: str, owner_id: Optional[str]) -> Service:
        service = self._require_service(service_id)
        if owner_id and service.provider_id != owner_id:
            raise MarketplaceStorePermissionError("Only the owning provider can change this service")
        return service

    def toggle_service(self, service_id: str, owner_id: Optional[str] = None) -> Service:
        with self._lock:
            service = self._owned_service(service_id, owner_id)
            updated = service.model_copy(update={"is_active": not service.is_active, "updated_at": _utcnow()})
            return _replace(self._services, updated)

    def delete_service(self, service_id: str, owner_id: Optional[str] = None) -> None:
        with self._lock:
            self._owned_service(service_id, owner_id)
            self._services = [s for s in self._services if s.id != service_id]
            self._favorites = [f for f in self._favorites if f.service_id != service_id]

    def _validate_service_fields(self, price: float, duration: int, category_id: str) -> None:
        if price < 0:
            raise MarketplaceStoreValidationError("Price must be zero or more")
        if duration <= 0:
            raise MarketplaceStoreValidationError("Duration must be a positive number of minutes")
        if not self.get_category(category_id):
            raise MarketplaceStoreValidationError("Unknown category")

    def create_service(
        self,
        *,
        provider_id: str,
        name: str,
        description: str,
        price: float,
        duration: int,
        category_id: str,
        is_active: bool = True,
    ) -> ServiceView:
        if not name.strip():
            raise MarketplaceStoreValidationError("Service name is required")
        self._validate_service_fields(price, duration, category_id)
        now = _utcnow()
        service = Service(
            id=_new_id("service"),
            provider_id=provider_id,
            category_id=category_id,
            name=name.strip(),
            description=description.strip(),
            price=round_money(price),
            duration=duration,
            is_active=is_active,
            image_url=data.SERVICE_IMAGE_PLACEHOLDER,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._services.append(service)
        return self._service_view(service)

    def update_service(
        self,
        service_id: str,
        *,
        provider_id: str,
        name: str,
        description: str,
        price: float,
        duration: int,
        category_id: str,
        is_active: bool,
    ) -> ServiceView:
        if not name.strip():
            raise MarketplaceStoreValidationError("Service name is required")
        self._validate_service_fields(price, duration, category_id)
        with self._lock:
            service = self._owned_service(service_id, provider_id)
            updated = service.model_copy(
                update={
                    "name": name.strip(),
                    "description": description.strip(),
                    "price": round_money(price),
                    "duration": duration,
                    "category_id": category_id,
                    "is_active": is_active,
                    "updated_at": _utcnow(),
                }
            )
            _replace(self._services, updated)
        return self._service_view(updated)

    # ----- appointments -----

    def list_appointments(
        self,
        q: Optional[str] = None,
        status: str = "all",
        date_range: str = "all",
        client_id: Optional[str] = None,
        provider_id: Optional[str] = None,
    ) -> List[AppointmentView]:
        status_key = (status or "all").strip().lower()
        range_key = (date_range or "all").strip().lower()
        if status_key != "all" and status_key not in APPOINTMENT_STATUSES:
            raise MarketplaceStoreValidationError(
                "Invalid status filter. Allowed: all, pending, confirmed, completed, cancelled"
            )
        if range_key not in DATE_RANGES:
            raise MarketplaceStoreValidationError("Invalid date range. Allowed: all, today, week, month")

        now = _utcnow()
        term = (q or "").strip().lower()
        result: List[AppointmentView] = []
        for appointment in self._appointments:
            if client_id and appointment.client_id != client_id:
                continue
            if provider_id and appointment.provider_id != provider_id:
                continue
            if status_key != "all" and appointment.status != status_key:
                continue
            when = appointment.appointment_date
            if range_key == "today" and when.astimezone(timezone.utc).date() != now.date():
                continue
            if range_key == "week" and when < now - timedelta(days=7):
                continue
            if range_key == "month" and when < _months_ago(now, 1):
                continue
            view = self._appointment_view(appointment)
            if term and not _contains(
                term,
                view.client.full_name if view.client else None,
                view.provider.full_name if view.provider else None,
                view.service.name if view.service else None,
            ):
                continue
            result.append(view)
        result.sort(key=lambda apt: apt.appointment_date, reverse=True)
        return result

    def appointment_stats(self, rows: Optional[List[AppointmentView]] = None) -> Dict[str, Any]:
        appointments = rows if rows is not None else self.list_appointments()
        by_status = {status: 0 for status in sorted(APPOINTMENT_STATUSES)}
        for apt in appointments:
            by_status[apt.status] += 1
        commission = sum(apt.commission_amount for apt in appointments if apt.status == "completed")
        return {"total": len(appointments), **by_status, "platform_revenue": round_money(commission)}

    def completed_appointments(self, provider_id: Optional[str] = None) -> List[AppointmentView]:
        return self.list_appointments(status="completed", provider_id=provider_id)

    def upcoming_appointments(
        self,
        *,
        client_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        limit: Optional[int] = 5,
    ) -> List[AppointmentView]:
        now = _utcnow()
        rows = [
            apt
            for apt in self.list_appointments(client_id=client_id, provider_id=provider_id)
            if apt.status in UPCOMING_STATUSES and apt.appointment_date > now
        ]
        rows.sort(key=lambda apt: apt.appointment_date)
        return rows[:limit] if limit else rows

    def update_appointment_status(self, appointment_id: str, *, provider_id: str, status: str) -> Appointment:
        with self._lock:
            appointment = self._require_appointment(appointment_id)
            if appointment.provider_id != provider_id:
                raise MarketplaceStorePermissionError("Only the booked provider can update this appointment")
            current = appointment.status
            if status not in PROVIDER_TRANSITIONS.get(current, set()):
                raise MarketplaceStoreValidationError(f"Invalid status transition: {current} -> {status}")
            if status == "completed" and appointment.appointment_date > _utcnow():
                raise MarketplaceStoreValidationError("Appointment cannot be completed before it takes place")
            updated = appointment.model_copy(update={"status": status, "updated_at": _utcnow()})
            _replace(self._appointments, updated)
        logger.info("Appointment %s moved %s -> %s by %s", appointment_id, current, status, provider_id)
        return updated

    def _client_appointment(self, appointment_id: str, client_id: str) -> Appointment:
        appointment = self._require_appointment(appointment_id)
        if appointment.client_id != client_id:
            raise MarketplaceStorePermissionError("This appointment belongs to another client")
        return appointment

    def cancel_appointment(self, appointment_id: str, *, client_id: str) -> Appointment:
        with self._lock:
            appointment = self._client_appointment(appointment_id, client_id)
            if appointment.status != "pending":
                raise MarketplaceStoreValidationError("Only pending appointments can be cancelled")
            updated = appointment.model_copy(update={"status": "cancelled", "updated_at": _utcnow()})
            return _replace(self._appointments, updated)

    def reschedule_appointment(
        self,
        appointment_id: str,
        *,
        client_id: str,
        new_date: date,
        new_time: str,
    ) -> Appointment:
        when = self._validate_slot(new_date, new_time)
        with self._lock:
            appointment = self._client_appointment(appointment_id, client_id)
            if appointment.status != "confirmed":
                raise MarketplaceStoreValidationError("Only confirmed appointments can be rescheduled")
            updated = appointment.model_copy(
                update={"appointment_date": when, "status": "pending", "updated_at": _utcnow()}
            )
            return _replace(self._appointments, updated)

    # ----- booking & payment -----

    def booking_view(self, service_id: str) -> Dict[str, Any]:
        service = self._require_service(service_id)
        reviews = self.list_reviews(provider_id=service.provider_id)
        return {
            "service": self._service_view(service),
            "provider": self.public_user(self.get_user(service.provider_id)),
            "reviews": reviews,
            "average_rating": _average([r.rating for r in reviews]),
            "time_slots": list(data.TIME_SLOTS),
        }

    def _validate_slot(self, slot_date: date, slot_time: str) -> datetime:
        if slot_time not in data.TIME_SLOTS:
            raise MarketplaceStoreValidationError("Please select a listed time slot")
        now = _utcnow()
        if slot_date < now.date():
            raise MarketplaceStoreValidationError("Appointments cannot be booked in the past")
        if slot_date.weekday() == 6:
            raise MarketplaceStoreValidationError("Appointments are not available on Sundays")
        when = datetime.combine(slot_date, time.fromisoformat(slot_time), tzinfo=timezone.utc)
        if when <= now:
            raise MarketplaceStoreValidationError("Selected time has already passed")
        return when

    def _redeemable_promotion(self, service: Service, code: str) -> Promotion:
        needle = code.strip().upper()
        now = _utcnow()
        promotion = next(
            (p for p in self._promotions if p.code == needle and p.provider_id == service.provider_id),
            None,
        )
        if not promotion or not promotion_is_redeemable(promotion, now):
            raise MarketplaceStoreValidationError("Invalid or expired promo code")
        if service.price < promotion.min_amount:
            raise MarketplaceStoreValidationError(f"Minimum amount required: ${promotion.min_amount:g}")
        return promotion

    def quote_promotion(self, service_id: str, code: str) -> PromoQuote:
        service = self._require_service(service_id)
        promotion = self._redeemable_promotion(service, code)
        discount = compute_discount(service.price, promotion)
        return PromoQuote(
            code=promotion.code,
            service_id=service.id,
            price=service.price,
            discount=discount,
            final_price=round_money(service.price - discount),
        )

    def book_service(
        self,
        *,
        client_id: str,
        service_id: str,
        slot_date: date,
        slot_time: str,
        notes: str = "",
        promo_code: Optional[str] = None,
    ) -> Appointment:
        when = self._validate_slot(slot_date, slot_time)
        with self._lock:
            service = self._require_service(service_id)
            if not service.is_active:
                raise MarketplaceStoreValidationError("This service is not currently offered")
            discount = 0.0
            promotion: Optional[Promotion] = None
            if promo_code and promo_code.strip():
                promotion = self._redeemable_promotion(service, promo_code)
                discount = compute_discount(service.price, promotion)
            total = round_money(service.price - discount)
            now = _utcnow()
            appointment = Appointment(
                id=_new_id("apt"),
                client_id=client_id,
                provider_id=service.provider_id,
                service_id=service.id,
                appointment_date=when,
                status="pending",
                notes=notes.strip(),
                total_amount=total,
                commission_amount=commission_for(total),
                promo_code=promotion.code if promotion else None,
                discount_amount=discount,
                created_at=now,
                updated_at=now,
            )
            self._appointments.append(appointment)
            if promotion:
                _replace(self._promotions, promotion.model_copy(update={"used_count": promotion.used_count + 1}))
        logger.info("Booked %s for client %s (%s)", service.id, client_id, appointment.id)
        return appointment

    def payable_appointment(self, appointment_id: str, *, client_id: str) -> Appointment:
        appointment = self._client_appointment(appointment_id, client_id)
        if appointment.status == "cancelled":
            raise MarketplaceStoreValidationError("Cancelled appointments cannot be paid")
        if appointment.paid_at is not None:
            raise MarketplaceStoreConflictError("Appointment is already paid")
        return appointment

    def mark_paid(self, appointment_id: str, *, client_id: str) -> Appointment:
        with self._lock:
            appointment = self.payable_appointment(appointment_id, client_id=client_id)
            now = _utcnow()
            updated = appointment.model_copy(update={"paid_at": now, "updated_at": now})
            _replace(self._appointments, updated)
        logger.info("Appointment %s paid by %s", appointment_id, client_id)
        return updated

    # ----- reviews -----

    def list_reviews(
        self,
        *,
        client_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        q: Optional[str] = None,
    ) -> List[ReviewView]:
        term = (q or "").strip().lower()
        result: List[ReviewView] = []
        for review in self._reviews:
            if client_id and review.client_id != client_id:
                continue
            if provider_id and review.provider_id != provider_id:
                continue
            view = self._review_view(review)
            if term and not _contains(
                term,
                view.provider.full_name if view.provider else None,
                view.service.name if view.service else None,
            ):
                continue
            result.append(view)
        result.sort(key=lambda r: r.created_at, reverse=True)
        return result

    def reviewable_appointments(self, client_id: str) -> List[AppointmentView]:
        reviewed = {r.appointment_id for r in self._reviews if r.client_id == client_id}
        return [
            apt
            for apt in self.list_appointments(client_id=client_id, status="completed")
            if apt.id not in reviewed
        ]

    def create_review(self, *, client_id: str, appointment_id: str, rating: int, comment: str) -> Review:
        with self._lock:
            appointment = self._client_appointment(appointment_id, client_id)
            if appointment.status != "completed":
                raise MarketplaceStoreValidationError("Only completed appointments can be reviewed")
            if any(r.appointment_id == appointment_id and r.client_id == client_id for r in self._reviews):
                raise MarketplaceStoreConflictError("This appointment has already been reviewed")
            review = Review(
                id=_new_id("review"),
                client_id=client_id,
                provider_id=appointment.provider_id,
                service_id=appointment.service_id,
                appointment_id=appointment.id,
                rating=rating,
                comment=comment.strip(),
                created_at=_utcnow(),
            )
            self._reviews.insert(0, review)
            return review

    def _own_review(self, review_id: str, client_id: str) -> Review:
        review = _find(self._reviews, review_id)
        if not review:
            raise MarketplaceStoreNotFoundError("Review not found")
        if review.client_id != client_id:
            raise MarketplaceStorePermissionError("Only the author can change this review")
        return review

    def update_review(self, review_id: str, *, client_id: str, rating: int, comment: str) -> Review:
        with self._lock:
            review = self._own_review(review_id, client_id)
            updated = review.model_copy(update={"rating": rating, "comment": comment.strip()})
            return _replace(self._reviews, updated)

    def delete_review(self, review_id: str, *, client_id: str) -> None:
        with self._lock:
            self._own_review(review_id, client_id)
            self._reviews = [r for r in self._reviews if r.id != review_id]

    # ----- favorites -----

    def list_favorites(self, client_id: str, q: Optional[str] = None) -> List[FavoriteView]:
        term = (q or "").strip().lower()
        result: List[FavoriteView] = []
        for favorite in self._favorites:
            if favorite.client_id != client_id:
                continue
            service = self.get_service(favorite.service_id)
            view = FavoriteView(**favorite.model_dump(), service=self._service_view(service) if service else None)
            if term:
                svc = view.service
                if not svc or not _contains(
                    term,
                    svc.name,
                    svc.provider.full_name if svc.provider else None,
                    svc.category.name if svc.category else None,
                ):
                    continue
            result.append(view)
        return result

    def add_favorite(self, *, client_id: str, service_id: str) -> Favorite:
        with self._lock:
            service = self._require_service(service_id)
            if not service.is_active:
                raise MarketplaceStoreValidationError("This service is not currently offered")
            existing = next(
                (f for f in self._favorites if f.client_id == client_id and f.service_id == service_id),
                None,
            )
            if existing:
                return existing
            favorite = Favorite(id=_new_id("fav"), client_id=client_id, service_id=service_id, created_at=_utcnow())
            self._favorites.append(favorite)
            return favorite

    def remove_favorite(self, favorite_id: str, *, client_id: str) -> None:
        with self._lock:
            favorite = _find(self._favorites, favorite_id)
            if not favorite or favorite.client_id != client_id:
                raise MarketplaceStoreNotFoundError("Favorite not found")
            self._favorites = [f for f in self._favorites if f.id != favorite_id]

    # ----- refunds -----

    def list_refunds(
        self,
        q: Optional[str] = None,
        status: str = "all",
        client_id: Optional[str] = None,
    ) -> List[RefundView]:
        status_key = (status or "all").strip().lower()
        if status_key not in {"all", "pending", "approved", "rejected", "processing"}:
            raise MarketplaceStoreValidationError(
                "Invalid status filter. Allowed: all, pending, approved, rejected, processing"
            )
        term = (q or "").strip().lower()
        result: List[RefundView] = []
        for refund in self._refunds:
            if client_id and refund.client_id != client_id:
                continue
            if status_key != "all" and refund.status != status_key:
                continue
            view = self._refund_view(refund)
            if term and not _contains(
                term,
                view.client.full_name if view.client else None,
                view.provider.full_name if view.provider else None,
                view.service.name if view.service else None,
                view.reason,
            ):
                continue
            result.append(view)
        result.sort(key=lambda r: r.requested_at, reverse=True)
        return result

    def refund_stats(self, refunds: List[RefundView]) -> Dict[str, Any]:
        return {
            "total": len(refunds),
            "pending": sum(1 for r in refunds if r.status == "pending"),
            "approved": sum(1 for r in refunds if r.status == "approved"),
            "rejected": sum(1 for r in refunds if r.status == "rejected"),
            "approved_amount": round_money(sum(r.amount for r in refunds if r.status == "approved")),
        }

    def refund_eligible_appointments(self, client_id: str) -> List[AppointmentView]:
        refunded = {r.appointment_id for r in self._refunds}
        return [
            apt
            for apt in self.list_appointments(client_id=client_id)
            if apt.status in REFUNDABLE_STATUSES and apt.id not in refunded
        ]

    def request_refund(self, *, client_id: str, appointment_id: str, amount: float, reason: str) -> Refund:
        if not reason.strip():
            raise MarketplaceStoreValidationError("Please explain why you are requesting a refund")
        with self._lock:
            appointment = self._client_appointment(appointment_id, client_id)
            if appointment.status not in REFUNDABLE_STATUSES:
                raise MarketplaceStoreValidationError("Only completed or cancelled appointments can be refunded")
            if any(r.appointment_id == appointment_id for r in self._refunds):
                raise MarketplaceStoreConflictError("A refund was already requested for this appointment")
            if amount <= 0:
                raise MarketplaceStoreValidationError("Refund amount must be positive")
            if amount > appointment.total_amount:
                raise MarketplaceStoreValidationError(
                    f"Refund amount cannot exceed the appointment total (${appointment.total_amount:g})"
                )
            refund = Refund(
                id=_new_id("refund"),
                appointment_id=appointment.id,
                client_id=client_id,
                provider_id=appointment.provider_id,
                amount=round_money(amount),
                reason=reason.strip(),
                status="pending",
                requested_at=_utcnow(),
            )
            self._refunds.append(refund)
        logger.info("Refund %s requested for %s (%.2f)", refund.id, appointment_id, refund.amount)
        return refund

    def decide_refund(self, refund_id: str, *, action: str, admin_notes: str = "") -> Refund:
        if action not in {"approve", "reject"}:
            raise MarketplaceStoreValidationError("Action must be approve or reject")
        with self._lock:
            refund = _find(self._refunds, refund_id)
            if not refund:
                raise MarketplaceStoreNotFoundError("Refund not found")
            if refund.status not in REFUND_OPEN_STATUSES:
                raise MarketplaceStoreConflictError(f"Refund is already {refund.status}")
            approved = action == "approve"
            default_note = "Refund approved" if approved else "Refund rejected"
            updated = refund.model_copy(
                update={
                    "status": "approved" if approved else "rejected",
                    "processed_at": _utcnow(),
                    "admin_notes": admin_notes.strip() or default_note,
                }
            )
            _replace(self._refunds, updated)
        logger.info("Refund %s %s", refund_id, updated.status)
        return updated

    # ----- promotions -----

    def _promotion_view(self, promotion: Promotion) -> PromotionView:
        expired = promotion_is_expired(promotion, _utcnow())
        return PromotionView(
            **promotion.model_dump(),
            is_expired=expired,
            is_currently_active=promotion.is_active and not expired,
        )

    def list_promotions(self, provider_id: str) -> List[PromotionView]:
        return [self._promotion_view(p) for p in self._promotions if p.provider_id == provider_id]

    def _validate_promotion(
        self,
        *,
        provider_id: str,
        code: str,
        discount_type: str,
        discount_value: float,
        start_date: date,
        end_date: date,
        ignore_id: Optional[str] = None,
    ) -> str:
        normalized = code.strip().upper()
        if not normalized:
            raise MarketplaceStoreValidationError("Promotion code is required")
        if discount_type == "percentage" and not 0 < discount_value <= 100:
            raise MarketplaceStoreValidationError("Percentage discount must be between 0 and 100")
        if discount_type == "fixed" and discount_value <= 0:
            raise MarketplaceStoreValidationError("Fixed discount must be positive")
        if end_date < start_date:
            raise MarketplaceStoreValidationError("End date must be on or after start date")
        for promotion in self._promotions:
            if promotion.id != ignore_id and promotion.provider_id == provider_id and promotion.code == normalized:
                raise MarketplaceStoreConflictError("You already have a promotion with this code")
        return normalized

    def _promotion_window(self, start_date: date, end_date: date) -> Tuple[datetime, datetime]:
        start = datetime.combine(start_date, time(0, 0), tzinfo=timezone.utc)
        end = datetime.combine(end_date, time(23, 59, 59), tzinfo=timezone.utc)
        return start, end

    def create_promotion(
        self,
        *,
        provider_id: str,
        code: str,
        description: str,
        discount_type: str,
        discount_value: float,
        min_amount: Optional[float],
        max_uses: Optional[int],
        start_date: date,
        end_date: date,
        is_active: bool = True,
    ) -> PromotionView:
        with self._lock:
            normalized = self._validate_promotion(
                provider_id=provider_id,
                code=code,
                discount_type=discount_type,
                discount_value=discount_value,
                start_date=start_date,
                end_date=end_date,
            )
            start, end = self._promotion_window(start_date, end_date)
            promotion = Promotion(
                id=_new_id("promo"),
                provider_id=provider_id,
                code=normalized,
                description=description.strip(),
                discount_type=discount_type,  # type: ignore[arg-type]
                discount_value=discount_value,
                min_amount=min_amount or 0.0,
                max_uses=max_uses or None,
                used_count=0,
                start_date=start,
                end_date=end,
                is_active=is_active,
                created_at=_utcnow(),
            )
            self._promotions.append(promotion)
        return self._promotion_view(promotion)

    def _owned_promotion(self, promotion_id: str, provider_id: str) -> Promotion:
        promotion = _find(self._promotions, promotion_id)
        if not promotion:
            raise MarketplaceStoreNotFoundError("Promotion not found")
        if promotion.provider_id != provider_id:
            raise MarketplaceStorePermissionError("Only the owning provider can change this promotion")
        return promotion

    def update_promotion(
        self,
        promotion_id: str,
        *,
        provider_id: str,
        code: str,
        description: str,
        discount_type: str,
        discount_value: float,
        min_amount: Optional[float],
        max_uses: Optional[int],
        start_date: date,
        end_date: date,
        is_active: bool,
    ) -> PromotionView:
        with self._lock:
            promotion = self._owned_promotion(promotion_id, provider_id)
            normalized = self._validate_promotion(
                provider_id=provider_id,
                code=code,
                discount_type=discount_type,
                discount_value=discount_value,
                start_date=start_date,
                end_date=end_date,
                ignore_id=promotion_id,
            )
            start, end = self._promotion_window(start_date, end_date)
            updated = promotion.model_copy(
                update={
                    "code": normalized,
                    "description": description.strip(),
                    "discount_type": discount_type,
                    "discount_value": discount_value,
                    "min_amount": min_amount or 0.0,
                    "max_uses": max_uses or None,
                    "start_date": start,
                    "end_date": end,
                    "is_active": is_active,
                }
            )
            _replace(self._promotions, updated)
        return self._promotion_view(updated)

    def toggle_promotion(self, promotion_id: str, *, provider_id: str) -> PromotionView:
        with self._lock:
            promotion = self._owned_promotion(promotion_id, provider_id)
            updated = promotion.model_copy(update={"is_active": not promotion.is_active})
            _replace(self._promotions, updated)
        return self._promotion_view(updated)

    def delete_promotion(self, promotion_id: str, *, provider_id: str) -> None:
        with self._lock:
            self._owned_promotion(promotion_id, provider_id)
            self._promotions = [p for p in self._promotions if p.id != promotion_id]

    # ----- invoices & revenue -----

    def list_invoices(
        self,
        *,
        provider_id: Optional[str] = None,
        q: Optional[str] = None,
        status: str = "all",
    ) -> List[Invoice]:
        status_key = (status or "all").strip().lower()
        if status_key not in {"all", "paid", "pending", "failed", "refunded"}:
            raise MarketplaceStoreValidationError(
                "Invalid status filter. Allowed: all, paid, pending, failed, refunded"
            )
        refunded = {r.appointment_id for r in self._refunds if r.status == "approved"}
        invoices = [
            reports.build_invoice(apt, refunded=apt.id in refunded)
            for apt in self.completed_appointments(provider_id=provider_id)
        ]
        invoices = [
            inv
            for inv in invoices
            if reports.invoice_matches(inv, q) and (status_key == "all" or inv.payment_status == status_key)
        ]
        invoices.sort(key=lambda inv: inv.created_at, reverse=True)
        return invoices

    def admin_revenue(self) -> Dict[str, Any]:
        completed = self.completed_appointments()
        category_names = {c.id: c.name for c in self._categories}
        return {
            "totals": reports.revenue_totals(completed),
            "by_provider": reports.revenue_by_provider(completed),
            "by_category": reports.revenue_by_category(completed, category_names),
            "by_month": reports.revenue_by_month(completed),
            "top_transactions": reports.top_transactions(completed),
        }

    def provider_revenue(self, provider_id: str) -> Dict[str, Any]:
        completed = self.completed_appointments(provider_id=provider_id)
        totals = reports.revenue_totals(completed)
        return {
            "totals": {
                "net_revenue": totals["provider_earnings"],
                "commission": totals["platform_commission"],
                "gross": totals["total_revenue"],
                "transactions": totals["transactions"],
            },
            "by_service": reports.revenue_by_service(completed),
            "by_month": reports.revenue_by_month(completed),
            "recent_transactions": completed[:10],
        }

    # ----- provider clients -----

    def provider_clients(self, provider_id: str, q: Optional[str] = None, segment: str = "all") -> List[Dict[str, Any]]:
        segment_key = (segment or "all").strip().lower()
        if segment_key not in CLIENT_SEGMENTS:
            raise MarketplaceStoreValidationError("Invalid segment. Allowed: all, regular, new, vip")

        clients: Dict[str, Dict[str, Any]] = {}
        for apt in self.list_appointments(provider_id=provider_id):
            client = apt.client
            if not client:
                continue
            entry = clients.setdefault(
                client.id,
                {"client": client, "appointments": [], "total_spent": 0.0, "last_visit": None, "reviews": []},
            )
            entry["appointments"].append(apt)
            if apt.status == "completed":
                entry["total_spent"] += apt.total_amount
            if entry["last_visit"] is None or apt.appointment_date > entry["last_visit"]:
                entry["last_visit"] = apt.appointment_date
        for review in self._reviews:
            if review.provider_id == provider_id and review.client_id in clients:
                clients[review.client_id]["reviews"].append(review)

        term = (q or "").strip().lower()
        result: List[Dict[str, Any]] = []
        for entry in clients.values():
            count = len(entry["appointments"])
            entry["total_spent"] = round_money(entry["total_spent"])
            entry["completed_appointments"] = sum(1 for a in entry["appointments"] if a.status == "completed")
            entry["average_rating"] = _average([r.rating for r in entry["reviews"]])
            entry["badges"] = [
                badge
                for badge, applies in (("VIP", count >= 5), ("Regular", count >= 3), ("New", count == 1))
                if applies
            ]
            if term and not _contains(term, entry["client"].full_name, entry["client"].email):
                continue
            if segment_key == "regular" and count < 3:
                continue
            if segment_key == "new" and count != 1:
                continue
            if segment_key == "vip" and entry["total_spent"] < VIP_SPEND_THRESHOLD:
                continue
            result.append(entry)
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        result.sort(key=lambda e: e["last_visit"] or epoch, reverse=True)
        return result

    def counterpart_ids(self, user_id: str) -> List[str]:
        """Users sharing at least one appointment with ``user_id``, in first-seen order."""
        seen: List[str] = []
        for apt in self._appointments:
            other = None
            if apt.provider_id == user_id:
                other = apt.client_id
            elif apt.client_id == user_id:
                other = apt.provider_id
            if other and other not in seen:
                seen.append(other)
        return seen

    # ----- dashboards & profile -----

    def admin_dashboard(self) -> Dict[str, Any]:
        stats = self.user_stats()
        return {
            "users": stats["total"],
            "pending_approvals": stats["pending_approval"],
            "services": len(self._services),
            "appointments": len(self._appointments),
            "pending_refunds": sum(1 for r in self._refunds if r.status == "pending"),
            "platform_commission": reports.revenue_totals(self.completed_appointments())["platform_commission"],
        }

    def provider_stats(self, provider_id: str) -> Dict[str, Any]:
        appointments = [a for a in self._appointments if a.provider_id == provider_id]
        completed = [a for a in appointments if a.status == "completed"]
        ratings = [r.rating for r in self._reviews if r.provider_id == provider_id]
        return {
            "total_appointments": len(appointments),
            "completed_appointments": len(completed),
            "total_revenue": round_money(sum(a.total_amount - a.commission_amount for a in completed)),
            "total_clients": len({a.client_id for a in appointments}),
            "average_rating": _average(ratings),
            "total_reviews": len(ratings),
        }

    def client_stats(self, client_id: str) -> Dict[str, Any]:
        appointments = [a for a in self._appointments if a.client_id == client_id]
        completed = [a for a in appointments if a.status == "completed"]
        return {
            "total_appointments": len(appointments),
            "completed_appointments": len(completed),
            "favorite_services": sum(1 for f in self._favorites if f.client_id == client_id),
            "total_spent": round_money(sum(a.total_amount for a in completed)),
        }

    def provider_dashboard(self, provider_id: str) -> Dict[str, Any]:
        return {
            "stats": self.provider_stats(provider_id),
            "upcoming_appointments": self.upcoming_appointments(provider_id=provider_id),
            "recent_reviews": self.list_reviews(provider_id=provider_id)[:3],
        }

    def client_dashboard(self, client_id: str) -> Dict[str, Any]:
        return {
            "stats": self.client_stats(client_id),
            "upcoming_appointments": self.upcoming_appointments(client_id=client_id),
        }

    def profile_stats(self, user: User) -> Dict[str, Any]:
        if user.role == "provider":
            stats = self.provider_stats(user.id)
            return {
                "total_appointments": stats["total_appointments"],
                "completed_appointments": stats["completed_appointments"],
                "total_earnings": stats["total_revenue"],
                "average_rating": stats["average_rating"],
                "total_reviews": stats["total_reviews"],
            }
        if user.role == "client":
            stats = self.client_stats(user.id)
            return {
                "total_appointments": stats["total_appointments"],
                "completed_appointments": stats["completed_appointments"],
                "total_spent": stats["total_spent"],
            }
        return {}

    def update_profile(self, user_id: str, changes: Dict[str, Optional[str]]) -> User:
        with self._lock:
            user = self.require_user(user_id)
            update: Dict[str, Any] = {}
            if changes.get("full_name") is not None:
                if not changes["full_name"].strip():
                    raise MarketplaceStoreValidationError("Full name is required")
                update["full_name"] = changes["full_name"].strip()
            if changes.get("email") is not None:
                email = changes["email"].strip().lower()
                if not is_valid_email(email):
                    raise MarketplaceStoreValidationError("Please enter a valid email address")
                if any(u.email.lower() == email and u.id != user_id for u in self._users):
                    raise MarketplaceStoreConflictError("This email is already registered")
                update["email"] = email
            if changes.get("phone") is not None:
                phone = changes["phone"].strip()
                if phone and not is_valid_phone(phone):
                    raise MarketplaceStoreValidationError("Please enter a valid phone number")
                update["phone"] = phone or None
            for field in ("bio", "location"):
                if changes.get(field) is not None:
                    update[field] = changes[field].strip() or None
            if changes.get("website") is not None:
                if user.role != "provider":
                    raise MarketplaceStoreValidationError("Only providers can list a website")
                update["website"] = changes["website"].strip() or None
            update["updated_at"] = _utcnow()
            return _replace(self._users, user.model_copy(update=update))


marketplace_store = MarketplaceStore()
