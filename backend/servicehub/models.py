from datetime import date, datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["admin", "provider", "client"]
AppointmentStatus = Literal["pending", "confirmed", "completed", "cancelled"]
RefundStatus = Literal["pending", "approved", "rejected", "processing"]
NotificationType = Literal["appointment", "payment", "review", "report", "system", "reminder", "promotion"]


class User(BaseModel):
    id: str
    email: str
    password: str
    full_name: str
    phone: Optional[str] = None
    avatar_url: str = "/placeholder.svg?height=40&width=40"
    role: Role = "client"
    is_approved: bool = True
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PublicUser(BaseModel):
    id: str
    email: str
    full_name: str
    phone: Optional[str] = None
    avatar_url: str
    role: Role
    is_approved: bool
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class Category(BaseModel):
    id: str
    name: str
    description: str = ""
    icon: str = ""
    created_at: datetime


class CategoryView(Category):
    service_count: int = 0


class Service(BaseModel):
    id: str
    provider_id: str
    category_id: str
    name: str
    description: str = ""
    price: float = Field(ge=0)
    duration: int = Field(gt=0)
    image_url: str = "/placeholder.svg?height=200&width=300"
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class ServiceView(Service):
    provider: Optional[PublicUser] = None
    category: Optional[Category] = None


class Appointment(BaseModel):
    id: str
    client_id: str
    provider_id: str
    service_id: str
    appointment_date: datetime
    status: AppointmentStatus
    notes: str = ""
    total_amount: float
    commission_amount: float
    promo_code: Optional[str] = None
    discount_amount: float = 0.0
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class AppointmentView(Appointment):
    client: Optional[PublicUser] = None
    provider: Optional[PublicUser] = None
    service: Optional[Service] = None


class Review(BaseModel):
    id: str
    client_id: str
    provider_id: str
    service_id: str
    appointment_id: str
    rating: int = Field(ge=1, le=5)
    comment: str
    created_at: datetime


class ReviewView(Review):
    client: Optional[PublicUser] = None
    provider: Optional[PublicUser] = None
    service: Optional[Service] = None
    appointment: Optional[Appointment] = None


class Refund(BaseModel):
    id: str
    appointment_id: str
    client_id: str
    provider_id: str
    amount: float
    reason: str
    status: RefundStatus = "pending"
    requested_at: datetime
    processed_at: Optional[datetime] = None
    admin_notes: Optional[str] = None
    refund_method: Literal["original_payment", "store_credit"] = "original_payment"


class RefundView(Refund):
    client: Optional[PublicUser] = None
    provider: Optional[PublicUser] = None
    appointment: Optional[Appointment] = None
    service: Optional[Service] = None


class Promotion(BaseModel):
    id: str
    provider_id: str
    code: str
    description: str = ""
    discount_type: Literal["percentage", "fixed"]
    discount_value: float
    min_amount: float = 0.0
    max_uses: Optional[int] = None
    used_count: int = 0
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    created_at: datetime


class PromotionView(Promotion):
    is_expired: bool
    is_currently_active: bool


class Favorite(BaseModel):
    id: str
    client_id: str
    service_id: str
    created_at: datetime


class FavoriteView(Favorite):
    service: Optional[ServiceView] = None


class NotificationRecord(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType = "system"
    is_read: bool = False
    created_at: datetime


class ChatMessage(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    message: str
    is_read: bool = False
    created_at: datetime


class Invoice(BaseModel):
    id: str
    appointment_id: str
    provider_id: str
    client_id: str
    service_id: str
    amount: float
    commission_amount: float
    gross_amount: float
    payment_status: Literal["paid", "pending", "failed", "refunded"]
    payment_intent_id: str
    created_at: datetime
    paid_at: Optional[datetime] = None
    client: Optional[PublicUser] = None
    provider: Optional[PublicUser] = None
    service: Optional[Service] = None


# --- auth ---


class AuthSignupRequest(BaseModel):
    email: str
    password: str
    full_name: str
    role: Literal["provider", "client"] = "client"


class AuthLoginRequest(BaseModel):
    email: str
    password: str


class AuthLoginResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user: PublicUser
    expires_at: str


# --- admin ---


class UserCreateRequest(BaseModel):
    actor_user_id: str
    full_name: str = ""
    email: str = ""
    phone: str = ""
    role: Optional[Role] = "client"
    password: str = ""
    bio: str = ""
    location: str = ""
    is_approved: bool = True


class AdminActionRequest(BaseModel):
    actor_user_id: str


class UserImportRequest(BaseModel):
    actor_user_id: str
    csv_text: str


class UserImportResult(BaseModel):
    imported: int
    skipped_duplicates: int
    users: list[PublicUser]


class UserStats(BaseModel):
    total: int
    admins: int
    providers: int
    clients: int
    pending_approval: int


class CategoryUpsertRequest(BaseModel):
    actor_user_id: str
    name: str
    description: str = ""
    icon: str = ""


class RefundDecisionRequest(BaseModel):
    actor_user_id: str
    action: Literal["approve", "reject"]
    admin_notes: str = ""


# --- provider ---


class ServiceUpsertRequest(BaseModel):
    user_id: str
    name: str
    description: str = ""
    price: float
    duration: int
    category_id: str
    is_active: bool = True


class AppointmentStatusUpdateRequest(BaseModel):
    user_id: str
    status: AppointmentStatus


class PromotionUpsertRequest(BaseModel):
    user_id: str
    code: str
    description: str = ""
    discount_type: Literal["percentage", "fixed"] = "percentage"
    discount_value: float
    min_amount: Optional[float] = None
    max_uses: Optional[int] = None
    start_date: date
    end_date: date
    is_active: bool = True


class OwnerActionRequest(BaseModel):
    user_id: str


# --- client ---


class PromoApplyRequest(BaseModel):
    service_id: str
    code: str


class PromoQuote(BaseModel):
    code: str
    service_id: str
    price: float
    discount: float
    final_price: float


class BookingRequest(BaseModel):
    user_id: str
    service_id: str
    date: date
    time: str
    notes: str = ""
    promo_code: Optional[str] = None


class RescheduleRequest(BaseModel):
    user_id: str
    date: date
    time: str


class PaymentRequest(BaseModel):
    user_id: str
    method: Literal["card", "paypal"] = "card"
    card_number: str = ""
    expiry_date: str = ""
    cvv: str = ""
    cardholder_name: str = ""
    billing_address: str = ""
    city: str = ""
    zip_code: str = ""


class PaymentReceipt(BaseModel):
    appointment_id: str
    transaction_id: str
    method: Literal["card", "paypal"]
    amount: float
    paid_at: datetime


class FavoriteCreateRequest(BaseModel):
    user_id: str
    service_id: str


class ReviewCreateRequest(BaseModel):
    user_id: str
    appointment_id: str
    rating: int = Field(default=5, ge=1, le=5)
    comment: str = ""


class ReviewUpdateRequest(BaseModel):
    user_id: str
    rating: int = Field(ge=1, le=5)
    comment: str = ""


class RefundCreateRequest(BaseModel):
    user_id: str
    appointment_id: str
    amount: float
    reason: str


# --- chat / profile / notifications ---


class ChatSendRequest(BaseModel):
    user_id: str
    message: str


class Conversation(BaseModel):
    counterpart: PublicUser
    last_message: Optional[ChatMessage] = None
    unread_count: int = 0


class ProfileUpdateRequest(BaseModel):
    user_id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None


class ProfileView(BaseModel):
    user: PublicUser
    stats: Dict[str, Any] = Field(default_factory=dict)


class NavigationItem(BaseModel):
    href: str
    label: str
    icon: str


# --- composite responses ---


class AppointmentListResponse(BaseModel):
    appointments: list[AppointmentView]
    stats: Dict[str, Any]


class InvoiceListResponse(BaseModel):
    invoices: list[Invoice]
    summary: Dict[str, Any]


class RefundListResponse(BaseModel):
    refunds: list[RefundView]
    stats: Dict[str, Any]


class ClientRefundsResponse(RefundListResponse):
    eligible_appointments: list[AppointmentView]


class ReviewListResponse(BaseModel):
    reviews: list[ReviewView]
    average_rating: float
    reviewable_appointments: list[AppointmentView]


class FavoriteListResponse(BaseModel):
    favorites: list[FavoriteView]
    providers: int
    categories: int


class ClientAppointmentsResponse(BaseModel):
    upcoming: list[AppointmentView]
    past: list[AppointmentView]


class ProviderClient(BaseModel):
    client: PublicUser
    appointments: list[AppointmentView]
    completed_appointments: int
    total_spent: float
    last_visit: Optional[datetime] = None
    reviews: list[Review]
    average_rating: float
    badges: list[str]


class BookingView(BaseModel):
    service: ServiceView
    provider: Optional[PublicUser] = None
    reviews: list[ReviewView]
    average_rating: float
    time_slots: list[str]


class AdminRevenueReport(BaseModel):
    totals: Dict[str, Any]
    by_provider: list[Dict[str, Any]]
    by_category: list[Dict[str, Any]]
    by_month: list[Dict[str, Any]]
    top_transactions: list[AppointmentView]


class ProviderRevenueReport(BaseModel):
    totals: Dict[str, Any]
    by_service: list[Dict[str, Any]]
    by_month: list[Dict[str, Any]]
    recent_transactions: list[AppointmentView]


class ProviderDashboard(BaseModel):
    stats: Dict[str, Any]
    upcoming_appointments: list[AppointmentView]
    recent_reviews: list[ReviewView]


class ClientDashboard(BaseModel):
    stats: Dict[str, Any]
    upcoming_appointments: list[AppointmentView]


class ChatThread(BaseModel):
    counterpart: PublicUser
    messages: list[ChatMessage]
