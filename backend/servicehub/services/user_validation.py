import re
import secrets
from typing import Any, Dict, Iterable

from servicehub.models import User

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")
PASSWORD_CHARSET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!@#$%^&*"
MIN_PASSWORD_LENGTH = 6


def _text(form: Dict[str, Any], key: str) -> str:
    value = form.get(key)
    return str(value).strip() if value is not None else ""


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_PATTERN.match(value))


def validate_user_form(form: Dict[str, Any], existing_users: Iterable[User]) -> Dict[str, str]:
    """Return a field -> message map; an empty map means the form is valid."""
    errors: Dict[str, str] = {}

    if not _text(form, "full_name"):
        errors["full_name"] = "Full name is required"

    email = _text(form, "email")
    if not email:
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Please enter a valid email address"
    elif any(user.email.lower() == email.lower() for user in existing_users):
        errors["email"] = "This email is already registered"

    password = form.get("password") or ""
    if not password.strip():
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"

    if not form.get("role"):
        errors["role"] = "Role is required"

    phone = _text(form, "phone")
    if phone and not is_valid_phone(phone):
        errors["phone"] = "Please enter a valid phone number"

    return errors


def generate_random_password(length: int = 12) -> str:
    return "".join(secrets.choice(PASSWORD_CHARSET) for _ in range(max(length, 1)))


def format_user_data(form: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize submitted user fields: trimmed text, lowercase email, blanks as None."""
    return {
        **form,
        "full_name": _text(form, "full_name"),
        "email": _text(form, "email").lower(),
        "phone": _text(form, "phone") or None,
        "bio": _text(form, "bio") or None,
        "location": _text(form, "location") or None,
    }
