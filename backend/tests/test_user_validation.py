import os
import sys
from datetime import datetime, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from servicehub.models import User
from servicehub.services.user_validation import (
    PASSWORD_CHARSET,
    format_user_data,
    generate_random_password,
    validate_user_form,
)

STAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)
EXISTING = [
    User(
        id="client-1",
        email="client@example.com",
        password="client123",
        full_name="Jane Client",
        role="client",
        created_at=STAMP,
        updated_at=STAMP,
    )
]


def test_empty_form_reports_every_required_field():
    errors = validate_user_form({"role": ""}, EXISTING)
    assert errors == {
        "full_name": "Full name is required",
        "email": "Email is required",
        "password": "Password is required",
        "role": "Role is required",
    }


def test_email_format_and_uniqueness():
    bad = validate_user_form({"full_name": "X", "email": "nope", "password": "secret1", "role": "client"}, EXISTING)
    assert bad["email"] == "Please enter a valid email address"
    taken = validate_user_form(
        {"full_name": "X", "email": "CLIENT@example.com", "password": "secret1", "role": "client"}, EXISTING
    )
    assert taken["email"] == "This email is already registered"


def test_short_password_and_bad_phone():
    errors = validate_user_form(
        {"full_name": "X", "email": "x@example.com", "password": "abc", "role": "client", "phone": "call me"},
        EXISTING,
    )
    assert errors["password"] == "Password must be at least 6 characters"
    assert errors["phone"] == "Please enter a valid phone number"
    assert "phone" not in validate_user_form(
        {"full_name": "X", "email": "x@example.com", "password": "abcdef", "role": "client", "phone": "+1 (555) 010-2000"},
        EXISTING,
    )


def test_generated_password_uses_charset():
    password = generate_random_password()
    assert len(password) == 12
    assert set(password) <= set(PASSWORD_CHARSET)
    assert len(generate_random_password(20)) == 20


def test_format_user_data_normalizes_fields():
    formatted = format_user_data({"full_name": "  Ann  ", "email": " Ann@Example.COM ", "phone": " ", "bio": "", "role": "client"})
    assert formatted["full_name"] == "Ann"
    assert formatted["email"] == "ann@example.com"
    assert formatted["phone"] is None
    assert formatted["bio"] is None
    assert formatted["location"] is None
    assert formatted["role"] == "client"
