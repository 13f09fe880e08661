import os
import sys
from datetime import datetime, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from servicehub.models import Promotion
from servicehub.services.pricing import (
    commission_for,
    compute_discount,
    promotion_is_expired,
    promotion_is_redeemable,
    round_money,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _promo(**overrides) -> Promotion:
    base = {
        "id": "promo-x",
        "provider_id": "provider-1",
        "code": "SAVE",
        "discount_type": "percentage",
        "discount_value": 20,
        "min_amount": 0,
        "max_uses": None,
        "used_count": 0,
        "start_date": datetime(2025, 1, 1, tzinfo=timezone.utc),
        "end_date": datetime(2025, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
        "is_active": True,
        "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
    }
    base.update(overrides)
    return Promotion(**base)


def test_percentage_discount_is_share_of_price():
    assert compute_discount(50, _promo(discount_value=20)) == 10.0


def test_fixed_discount_is_capped_at_price():
    assert compute_discount(40, _promo(discount_type="fixed", discount_value=10)) == 10.0
    assert compute_discount(8, _promo(discount_type="fixed", discount_value=10)) == 8.0


def test_discount_rounds_to_cents():
    assert compute_discount(19.99, _promo(discount_value=10)) == 2.0


def test_commission_defaults_to_ten_percent():
    assert commission_for(75) == 7.5
    assert commission_for(40, rate=0.25) == 10.0
    assert round_money(0.1 + 0.2) == 0.3


def test_promotion_redeemable_window_and_usage():
    assert promotion_is_redeemable(_promo(), NOW)
    assert not promotion_is_redeemable(_promo(is_active=False), NOW)
    assert not promotion_is_redeemable(_promo(start_date=datetime(2025, 7, 1, tzinfo=timezone.utc)), NOW)
    assert not promotion_is_redeemable(_promo(max_uses=5, used_count=5), NOW)
    assert promotion_is_redeemable(_promo(max_uses=5, used_count=4), NOW)


def test_promotion_expiry_uses_end_date():
    expired = _promo(end_date=datetime(2025, 5, 31, tzinfo=timezone.utc))
    assert promotion_is_expired(expired, NOW)
    assert not promotion_is_redeemable(expired, NOW)
