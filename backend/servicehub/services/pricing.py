import logging
import os
from datetime import datetime
from typing import Optional

from servicehub.models import Promotion

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return default
    if value < 0:
        return default
    return value


COMMISSION_RATE = _env_float("COMMISSION_RATE", 0.10)


def round_money(value: float) -> float:
    return round(float(value), 2)


def commission_for(total_amount: float, rate: Optional[float] = None) -> float:
    applied = COMMISSION_RATE if rate is None else rate
    return round_money(total_amount * applied)


def promotion_is_expired(promotion: Promotion, now: datetime) -> bool:
    return promotion.end_date < now


def promotion_is_redeemable(promotion: Promotion, now: datetime) -> bool:
    if not promotion.is_active or promotion_is_expired(promotion, now):
        return False
    if promotion.start_date > now:
        return False
    if promotion.max_uses is not None and promotion.used_count >= promotion.max_uses:
        return False
    return True


def compute_discount(price: float, promotion: Promotion) -> float:
    """Discount for ``price`` under ``promotion``, never more than the price itself."""
    if promotion.discount_type == "percentage":
        amount = price * promotion.discount_value / 100
    else:
        amount = promotion.discount_value
    return round_money(min(max(amount, 0.0), price))
