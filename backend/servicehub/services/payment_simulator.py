import logging
import os
import time
from typing import Dict, List
from uuid import uuid4

from servicehub.models import PaymentRequest

logger = logging.getLogger(__name__)

CARD_FIELDS: Dict[str, str] = {
    "card_number": "Card number",
    "expiry_date": "Expiry date",
    "cvv": "CVV",
    "cardholder_name": "Cardholder name",
    "billing_address": "Billing address",
    "city": "City",
    "zip_code": "ZIP code",
}


def _env_delay() -> float:
    raw = os.getenv("PAYMENT_SIMULATED_DELAY_SECONDS", "0")
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid PAYMENT_SIMULATED_DELAY_SECONDS=%r", raw)
        return 0.0
    return max(value, 0.0)


class PaymentDetailsError(ValueError):
    def __init__(self, missing: List[str]):
        super().__init__(f"Missing payment details: {', '.join(missing)}")
        self.missing = missing


class PaymentSimulator:
    """Stands in for a card/PayPal processor; every well-formed charge succeeds."""

    def __init__(self, delay_seconds: float = 0.0):
        self.delay_seconds = delay_seconds

    def missing_fields(self, payment: PaymentRequest) -> List[str]:
        if payment.method != "card":
            return []
        return [label for field, label in CARD_FIELDS.items() if not getattr(payment, field, "").strip()]

    def charge(self, payment: PaymentRequest, amount: float) -> str:
        missing = self.missing_fields(payment)
        if missing:
            raise PaymentDetailsError(missing)
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        transaction_id = f"txn_{uuid4().hex[:16]}"
        logger.info("Simulated %s payment of %.2f (%s)", payment.method, amount, transaction_id)
        return transaction_id


payment_simulator = PaymentSimulator(delay_seconds=_env_delay())
