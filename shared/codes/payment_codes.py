"""
Payment specific codes and provider status mapping.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Provider/Network errors (6xxxx)
    PROVIDER_ERROR = 60000
    PROVIDER_NOT_FOUND = 60001
    PROVIDER_CONFLICT = 60002
    PROVIDER_UNAUTHORIZED = 60003
    SIGNATURE_ERROR = 60004
    SPLIT_EXCEEDS_TOTAL = 60005
    INVALID_PIX_KEY = 60006


# Order display strings written by checkout, webhook and polling
ORDER_STATUS_AWAITING_PAYMENT = "Aguardando Pagamento"
ORDER_STATUS_PAYMENT_CONFIRMED = "Pagamento Confirmado"
ORDER_STATUS_EXPIRED = "Expirado"

# OpenPix charge status -> order display string; unknown values fall back
# to ORDER_STATUS_AWAITING_PAYMENT
PROVIDER_STATUS_TO_ORDER_STATUS = {
    "openpix": {
        "COMPLETED": ORDER_STATUS_PAYMENT_CONFIRMED,
        "EXPIRED": ORDER_STATUS_EXPIRED,
        "ACTIVE": ORDER_STATUS_AWAITING_PAYMENT,
        "PENDING": ORDER_STATUS_AWAITING_PAYMENT,
    },
}


def translate_charge_status(status: str | None, provider: str = "openpix") -> str:
    """Translate a provider charge status into the order display string."""
    mapping = PROVIDER_STATUS_TO_ORDER_STATUS.get(provider, {})
    key = status.upper() if isinstance(status, str) else ""
    return mapping.get(key, ORDER_STATUS_AWAITING_PAYMENT)
