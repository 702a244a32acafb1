"""
Factory for payment gateway clients.
"""
from __future__ import annotations

from typing import Optional

from core.settings import payment_settings
from application.ports.payment_gateway import PixGateway


def get_payment_gateway(provider: Optional[str] = None) -> PixGateway:
    name = (provider or "openpix").lower()
    if name in {"openpix", "woovi"}:
        from .openpix_client import OpenPixClient
        return OpenPixClient(payment_settings.openpix)
    raise ValueError(f"Unsupported payment provider: {name}")
