"""
Celery tasks polling OpenPix for the payment status of pending orders.

Webhooks are the primary signal; these jobs cover missed deliveries.
"""
from __future__ import annotations

import asyncio

from celery import shared_task

from application.services.order_service import OrderService
from core.logging_config import get_logger
from core.settings import payment_settings
from infrastructure.external.payments import get_payment_gateway
from infrastructure.external.payments.exceptions import PaymentProviderError
from infrastructure.database import engine
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork
from ..utils.base_task import BaseTask


logger = get_logger(__name__)


def build_order_service() -> OrderService:
    return OrderService(
        SQLAlchemyUnitOfWork,
        get_payment_gateway(),
        fee_rate=payment_settings.openpix.platform_fee_rate,
        main_pix_key=payment_settings.openpix.main_pix_key,
    )


@shared_task(
    name="orders.sync_payment_status",
    bind=True,
    base=BaseTask,
    max_retries=3,
    default_retry_delay=30,
)
def sync_payment_status(self, order_id: str) -> dict:
    async def _run():
        service = build_order_service()
        try:
            return await service.sync_payment_status(order_id)
        finally:
            await service.gateway.aclose()
            # pooled connections are bound to this run's event loop
            await engine.dispose()

    try:
        order = asyncio.run(_run())
    except PaymentProviderError as exc:
        logger.warning("order_payment_poll_failed", order_id=order_id, kind=exc.kind.value)
        raise self.retry(exc=exc)
    return {"order_id": order.id, "status": order.status}


@shared_task(name="orders.sync_pending_payments", base=BaseTask)
def sync_pending_payments(limit: int = 100) -> dict:
    async def _run():
        service = build_order_service()
        try:
            return await service.sync_pending(limit=limit)
        finally:
            await service.gateway.aclose()
            await engine.dispose()

    changed = asyncio.run(_run())
    return {"changed": changed}
