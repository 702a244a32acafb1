"""Celery beat schedule configuration.

Pending orders are re-checked against OpenPix on a fixed interval.
"""
from __future__ import annotations

from core.config import settings

CELERY_BEAT_SCHEDULE = {
    "sync-pending-order-payments": {
        "task": "orders.sync_pending_payments",
        "schedule": float(settings.celery.sync_interval_seconds),
        "kwargs": {"limit": 100},
    },
}
