"""
OpenPix webhook processing.

Callbacks are acknowledged with plain-text answers: anything the store does
not act on still gets 200 so the provider stops redelivering it. Only bad
JSON (400), a bad signature (401) and a failed store write (500) are errors.
"""
from __future__ import annotations

import ipaddress
import json
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from core.logging_config import get_logger
from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.external.payments.signature import verify_signature
from shared.codes.payment_codes import translate_charge_status


logger = get_logger(__name__)

CHARGE_EVENT_MARKERS = ("CHARGE_COMPLETED", "CHARGE_PAID")
TRANSACTION_EVENTS = frozenset({"OPENPIX:TRANSACTION_RECEIVED", "woovi:TRANSACTION_RECEIVED"})


@dataclass(frozen=True)
class WebhookResult:
    status_code: int
    text: str


def is_test_event(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    if payload.get("evento") == "teste_webhook":
        return True
    event = payload.get("event")
    return isinstance(event, str) and "TEST" in event


def is_handled_event(event: Any) -> bool:
    if not isinstance(event, str):
        return False
    if any(marker in event for marker in CHARGE_EVENT_MARKERS):
        return True
    return event in TRANSACTION_EVENTS


def _scalar_id(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    return str(value) or None


def _status(value: Any) -> Optional[str]:
    # non-string statuses count as missing
    return value if isinstance(value, str) and value else None


def extract_transaction(payload: dict[str, Any]) -> tuple[Optional[str], Optional[str]]:
    """Return (transaction_id, status) from either the charge or the pix shape."""
    charge = payload.get("charge")
    if isinstance(charge, dict):
        transaction_id = (
            _scalar_id(charge.get("transactionID"))
            or _scalar_id(charge.get("identifier"))
            or _scalar_id(charge.get("id"))
        )
        if transaction_id:
            return transaction_id, _status(charge.get("status"))

    pix = payload.get("pix")
    if isinstance(pix, dict):
        pix_charge = pix.get("charge") if isinstance(pix.get("charge"), dict) else {}
        transaction_id = _scalar_id(pix.get("transactionID")) or _scalar_id(pix_charge.get("transactionID"))
        status = _status(pix_charge.get("status")) or _status(pix.get("status"))
        if transaction_id:
            return transaction_id, status
    return None, None


class WebhookService:
    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        *,
        signing_key: Optional[str] = None,
        ip_allowlist: Iterable[str] = (),
    ) -> None:
        self._uow_factory = uow_factory
        self.signing_key = signing_key or None
        self.ip_allowlist = frozenset(ip_allowlist or ())

    def _ip_allowed(self, client_ip: Optional[str]) -> bool:
        if not client_ip:
            return False
        try:
            addr = ipaddress.ip_address(client_ip)
        except ValueError:
            return False
        for entry in self.ip_allowlist:
            try:
                if addr in ipaddress.ip_network(entry, strict=False):
                    return True
            except ValueError:
                continue
        return False

    async def handle(self, body: bytes, *, signature: Optional[str], client_ip: Optional[str]) -> WebhookResult:
        if self.ip_allowlist and not self._ip_allowed(client_ip):
            logger.warning("openpix_webhook_ignored", reason="ip_not_allowed", client_ip=client_ip)
            return WebhookResult(200, "Ignored")

        try:
            payload = json.loads(body.decode("utf-8") if body else "")
        except (UnicodeDecodeError, ValueError):
            logger.info("openpix_webhook_invalid_json", size=len(body or b""))
            return WebhookResult(400, "Invalid JSON")

        if self.signing_key is None:
            logger.warning("openpix_webhook_signature_skipped", reason="signing_key_not_configured")
        elif not verify_signature(self.signing_key, body, signature):
            logger.warning("openpix_webhook_invalid_signature", has_signature=bool(signature))
            return WebhookResult(401, "Invalid signature")

        if is_test_event(payload):
            logger.info("openpix_webhook_test_received")
            return WebhookResult(200, "Test webhook received successfully")

        if isinstance(payload, list):
            if not payload:
                logger.info("openpix_webhook_ignored", reason="empty_batch")
                return WebhookResult(200, "Ignored")
            payload = payload[0]
            if is_test_event(payload):
                logger.info("openpix_webhook_test_received")
                return WebhookResult(200, "Test webhook received successfully")

        if not isinstance(payload, dict):
            logger.info("openpix_webhook_ignored", reason="unexpected_payload")
            return WebhookResult(200, "Ignored")

        event = payload.get("event")
        if not is_handled_event(event):
            logger.info("openpix_webhook_ignored", reason="event_not_handled", webhook_event=event)
            return WebhookResult(200, "Ignored")

        transaction_id, charge_status = extract_transaction(payload)
        if not transaction_id:
            logger.info("openpix_webhook_ignored", reason="missing_transaction_id", webhook_event=event)
            return WebhookResult(200, "No transactionID")
        if not charge_status:
            logger.info("openpix_webhook_ignored", reason="missing_status", transaction_id=transaction_id)
            return WebhookResult(200, "No status")

        status = translate_charge_status(charge_status)
        try:
            async with self._uow_factory() as uow:
                affected = await uow.order_repository.update_status_by_transaction(transaction_id, status)
        except Exception:
            logger.exception("openpix_webhook_database_error", transaction_id=transaction_id)
            return WebhookResult(500, "Database error")

        logger.info(
            "openpix_webhook_processed",
            webhook_event=event,
            transaction_id=transaction_id,
            charge_status=charge_status,
            status=status,
            affected=affected,
        )
        return WebhookResult(200, "ok")
