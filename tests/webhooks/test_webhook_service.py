import json

import pytest

from application.services.webhook_service import WebhookService, extract_transaction
from domain.order.entity import Order
from infrastructure.external.payments.signature import sign_body


def body(payload) -> bytes:
    return json.dumps(payload).encode()


async def seed(order_repository, transaction_id="tx-1") -> str:
    order = await order_repository.create(Order(id=None, user_id="user-1", total=1000))
    await order_repository.set_transaction(order.id, transaction_id)
    order_repository.calls.clear()
    return order.id


@pytest.mark.asyncio
async def test_invalid_json_is_400(uow_factory):
    service = WebhookService(uow_factory)

    result = await service.handle(b"{not json", signature="whatever", client_ip="1.2.3.4")

    assert (result.status_code, result.text) == (400, "Invalid JSON")


@pytest.mark.asyncio
async def test_invalid_json_is_400_even_with_signing_key(uow_factory):
    service = WebhookService(uow_factory, signing_key="segredo")

    result = await service.handle(b"<xml/>", signature=None, client_ip=None)

    assert result.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"evento": "teste_webhook"}, {"event": "OPENPIX:TEST_WEBHOOK"}])
async def test_test_events_never_touch_the_store(uow_factory, order_repository, payload):
    service = WebhookService(uow_factory)

    result = await service.handle(body(payload), signature=None, client_ip=None)

    assert result.status_code == 200
    assert order_repository.calls == []


@pytest.mark.asyncio
async def test_unrecognised_event_is_acknowledged_without_changes(uow_factory, order_repository):
    order_id = await seed(order_repository)
    service = WebhookService(uow_factory)
    payload = {"event": "OPENPIX:CHARGE_CREATED", "charge": {"transactionID": "tx-1", "status": "COMPLETED"}}

    result = await service.handle(body(payload), signature=None, client_ip=None)

    assert result.status_code == 200
    assert order_repository.orders[order_id].status == "Aguardando Pagamento"
    assert order_repository.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "event, status, expected",
    [
        ("OPENPIX:CHARGE_COMPLETED", "COMPLETED", "Pagamento Confirmado"),
        ("woovi:CHARGE_COMPLETED", "completed", "Pagamento Confirmado"),
        ("OPENPIX:CHARGE_PAID", "EXPIRED", "Expirado"),
        ("OPENPIX:CHARGE_COMPLETED", "ACTIVE", "Aguardando Pagamento"),
    ],
)
async def test_recognised_charge_events_update_status(uow_factory, order_repository, event, status, expected):
    order_id = await seed(order_repository)
    service = WebhookService(uow_factory)
    payload = {"event": event, "charge": {"transactionID": "tx-1", "status": status}}

    result = await service.handle(body(payload), signature=None, client_ip=None)

    assert (result.status_code, result.text) == (200, "ok")
    assert order_repository.orders[order_id].status == expected


@pytest.mark.asyncio
async def test_transaction_received_uses_pix_shape(uow_factory, order_repository):
    order_id = await seed(order_repository, "tx-pix")
    service = WebhookService(uow_factory)
    payload = {
        "event": "OPENPIX:TRANSACTION_RECEIVED",
        "pix": {"charge": {"transactionID": "tx-pix", "status": "COMPLETED"}},
    }

    result = await service.handle(body(payload), signature=None, client_ip=None)

    assert result.status_code == 200
    assert order_repository.orders[order_id].status == "Pagamento Confirmado"


@pytest.mark.asyncio
async def test_array_payload_uses_first_element(uow_factory, order_repository):
    order_id = await seed(order_repository)
    service = WebhookService(uow_factory)
    payload = [
        {"event": "woovi:CHARGE_COMPLETED", "charge": {"identifier": "tx-1", "status": "COMPLETED"}},
        {"event": "woovi:CHARGE_COMPLETED", "charge": {"identifier": "tx-other", "status": "EXPIRED"}},
    ]

    await service.handle(body(payload), signature=None, client_ip=None)

    assert order_repository.orders[order_id].status == "Pagamento Confirmado"


@pytest.mark.asyncio
async def test_empty_array_is_acknowledged(uow_factory, order_repository):
    service = WebhookService(uow_factory)

    result = await service.handle(b"[]", signature=None, client_ip=None)

    assert result.status_code == 200
    assert order_repository.calls == []


@pytest.mark.asyncio
async def test_missing_transaction_id_or_status_has_no_side_effect(uow_factory, order_repository):
    service = WebhookService(uow_factory)

    no_id = await service.handle(body({"event": "OPENPIX:CHARGE_COMPLETED", "charge": {"status": "COMPLETED"}}), signature=None, client_ip=None)
    no_status = await service.handle(body({"event": "OPENPIX:CHARGE_COMPLETED", "charge": {"transactionID": "tx-1"}}), signature=None, client_ip=None)

    assert no_id.status_code == 200
    assert no_status.status_code == 200
    assert order_repository.calls == []


@pytest.mark.asyncio
async def test_signature_enforced_when_key_configured(uow_factory, order_repository):
    order_id = await seed(order_repository)
    service = WebhookService(uow_factory, signing_key="segredo")
    raw = body({"event": "OPENPIX:CHARGE_COMPLETED", "charge": {"transactionID": "tx-1", "status": "COMPLETED"}})

    missing = await service.handle(raw, signature=None, client_ip=None)
    wrong = await service.handle(raw, signature=sign_body("outro", raw), client_ip=None)
    assert (missing.status_code, missing.text) == (401, "Invalid signature")
    assert wrong.status_code == 401
    assert order_repository.orders[order_id].status == "Aguardando Pagamento"

    ok = await service.handle(raw, signature=sign_body("segredo", raw), client_ip=None)
    assert ok.status_code == 200
    assert order_repository.orders[order_id].status == "Pagamento Confirmado"


@pytest.mark.asyncio
async def test_ip_allowlist_ignores_other_addresses(uow_factory, order_repository):
    order_id = await seed(order_repository)
    service = WebhookService(uow_factory, ip_allowlist=["10.0.0.0/8", "192.168.1.7"])
    raw = body({"event": "OPENPIX:CHARGE_COMPLETED", "charge": {"transactionID": "tx-1", "status": "COMPLETED"}})

    ignored = await service.handle(raw, signature=None, client_ip="8.8.8.8")
    assert ignored.status_code == 200
    assert order_repository.orders[order_id].status == "Aguardando Pagamento"

    accepted = await service.handle(raw, signature=None, client_ip="10.1.2.3")
    assert accepted.status_code == 200
    assert order_repository.orders[order_id].status == "Pagamento Confirmado"


@pytest.mark.asyncio
async def test_store_failure_is_500(uow_factory, order_repository, monkeypatch):
    async def _boom(transaction_id, status):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(order_repository, "update_status_by_transaction", _boom)
    service = WebhookService(uow_factory)
    raw = body({"event": "OPENPIX:CHARGE_COMPLETED", "charge": {"transactionID": "tx-1", "status": "COMPLETED"}})

    result = await service.handle(raw, signature=None, client_ip=None)

    assert (result.status_code, result.text) == (500, "Database error")


def test_extract_transaction_prefers_charge_shape():
    payload = {
        "charge": {"transactionID": "tx-charge", "status": "COMPLETED"},
        "pix": {"transactionID": "tx-pix", "status": "EXPIRED"},
    }
    assert extract_transaction(payload) == ("tx-charge", "COMPLETED")
    assert extract_transaction({"pix": {"transactionID": "tx-pix", "status": "EXPIRED"}}) == ("tx-pix", "EXPIRED")
    assert extract_transaction({"charge": {"id": "raw-id", "status": "ACTIVE"}}) == ("raw-id", "ACTIVE")
    assert extract_transaction({}) == (None, None)


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [1, {"value": "COMPLETED"}, ["COMPLETED"], True])
async def test_non_string_status_is_treated_as_missing(uow_factory, order_repository, status):
    order_id = await seed(order_repository)
    service = WebhookService(uow_factory)
    raw = body({"event": "OPENPIX:CHARGE_COMPLETED", "charge": {"transactionID": "tx-1", "status": status}})

    result = await service.handle(raw, signature=None, client_ip=None)

    assert (result.status_code, result.text) == (200, "No status")
    assert order_repository.calls == []
    assert order_repository.orders[order_id].status == "Aguardando Pagamento"


def test_extract_transaction_ignores_structured_ids():
    assert extract_transaction({"charge": {"transactionID": {"x": 1}, "status": "COMPLETED"}}) == (None, None)
    assert extract_transaction({"pix": {"transactionID": 42, "status": "COMPLETED"}}) == ("42", "COMPLETED")
