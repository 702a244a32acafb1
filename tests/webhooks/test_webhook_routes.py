import json

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_webhook_service
from application.services.webhook_service import WebhookService
from domain.order.entity import Order
from main import app


URL = "/api/v1/webhooks/openpix"


@pytest.fixture
def client(uow_factory):
    app.dependency_overrides[get_webhook_service] = lambda: WebhookService(uow_factory)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_invalid_json_returns_400_plain_text(client):
    response = client.post(URL, content=b"not-json", headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert response.text == "Invalid JSON"
    assert response.headers["content-type"].startswith("text/plain")


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
def test_other_methods_are_405(client, method):
    response = client.request(method, URL)

    assert response.status_code == 405
    assert response.text == "Method Not Allowed"


def test_test_event_acknowledged_without_store_access(client, order_repository):
    response = client.post(URL, json={"evento": "teste_webhook"})

    assert response.status_code == 200
    assert order_repository.calls == []


def test_unknown_event_acknowledged(client, order_repository):
    response = client.post(URL, json={"event": "OPENPIX:MOVEMENT_CONFIRMED", "charge": {"transactionID": "tx-1", "status": "COMPLETED"}})

    assert response.status_code == 200
    assert order_repository.calls == []


def test_completed_charge_confirms_order(client, order_repository):
    order = Order(id="order-77", user_id="user-1", total=500, id_transacao="tx-77")
    order_repository.orders[order.id] = order

    response = client.post(
        URL,
        content=json.dumps({"event": "OPENPIX:CHARGE_COMPLETED", "charge": {"transactionID": "tx-77", "status": "COMPLETED"}}),
        headers={"content-type": "application/json"},
    )

    assert (response.status_code, response.text) == (200, "ok")
    assert order_repository.orders[order.id].status == "Pagamento Confirmado"
