import json

import httpx
import pytest

from application.dtos.orders import CartItem, CheckoutRequest
from application.services.order_service import OrderService
from application.services.webhook_service import WebhookService
from core.settings import OpenPixSettings
from infrastructure.external.payments.openpix_client import OpenPixClient


@pytest.mark.asyncio
async def test_split_checkout_confirmed_by_webhook(uow_factory, order_repository, fee_rate):
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        sent.append(payload)
        return httpx.Response(
            200,
            json={
                "charge": {
                    "correlationID": payload["correlationID"],
                    "value": payload["value"],
                    "status": "ACTIVE",
                    "transactionID": "9a8b7c6d",
                    "qrCodeImage": "https://api.openpix.com.br/openpix/charge/brcode/image/9a8b7c6d.png",
                    "expiresDate": "2026-10-19T12:00:00.000Z",
                    "splits": payload["splits"],
                },
                "brCode": "00020101021226990014br.gov.bcb.pix2577qr.openpix.com.br/9a8b7c6d5204000053039865406100.005802BR6304ABCD",
            },
        )

    gateway = OpenPixClient(OpenPixSettings(app_id="app-123"), transport=httpx.MockTransport(handler))
    orders = OrderService(uow_factory, gateway, fee_rate=fee_rate, main_pix_key="plataforma@arena.test")

    result = await orders.checkout(
        CheckoutRequest(user_id="user-1", seller_pix_key="vendedor@arena.test", items=[CartItem(product_id="p1", quantity=1, price=10000)])
    )
    await gateway.aclose()

    assert sent[0]["value"] == 10000
    assert sent[0]["splits"] == [{"pixKey": "vendedor@arena.test", "value": 8500, "splitType": "SPLIT_SUB_ACCOUNT"}]
    assert result.charge is not None
    assert result.charge.value == 10000
    assert result.charge.br_code and result.charge.br_code.startswith("000201")
    assert result.charge.qr_code_image
    assert result.charge.expires_date is not None
    assert order_repository.orders[result.order.id].id_transacao == "9a8b7c6d"

    webhooks = WebhookService(uow_factory)
    event = {"event": "woovi:CHARGE_COMPLETED", "charge": {"transactionID": "9a8b7c6d", "status": "COMPLETED"}}
    answer = await webhooks.handle(json.dumps(event).encode(), signature=None, client_ip="127.0.0.1")

    assert (answer.status_code, answer.text) == (200, "ok")
    assert order_repository.orders[result.order.id].status == "Pagamento Confirmado"
