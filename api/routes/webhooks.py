"""
OpenPix webhook receiver.

Answers are plain text (not the JSON envelope): the provider only looks at
the status code.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from api.dependencies import get_webhook_service
from application.services.webhook_service import WebhookService
from api.middleware import resolve_client_ip
from infrastructure.external.payments.signature import SIGNATURE_HEADER


router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/openpix", response_class=PlainTextResponse, summary="OpenPix callback")
async def openpix_webhook(request: Request, service: WebhookService = Depends(get_webhook_service)):
    body = await request.body()
    result = await service.handle(
        body,
        signature=request.headers.get(SIGNATURE_HEADER),
        client_ip=getattr(request.state, "client_ip", None) or resolve_client_ip(request),
    )
    return PlainTextResponse(result.text, status_code=result.status_code)


@router.api_route(
    "/openpix",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    response_class=PlainTextResponse,
    include_in_schema=False,
)
async def openpix_webhook_method_not_allowed():
    return PlainTextResponse("Method Not Allowed", status_code=405, headers={"Allow": "POST"})
