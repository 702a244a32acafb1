"""
Exceptions for payment providers mapped to unified BusinessException variants.

Provider failures carry a typed `OpenPixErrorKind` derived from the HTTP
status plus the provider's error-code field, so callers pick a user message
by kind instead of searching the error text.
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional

from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


class OpenPixErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    UNKNOWN = "unknown"


USER_MESSAGES = {
    OpenPixErrorKind.NOT_FOUND: "Registro não encontrado na OpenPix.",
    OpenPixErrorKind.CONFLICT: (
        "Falha ao cadastrar a chave, Tente novamente mais tarde. Isso pode ser por conta "
        "de que já houve registro dessa chave mais de uma vez"
    ),
    OpenPixErrorKind.UNAUTHORIZED: "Erro de autenticação com OpenPix. Verifique as configurações.",
    OpenPixErrorKind.UNKNOWN: "Erro ao comunicar com a OpenPix. Tente novamente mais tarde.",
}

_KIND_TO_CODE = {
    OpenPixErrorKind.NOT_FOUND: PaymentCode.PROVIDER_NOT_FOUND,
    OpenPixErrorKind.CONFLICT: PaymentCode.PROVIDER_CONFLICT,
    OpenPixErrorKind.UNAUTHORIZED: PaymentCode.PROVIDER_UNAUTHORIZED,
    OpenPixErrorKind.UNKNOWN: PaymentCode.PROVIDER_ERROR,
}

_STATUS_TO_KIND = {
    401: OpenPixErrorKind.UNAUTHORIZED,
    403: OpenPixErrorKind.UNAUTHORIZED,
    404: OpenPixErrorKind.NOT_FOUND,
    409: OpenPixErrorKind.CONFLICT,
}


def _parse_body(body: str) -> dict[str, Any]:
    try:
        data = json.loads(body) if body else None
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def provider_message(body: str) -> str:
    """Best-effort human message from a provider error body ({"error": ...})."""
    data = _parse_body(body)
    for key in ("error", "message", "detail"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return body


def classify_error(status_code: Optional[int], body: str) -> OpenPixErrorKind:
    """Derive the error kind from HTTP status, then from the provider error code."""
    kind = _STATUS_TO_KIND.get(status_code or 0)
    if kind is not None:
        return kind
    data = _parse_body(body)
    code = str(data.get("code") or data.get("errorCode") or "").upper()
    if not code:
        return OpenPixErrorKind.UNKNOWN
    if "NOT_FOUND" in code:
        return OpenPixErrorKind.NOT_FOUND
    if "ALREADY" in code or "DUPLICATE" in code or "EXISTS" in code:
        return OpenPixErrorKind.CONFLICT
    if "UNAUTHORIZED" in code or "FORBIDDEN" in code or "APP_ID" in code:
        return OpenPixErrorKind.UNAUTHORIZED
    return OpenPixErrorKind.UNKNOWN


class PaymentProviderError(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        provider: str,
        kind: OpenPixErrorKind = OpenPixErrorKind.UNKNOWN,
        status_code: Optional[int] = None,
        body: str = "",
        details: Optional[dict] = None,
    ):
        self.provider = provider
        self.kind = kind
        self.status_code = status_code
        self.body = body
        full_details = {
            "provider": provider,
            "kind": kind.value,
            "status_code": status_code,
            "user_message": USER_MESSAGES[kind],
            "error": message,
        }
        if details:
            full_details.update(details)
        super().__init__(
            code=_KIND_TO_CODE[kind],
            message=message,
            error_type="PaymentProviderError",
            details=full_details,
        )

    @property
    def user_message(self) -> str:
        return USER_MESSAGES[self.kind]


class OpenPixError(PaymentProviderError):
    """Non-2xx answer from the OpenPix API (HTTP status and raw body embedded)."""

    def __init__(
        self,
        action: str,
        *,
        status_code: Optional[int],
        body: str,
        kind: Optional[OpenPixErrorKind] = None,
    ):
        resolved = kind or classify_error(status_code, body)
        super().__init__(
            f"{action}: {status_code} - {provider_message(body)}",
            provider="openpix",
            kind=resolved,
            status_code=status_code,
            body=body,
            details={"provider_message": provider_message(body)},
        )


class PaymentSignatureError(BusinessException):
    def __init__(self, message: str, *, provider: str, details: Optional[dict] = None):
        full_details = {"provider": provider}
        if details:
            full_details.update(details)
        super().__init__(
            code=PaymentCode.SIGNATURE_ERROR,
            message=message,
            error_type="PaymentSignatureError",
            details=full_details,
        )
