"""
Base payment client implementing shared concerns: http, retry, logging.

Concrete providers subclass and implement provider-specific endpoints.
"""
from __future__ import annotations

from typing import Any, Callable, Optional
from contextlib import asynccontextmanager

import httpx
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from core.logging_config import get_logger
from infrastructure.external.payments.exceptions import (
    OpenPixError,
    OpenPixErrorKind,
    PaymentProviderError,
)


logger = get_logger(__name__)


class BasePaymentClient:
    provider: str = "base"

    def __init__(
        self,
        *,
        base_url: str,
        headers: Optional[dict[str, str]] = None,
        timeouts: Optional[dict[str, float]] = None,
        retry: Optional[dict[str, Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            **(headers or {}),
        }
        self._timeouts_cfg = timeouts or {"connect": 2.0, "read": 10.0, "write": 10.0, "total": 15.0}
        self._retry_cfg = retry or {"max": 0, "base": 0.2}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def timeouts(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self._timeouts_cfg["connect"],
            read=self._timeouts_cfg["read"],
            write=self._timeouts_cfg["write"],
            timeout=self._timeouts_cfg["total"],
        )

    @asynccontextmanager
    async def client(self):
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self.timeouts,
                transport=self._transport,
            )
        try:
            yield self._client
        finally:
            # Keep open for reuse; explicit aclose() will close.
            ...

    async def aclose(self) -> None:
        """Close underlying HTTP client if created."""
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _retry(self, fn: Callable[[], Any]):
        # Only transport failures are retried, never provider answers
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(int(self._retry_cfg["max"]) + 1),
            wait=wait_exponential(multiplier=self._retry_cfg["base"], min=0.1, max=2.0),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.TransportError)),
            reraise=True,
        ):
            with attempt:
                return await fn()

    async def _send(
        self,
        method: str,
        path: str,
        *,
        action: str,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send one request; transport failures become PaymentProviderError."""

        async def _once() -> httpx.Response:
            async with self.client() as c:
                return await c.request(method, path, json=json, params=params)

        try:
            response = await self._retry(_once)
        except httpx.HTTPError as exc:
            logger.error("payment_provider_unreachable", provider=self.provider, action=action, error=str(exc))
            raise PaymentProviderError(f"{action}: {exc}", provider=self.provider) from exc
        self._log("payment_provider_response", method=method, path=path, status_code=response.status_code)
        return response

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if not response.is_success:
            raise OpenPixError(action, status_code=response.status_code, body=response.text)

    def _json(self, response: httpx.Response, action: str) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise OpenPixError(
                action,
                status_code=response.status_code,
                body=response.text,
                kind=OpenPixErrorKind.UNKNOWN,
            ) from exc
        return data if isinstance(data, dict) else {}

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )
