"""
请求/响应日志中间件
记录 HTTP 请求开始/结束、耗时，以及脱敏后的请求体
"""
import json
import time
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.config import settings
from core.logging_config import get_logger, mask_value


logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    日志记录中间件

    Webhook 路径不记录请求体：签名基于原始字节，且载荷含付款人信息。
    """

    SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}
    SKIP_BODY_PREFIXES = ("/api/v1/webhooks",)

    # 完全隐藏
    SECRET_FIELDS = {"authorization", "app_id", "appid", "signing_key", "signature"}
    # 只保留首尾字符
    PARTIAL_FIELDS = {"pixkey", "pix_key", "seller_pix_key", "destinationalias"}

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.enable_body_log_default: bool = settings.LOG_REQUEST_BODY_ENABLE_BY_DEFAULT
        self.max_body_log_bytes: int = settings.LOG_REQUEST_BODY_MAX_BYTES

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        request_info = await self._get_request_info(request)
        logger.info("request_started", **request_info)

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                duration=time.perf_counter() - start_time,
                error_type=type(exc).__name__,
                **request_info,
                exc_info=True,
            )
            raise

        duration = time.perf_counter() - start_time
        self._log_response(response, duration, request_info)
        response.headers["X-Process-Time"] = f"{duration:.3f}"
        return response

    async def _get_request_info(self, request: Request) -> dict:
        info: dict[str, Any] = {"query_params": dict(request.query_params)}
        if request.method in ("POST", "PUT", "PATCH") and self._should_log_body(request):
            body = await self._read_json_body(request)
            if body is not None:
                info["body"] = body
        user_agent = request.headers.get("User-Agent")
        if user_agent:
            info["user_agent"] = user_agent
        return info

    def _should_log_body(self, request: Request) -> bool:
        if request.url.path.startswith(self.SKIP_BODY_PREFIXES):
            return False
        header = (request.headers.get("X-Log-Body") or "").lower()
        if header in {"true", "1", "yes"}:
            return True
        if header in {"false", "0", "no"}:
            return False
        return bool(self.enable_body_log_default and settings.DEBUG)

    async def _read_json_body(self, request: Request) -> Any:
        if "application/json" not in request.headers.get("content-type", "").lower():
            return None
        body = await request.body()
        if not body:
            return None
        snippet = body[: self.max_body_log_bytes].decode("utf-8", errors="ignore")
        try:
            parsed = json.loads(snippet)
        except ValueError:
            return {"truncated": True, "size": len(body)}
        return self._sanitize(parsed)

    def _sanitize(self, data: Any) -> Any:
        if isinstance(data, dict):
            clean = {}
            for key, value in data.items():
                lowered = str(key).lower()
                if lowered in self.SECRET_FIELDS:
                    clean[key] = "***"
                elif lowered in self.PARTIAL_FIELDS:
                    clean[key] = mask_value(value)
                else:
                    clean[key] = self._sanitize(value)
            return clean
        if isinstance(data, list):
            return [self._sanitize(v) for v in data]
        return data

    def _log_response(self, response: Response, duration: float, request_info: dict):
        log_data = {"status_code": response.status_code, "duration": duration, **request_info}
        if response.status_code < 400:
            logger.info("request_completed", **log_data)
        elif response.status_code < 500:
            logger.warning("request_client_error", **log_data)
        else:
            logger.error("request_server_error", **log_data)
