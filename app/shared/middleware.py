import logging
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import get_settings

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}


class TimingMiddleware(BaseHTTPMiddleware):
    """Middleware para adicionar timing headers e alertar requests lentos."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in ["/health", "/docs", "/openapi.json"]:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = time.perf_counter() - start_time

        response.headers["X-Process-Time"] = str(process_time)
        response.headers["X-Process-Time-MS"] = str(round(process_time * 1000, 2))

        if process_time > 1.0:
            logger.warning(
                "Slow request detected",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "process_time": round(process_time * 1000, 2),
                    "status_code": response.status_code
                }
            )

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware para logging estruturado de requests."""

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        request_data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "headers": {
                key: value for key, value in request.headers.items()
                if key.lower() not in SENSITIVE_HEADERS
            },
            "client_ip": self._get_client_ip(request),
        }

        if self.log_requests:
            logger.info(
                f"Request started: {request.method} {request.url.path}",
                extra=request_data
            )

        start_time = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            log_level,
            f"Request completed: {response.status_code} {request.method} {request.url.path}",
            extra={
                **request_data,
                "status_code": response.status_code,
                "process_time": round((time.perf_counter() - start_time) * 1000, 2),
            }
        )

        return response

    def _get_client_ip(self, request: Request) -> str:
        """Extrai IP real do cliente considerando proxies."""
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        return request.client.host if request.client else "unknown"


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Última barreira: nenhuma exceção chega ao cliente como stack trace."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.error(
                f"Unhandled exception in {request.method} {request.url.path}",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "request_id": request_id,
                },
                exc_info=True
            )

            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "INTERNAL_SERVER_ERROR",
                    "message": "Server error",
                },
                headers={"X-Request-ID": request_id}
            )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware para adicionar headers de segurança."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        security_headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
        }

        for header, value in security_headers.items():
            if header not in response.headers:
                response.headers[header] = value

        return response


def setup_middleware(app: FastAPI) -> None:
    """
    Configura todos os middlewares na ordem correta.

    Ordem (externo para interno):
    1. CORS
    2. Security Headers (produção)
    3. Error Handling
    4. Request Logging
    5. Timing
    """
    settings = get_settings()

    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestLoggingMiddleware, log_requests=settings.debug)
    app.add_middleware(ErrorHandlingMiddleware)

    if settings.is_production:
        app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.effective_cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=["X-Process-Time", "X-Process-Time-MS", "X-Request-ID"]
    )

    logger.info(f"Middleware configurado - Ambiente: {settings.environment}")
