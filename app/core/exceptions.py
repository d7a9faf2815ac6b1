import logging
import traceback
from typing import Any, Callable, Dict, Optional, Union

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class MoodlyError(Exception):
    """Exceção base para todas as exceções do Moodly."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_error_code: str = "MOODLY_ERROR"
    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code or self.default_error_code

        logger.log(
            self.log_level,
            f"Exceção {self.__class__.__name__}: {message}",
            extra={"details": self.details, "error_code": self.error_code}
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.error_code,
            "message": self.public_message,
        }

    @property
    def public_message(self) -> str:
        """Mensagem exposta ao cliente."""
        return self.message

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Detalhes: {self.details})"
        return self.message


# Exceções de banco de dados
class DatabaseError(MoodlyError):
    """Falha inesperada de persistência. Detalhes ficam apenas no log."""

    default_error_code = "DATABASE_ERROR"

    @property
    def public_message(self) -> str:
        return "Server error"


class NotFoundError(MoodlyError):
    """Registro inexistente ou pertencente a outro usuário."""

    status_code = status.HTTP_404_NOT_FOUND
    default_error_code = "NOT_FOUND"
    log_level = logging.INFO

    def __init__(self, resource: str = "Resource", record_id: Any = None, **kwargs):
        message = f"{resource} not found"
        if record_id is not None:
            message += f" with id {record_id}"

        details = kwargs.pop("details", {})
        details.update({"resource": resource, "record_id": record_id})

        super().__init__(message, details=details, **kwargs)


# Exceções de API
class ValidationError(MoodlyError):
    """Entrada ausente ou malformada."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_error_code = "VALIDATION_ERROR"
    log_level = logging.INFO


class ConflictError(MoodlyError):
    """Tentativa de criar registro duplicado."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_error_code = "CONFLICT"
    log_level = logging.INFO

    def __init__(self, resource: str = "Resource", field: Optional[str] = None, **kwargs):
        message = f"{resource} already exists"
        if field:
            message = f"{resource} with this {field} already exists"

        details = kwargs.pop("details", {})
        details.update({"resource": resource, "field": field})

        super().__init__(message, details=details, **kwargs)


class AuthenticationError(MoodlyError):
    """Erro de autenticação."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_error_code = "AUTHENTICATION_ERROR"
    log_level = logging.WARNING

    def __init__(self, message: str = "Not authorized to access this route", **kwargs):
        super().__init__(message, **kwargs)


# Exception handlers para FastAPI
async def moodly_error_handler(request: Request, exc: MoodlyError) -> JSONResponse:
    """Handler para exceções específicas do Moodly."""
    if exc.status_code >= 500:
        logger.error(
            f"Exceção da aplicação: {exc.__class__.__name__}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
                "traceback": traceback.format_exc()
            }
        )

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Converte erros de validação do FastAPI em ValidationError (400)."""
    return await moodly_error_handler(
        request,
        ValidationError(
            format_validation_errors(exc.errors()),
            details={"path": request.url.path}
        )
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handler personalizado para HTTPException."""
    logger.warning(
        f"HTTP Exception {exc.status_code}: {exc.detail}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": f"HTTP_{exc.status_code}",
            "message": str(exc.detail),
        },
        headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler para exceções não tratadas."""
    logger.error(
        f"Exceção não tratada: {exc.__class__.__name__}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
            "traceback": traceback.format_exc()
        }
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "INTERNAL_SERVER_ERROR",
            "message": "Server error",
        }
    )


def format_validation_errors(errors: Any) -> str:
    """Resume a primeira falha de validação em uma mensagem legível."""
    if not errors:
        return "Invalid request"

    first = errors[0]
    message = str(first.get("msg", "Invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]

    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")]
    if location:
        return f"{'.'.join(location)}: {message}"
    return message


def get_exception_handlers() -> Dict[Union[int, type], Callable]:
    """Retorna handlers de exceção para FastAPI."""
    return {
        MoodlyError: moodly_error_handler,
        RequestValidationError: request_validation_handler,
        StarletteHTTPException: http_exception_handler,
        Exception: general_exception_handler,
    }
