import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict, List

import uvicorn
from fastapi import FastAPI, status
from fastapi.responses import JSONResponse, PlainTextResponse

from app.auth.router import router as auth_router
from app.config import get_settings
from app.core.database import check_database_health, dispose_engine, init_database
from app.core.exceptions import get_exception_handlers
from app.moods.router import router as moods_router
from app.shared.middleware import setup_middleware

# Configurações
settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gerencia ciclo de vida da aplicação."""
    logger.info(f"Iniciando {settings.app_name} v{settings.app_version} - {settings.environment}")

    try:
        init_database()
    except Exception as e:
        logger.error(f"Erro durante inicialização: {e}")
        raise

    logger.info(f"{settings.app_name} iniciado com sucesso")

    yield

    logger.info(f"Encerrando {settings.app_name}...")
    dispose_engine()
    logger.info(f"{settings.app_name} encerrado")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=settings.app_description,
    lifespan=lifespan,
    debug=settings.debug,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    openapi_tags=[
        {"name": "authentication", "description": "Registro, login e token JWT"},
        {"name": "moods", "description": "Registros de humor do usuário autenticado"},
        {"name": "health", "description": "Verificações de saúde e status"},
    ]
)

# Configurar middleware
setup_middleware(app)

# Registrar exception handlers
for exception_type, handler in get_exception_handlers().items():
    app.add_exception_handler(exception_type, handler)

# Incluir routers
app.include_router(auth_router)
app.include_router(moods_router)


@app.get(
    "/",
    response_class=PlainTextResponse,
    summary="Página inicial",
    tags=["health"]
)
async def root() -> str:
    return "Moodly API running..."


@app.get(
    "/health",
    summary="Health check",
    description="Verificação de saúde do banco de dados",
    tags=["health"]
)
def health_check() -> JSONResponse:
    db_health = check_database_health()
    healthy = db_health.get("status") == "healthy"

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "success": healthy,
            "status": db_health.get("status", "unknown"),
            "components": {"database": db_health},
            "version": settings.app_version,
            "environment": settings.environment,
        }
    )


def run() -> None:
    """
    Sobe o servidor uvicorn.

    Uma falha assíncrona não tratada fecha o listener e encerra o processo
    com status 1; a reinicialização fica a cargo do supervisor externo.
    """
    config = uvicorn.Config(
        "app.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload and settings.debug,
        log_level=settings.log_level.lower(),
        access_log=settings.debug,
    )
    server = uvicorn.Server(config)
    failures: List[Dict[str, Any]] = []

    def handle_unhandled_error(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        logger.critical(
            f"Erro assíncrono não tratado: {context.get('message')}",
            exc_info=context.get("exception")
        )
        failures.append(context)
        server.should_exit = True

    async def serve() -> None:
        asyncio.get_running_loop().set_exception_handler(handle_unhandled_error)
        await server.serve()

    asyncio.run(serve())

    if failures:
        sys.exit(1)


if __name__ == "__main__":
    run()
