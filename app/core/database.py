import logging
from functools import lru_cache
from typing import Any, Dict

from sqlalchemy import Engine, MetaData, create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base declarativa para modelos SQLAlchemy 2.0 com suporte a typing."""

    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
            "pk": "pk_%(table_name)s"
        }
    )

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        primary_key = getattr(self, 'id', 'unknown')
        return f"<{class_name}(id={primary_key})>"


def create_database_engine() -> Engine:
    """Cria engine do banco com pool de conexões limitado."""
    settings = get_settings()
    database_url = settings.get_database_url()

    engine_kwargs: Dict[str, Any] = {
        "echo": settings.database.echo,
        "pool_pre_ping": True,
    }

    if database_url.startswith("sqlite"):
        logger.info("Configurando engine SQLite")
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url:
            engine_kwargs["poolclass"] = StaticPool
    else:
        # Requisições excedentes aguardam na fila do pool
        engine_kwargs.update({
            "pool_size": settings.database.pool_size,
            "max_overflow": settings.database.max_overflow,
            "pool_timeout": settings.database.pool_timeout,
            "pool_recycle": settings.database.pool_recycle,
        })

    try:
        engine = create_engine(database_url, **engine_kwargs)
    except Exception as e:
        logger.error(f"Erro ao criar engine: {e}")
        raise DatabaseError(
            message=f"Falha ao criar engine: {e}",
            details={"error": str(e)}
        ) from e

    if database_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def receive_connect(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    logger.info(f"Engine de banco criado: {engine.url.render_as_string(hide_password=True)}")
    return engine


@lru_cache()
def get_engine() -> Engine:
    """Factory singleton para engine de banco."""
    return create_database_engine()


@lru_cache()
def get_session_factory() -> sessionmaker[Session]:
    """Factory para criar sessionmaker configurado."""
    return sessionmaker(
        bind=get_engine(),
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


def ping_database() -> bool:
    """Testa conectividade com banco executando query simples."""
    try:
        with get_engine().connect() as connection:
            value = connection.execute(text("SELECT 1")).scalar()
    except SQLAlchemyError as e:
        logger.error(f"Erro de conectividade: {e}")
        raise DatabaseError(
            message=f"Falha na conexão: {e}",
            details={"error_type": type(e).__name__}
        ) from e

    if value != 1:
        raise DatabaseError(
            message="Teste falhou: resultado inesperado",
            details={"expected": 1, "received": value}
        )

    logger.info("Teste de conexão bem-sucedido")
    return True


def init_database() -> None:
    """Inicializa banco criando todas as tabelas."""
    # Registra os modelos no metadata antes do create_all
    from app.auth import models as auth_models  # noqa: F401
    from app.moods import models as mood_models  # noqa: F401

    logger.info("Inicializando banco de dados...")
    try:
        Base.metadata.create_all(bind=get_engine())
    except SQLAlchemyError as e:
        logger.error(f"Erro ao inicializar banco: {e}")
        raise DatabaseError(
            message=f"Falha na inicialização: {e}",
            details={"error": str(e)}
        ) from e

    ping_database()
    logger.info("Banco inicializado com sucesso")


def check_database_health() -> Dict[str, Any]:
    """Executa verificação de saúde do banco."""
    try:
        ping_database()
    except DatabaseError as e:
        return {
            "status": "unhealthy",
            "error_type": type(e.__cause__ or e).__name__,
        }

    engine = get_engine()
    pool = engine.pool

    return {
        "status": "healthy",
        "dialect": engine.dialect.name,
        "pool_status": {
            "size": getattr(pool, "size", lambda: "N/A")(),
            "checked_out": getattr(pool, "checkedout", lambda: 0)(),
            "overflow": getattr(pool, "overflow", lambda: 0)(),
        },
    }


def dispose_engine() -> None:
    """Fecha todas as conexões do pool."""
    get_engine().dispose()
    logger.info("Pool de conexões encerrado")
