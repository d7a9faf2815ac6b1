import logging
from typing import Generator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import get_session_factory
from app.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def get_db_session() -> Generator[Session, None, None]:
    """Dependency de sessão por requisição, emprestada do pool compartilhado."""
    session = get_session_factory()()
    logger.debug("Sessão de banco de dados criada")

    try:
        yield session
        session.commit()

    except SQLAlchemyError as e:
        logger.error(f"Erro SQLAlchemy: {e}")
        session.rollback()
        raise DatabaseError(
            message=f"Erro de banco de dados: {e}",
            details={"error_type": type(e).__name__}
        ) from e

    except Exception:
        session.rollback()
        raise

    finally:
        session.close()
        logger.debug("Sessão fechada")
