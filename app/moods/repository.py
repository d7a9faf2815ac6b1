"""
Repository para operações de banco de dados dos registros de humor.

Toda consulta e escrita é filtrada pelo dono do registro.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, desc, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import DatabaseError
from app.moods.models import MoodEntry

logger = logging.getLogger(__name__)


class MoodRepository:
    """Repository de registros de humor com escopo por usuário."""

    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: int) -> List[MoodEntry]:
        """Lista registros do usuário, mais recentes primeiro."""
        try:
            return self.db.query(MoodEntry).filter(
                MoodEntry.user_id == user_id
            ).order_by(
                desc(MoodEntry.entry_date), desc(MoodEntry.id)
            ).all()
        except SQLAlchemyError as e:
            logger.error(f"Erro ao listar registros do usuário {user_id}: {e}")
            raise DatabaseError(f"Falha ao listar registros: {e}") from e

    def get_owned(self, entry_id: int, user_id: int) -> Optional[MoodEntry]:
        """Busca registro por ID apenas se pertencer ao usuário."""
        try:
            stmt = (
                select(MoodEntry)
                .where(MoodEntry.id == entry_id, MoodEntry.user_id == user_id)
                .execution_options(populate_existing=True)
            )
            return self.db.scalars(stmt).first()
        except SQLAlchemyError as e:
            logger.error(f"Erro ao buscar registro {entry_id}: {e}")
            raise DatabaseError(f"Falha ao buscar registro: {e}") from e

    def create(
        self,
        user_id: int,
        mood: str,
        entry_date: datetime,
        notes: Optional[str] = None
    ) -> MoodEntry:
        """Persiste um novo registro e retorna com o ID gerado."""
        entry = MoodEntry(
            user_id=user_id,
            mood=mood,
            notes=notes,
            entry_date=entry_date
        )

        try:
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Erro ao criar registro para usuário {user_id}: {e}")
            raise DatabaseError(f"Falha ao criar registro: {e}") from e

        logger.debug(f"Registro criado: {entry.id}")
        return entry

    def update_owned(self, entry_id: int, user_id: int, changes: Dict[str, Any]) -> bool:
        """
        Atualiza o registro em um único UPDATE condicionado ao dono.

        Returns:
            True se alguma linha foi afetada
        """
        try:
            result = self.db.execute(
                update(MoodEntry)
                .where(MoodEntry.id == entry_id, MoodEntry.user_id == user_id)
                .values(**changes)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Erro ao atualizar registro {entry_id}: {e}")
            raise DatabaseError(f"Falha ao atualizar registro: {e}") from e

        return result.rowcount > 0

    def delete_owned(self, entry_id: int, user_id: int) -> bool:
        """
        Remove o registro em um único DELETE condicionado ao dono.

        Returns:
            True se alguma linha foi removida
        """
        try:
            result = self.db.execute(
                delete(MoodEntry)
                .where(MoodEntry.id == entry_id, MoodEntry.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Erro ao remover registro {entry_id}: {e}")
            raise DatabaseError(f"Falha ao remover registro: {e}") from e

        return result.rowcount > 0
