import logging
from typing import List

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.moods.models import MoodEntry
from app.moods.repository import MoodRepository
from app.moods.schemas import MoodEntryCreate, MoodEntryUpdate

logger = logging.getLogger(__name__)


class MoodService:
    """Regras de negócio dos registros de humor."""

    def __init__(self, db: Session):
        self.repository = MoodRepository(db)

    def list_entries(self, user_id: int) -> List[MoodEntry]:
        return self.repository.list_for_user(user_id)

    def add_entry(self, user_id: int, data: MoodEntryCreate) -> MoodEntry:
        entry = self.repository.create(
            user_id=user_id,
            mood=data.mood,
            notes=data.notes,
            entry_date=data.entry_date
        )
        logger.info(f"Registro {entry.id} criado para usuário {user_id}")
        return entry

    def update_entry(self, user_id: int, entry_id: int, patch: MoodEntryUpdate) -> MoodEntry:
        """
        Aplica atualização parcial.

        Registro inexistente e registro de outro usuário levantam o mesmo
        NotFoundError.
        """
        changes = patch.changes()
        if not changes:
            raise ValidationError("No fields to update")

        if not self.repository.update_owned(entry_id, user_id, changes):
            raise NotFoundError(resource="Mood entry", record_id=entry_id)

        entry = self.repository.get_owned(entry_id, user_id)
        if entry is None:
            # Removido entre o UPDATE e a releitura
            raise NotFoundError(resource="Mood entry", record_id=entry_id)

        logger.info(f"Registro {entry_id} atualizado: {sorted(changes)}")
        return entry

    def delete_entry(self, user_id: int, entry_id: int) -> None:
        if not self.repository.delete_owned(entry_id, user_id):
            raise NotFoundError(resource="Mood entry", record_id=entry_id)

        logger.info(f"Registro {entry_id} removido por usuário {user_id}")


def get_mood_service(db: Session) -> MoodService:
    """Factory para criar instância do MoodService."""
    return MoodService(db)
