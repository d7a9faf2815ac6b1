from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.core.database import Base

if TYPE_CHECKING:
    from app.auth.models import User


class MoodEntry(Base):
    """Registro de humor pertencente a um único usuário."""

    __tablename__ = "mood_entries"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Dono do registro"
    )

    mood: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Rótulo do humor (ex: happy, sad)"
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    entry_date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        comment="Momento do registro em UTC, precisão de segundos"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now()
    )

    user: Mapped["User"] = relationship(back_populates="mood_entries")

    __table_args__ = (
        # Listagem por dono ordenada por data
        Index("idx_mood_entries_user_date", "user_id", "entry_date"),
    )
