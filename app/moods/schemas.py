from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_serializer, field_validator, model_validator

ENTRY_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
UPDATABLE_FIELDS = ("mood", "notes", "entry_date")


def normalize_entry_date(value: Any) -> datetime:
    """
    Converte um timestamp ISO 8601 para datetime UTC ingênuo com precisão de segundos.

    Aceita data (YYYY-MM-DD) ou data-hora, com ou sem offset/"Z". Valores sem
    fuso são tratados como UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise ValueError("Invalid date format") from e
    else:
        raise ValueError("Invalid date format")

    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        except OverflowError as e:
            # Offset empurra o instante para fora de datetime.min/max
            raise ValueError("Invalid date format") from e

    return parsed.replace(microsecond=0)


def format_entry_date(value: datetime) -> str:
    return value.strftime(ENTRY_DATE_FORMAT)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class MoodEntryCreate(BaseModel):
    """Dados para criação de um registro de humor."""

    mood: Annotated[str, Field(max_length=50, description="Rótulo do humor")]
    notes: Optional[str] = Field(default=None, max_length=5000)
    entry_date: datetime = Field(description="Timestamp ISO 8601")

    model_config = {"str_strip_whitespace": True}

    @field_validator("mood", mode="before")
    @classmethod
    def validate_mood(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("mood is required")
        return v

    @field_validator("notes", mode="before")
    @classmethod
    def validate_notes(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("entry_date", mode="before")
    @classmethod
    def validate_entry_date(cls, v: Any) -> datetime:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("entry_date is required")
        return normalize_entry_date(v)


class MoodEntryUpdate(BaseModel):
    """
    Atualização parcial de um registro.

    Apenas os campos enviados são alterados. `notes` enviado como null ou
    vazio limpa a anotação; `notes` omitido mantém o valor anterior.
    """

    mood: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=5000)
    entry_date: Optional[datetime] = None

    model_config = {"str_strip_whitespace": True}

    @field_validator("notes", mode="before")
    @classmethod
    def validate_notes(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("mood", "entry_date", mode="before")
    @classmethod
    def validate_required_when_present(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError(f"{info.field_name} cannot be empty")
        if info.field_name == "entry_date":
            return normalize_entry_date(v)
        return v

    @model_validator(mode="after")
    def validate_has_changes(self) -> "MoodEntryUpdate":
        if not self.changes():
            raise ValueError("No fields to update")
        return self

    def changes(self) -> Dict[str, Any]:
        """Campos efetivamente enviados na requisição."""
        supplied = self.model_fields_set.intersection(UPDATABLE_FIELDS)
        return self.model_dump(include=supplied)


class MoodEntryResponse(BaseModel):
    """Registro de humor exposto pela API."""

    id: int
    user_id: int
    mood: str
    notes: Optional[str] = None
    entry_date: datetime
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_serializer("entry_date", "created_at")
    def serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        return format_entry_date(value) if value else None


class MoodEntryEnvelope(BaseModel):
    success: bool = True
    data: MoodEntryResponse


class MoodListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[MoodEntryResponse]


class DeleteResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any] = Field(default_factory=dict)
