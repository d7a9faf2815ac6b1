from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user, RequiredUser
from app.core.exceptions import NotFoundError
from app.dependencies import get_db_session
from app.moods.schemas import (
    DeleteResponse, MoodEntryCreate, MoodEntryEnvelope, MoodEntryResponse,
    MoodEntryUpdate, MoodListResponse
)
from app.moods.service import MoodService, get_mood_service

# Maior inteiro armazenável (BIGINT com sinal)
MAX_ENTRY_ID = 2**63 - 1

# Todas as rotas exigem token bearer
router = APIRouter(
    prefix="/api/v1/moods",
    tags=["moods"],
    dependencies=[Depends(get_current_user)],
    responses={
        401: {"description": "Não autenticado"},
        500: {"description": "Erro interno do servidor"}
    }
)


def get_service(db: Session = Depends(get_db_session)) -> MoodService:
    """Dependency para obter serviço de registros de humor."""
    return get_mood_service(db)


def get_entry_id(entry_id: str) -> int:
    """Id da rota; valores não numéricos ou fora do intervalo do banco não existem."""
    if entry_id.isascii() and entry_id.isdigit():
        value = int(entry_id)
        if 1 <= value <= MAX_ENTRY_ID:
            return value
    raise NotFoundError(resource="Mood entry", record_id=entry_id)


EntryId = Annotated[int, Depends(get_entry_id)]


@router.get(
    "",
    response_model=MoodListResponse,
    summary="Listar registros de humor",
    description="Retorna os registros do usuário autenticado, mais recentes primeiro"
)
def list_moods(
    current_user: RequiredUser,
    service: MoodService = Depends(get_service)
) -> MoodListResponse:
    entries = service.list_entries(current_user.id)
    return MoodListResponse(
        count=len(entries),
        data=[MoodEntryResponse.model_validate(entry) for entry in entries]
    )


@router.post(
    "",
    response_model=MoodEntryEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Adicionar registro de humor",
    responses={400: {"description": "Humor ou data ausentes ou inválidos"}}
)
def add_mood(
    entry_data: MoodEntryCreate,
    current_user: RequiredUser,
    service: MoodService = Depends(get_service)
) -> MoodEntryEnvelope:
    """
    Cria um registro para o usuário autenticado.

    - **mood**: Rótulo do humor (obrigatório)
    - **notes**: Anotações (opcional)
    - **entry_date**: Timestamp ISO 8601 (obrigatório), normalizado para UTC
    """
    entry = service.add_entry(current_user.id, entry_data)
    return MoodEntryEnvelope(data=MoodEntryResponse.model_validate(entry))


@router.put(
    "/{entry_id}",
    response_model=MoodEntryEnvelope,
    summary="Atualizar registro de humor",
    responses={
        400: {"description": "Nenhum campo válido para atualizar"},
        404: {"description": "Registro não encontrado"}
    }
)
def update_mood(
    entry_id: EntryId,
    patch: MoodEntryUpdate,
    current_user: RequiredUser,
    service: MoodService = Depends(get_service)
) -> MoodEntryEnvelope:
    entry = service.update_entry(current_user.id, entry_id, patch)
    return MoodEntryEnvelope(data=MoodEntryResponse.model_validate(entry))


@router.delete(
    "/{entry_id}",
    response_model=DeleteResponse,
    summary="Remover registro de humor",
    responses={404: {"description": "Registro não encontrado"}}
)
def delete_mood(
    entry_id: EntryId,
    current_user: RequiredUser,
    service: MoodService = Depends(get_service)
) -> DeleteResponse:
    service.delete_entry(current_user.id, entry_id)
    return DeleteResponse()
