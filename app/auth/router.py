"""
Router de autenticação com endpoints de login e registro.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth.dependencies import RequiredUser
from app.auth.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    UserCreate,
    UserPublic,
    UserResponse,
)
from app.auth.service import get_auth_service
from app.dependencies import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["authentication"],
    responses={
        400: {"description": "Dados inválidos"},
        401: {"description": "Não autenticado"}
    }
)


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar novo usuário",
    description="Cria uma nova conta de usuário"
)
def register(
    user_data: UserCreate,
    db: Session = Depends(get_db_session)
) -> MessageResponse:
    """
    Registra um novo usuário.

    - **name**: Nome do usuário
    - **email**: Email válido e ainda não cadastrado
    - **password**: Senha com no mínimo 6 caracteres
    """
    auth_service = get_auth_service(db)
    user = auth_service.register(user_data)
    logger.info(f"Novo usuário registrado: {user.id}")

    return MessageResponse(message="User registered")


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Fazer login",
    description="Autentica usuário e retorna token JWT"
)
def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db_session)
) -> LoginResponse:
    """
    Autentica usuário e retorna token de acesso.

    Retorna token JWT válido por 1 dia (configurável).
    """
    auth_service = get_auth_service(db)
    user = auth_service.authenticate(login_data)

    return LoginResponse(
        token=auth_service.create_access_token(user.id),
        user=UserPublic.model_validate(user)
    )


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Dados do usuário atual",
    description="Retorna informações do usuário autenticado"
)
async def get_current_user_info(current_user: RequiredUser) -> UserResponse:
    """Requer token JWT válido no header Authorization."""
    return UserResponse(user=UserPublic.model_validate(current_user))
