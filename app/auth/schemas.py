"""
Schemas Pydantic para autenticação.
"""
from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, StringConstraints


class UserCreate(BaseModel):
    """Schema para criação de usuário."""
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    email: EmailStr
    password: Annotated[
        str,
        Field(min_length=6, max_length=128, description="Senha deve ter no mínimo 6 caracteres")
    ]


class LoginRequest(BaseModel):
    """Schema para requisição de login."""
    email: Annotated[str, Field(min_length=1)]
    password: Annotated[str, Field(min_length=1)]


class UserPublic(BaseModel):
    """Projeção pública do usuário."""
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class TokenPayload(BaseModel):
    """Dados decodificados do token JWT."""
    id: int
    exp: int


class LoginResponse(BaseModel):
    """Resposta de login com token bearer."""
    success: bool = True
    token: str
    user: UserPublic


class UserResponse(BaseModel):
    """Resposta com os dados do usuário autenticado."""
    success: bool = True
    user: UserPublic


class MessageResponse(BaseModel):
    """Schema genérico para mensagens."""
    success: bool = True
    message: str
