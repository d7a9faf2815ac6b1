"""
Configuração de autenticação JWT.
"""
import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class AuthConfig(BaseSettings):
    """Configurações de autenticação JWT."""

    model_config = SettingsConfigDict(
        env_prefix="MOODLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # JWT Settings
    jwt_secret_key: str = Field(
        default="your-super-secret-key-change-in-production-immediately",
        description="Chave secreta para assinar tokens JWT"
    )
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256",
        description="Algoritmo de assinatura JWT"
    )
    jwt_access_token_expire_minutes: int = Field(
        default=1440,  # 1 dia
        ge=1,
        le=43200,
        description="Tempo de expiração do token de acesso em minutos"
    )

    # Bcrypt Settings
    bcrypt_rounds: int = Field(
        default=10,
        ge=4,
        le=16,
        description="Número de rounds para hashing de senha"
    )


@lru_cache()
def get_auth_config() -> AuthConfig:
    """Factory singleton para configuração de autenticação."""
    config = AuthConfig()

    if "change" in config.jwt_secret_key.lower() or len(config.jwt_secret_key) < 32:
        logger.warning(
            "MOODLY_JWT_SECRET_KEY não configurada ou muito curta! "
            "Configure a chave em .env para produção."
        )

    return config
