import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    url: str = Field(default="sqlite:///./data/moodly.db")
    pool_size: int = Field(default=10, ge=1, le=50)
    max_overflow: int = Field(default=0, ge=0, le=100)
    pool_timeout: int = Field(default=30, ge=5, le=300)
    pool_recycle: int = Field(default=3600, ge=300, le=86400)
    echo: bool = Field(default=False)

    @field_validator("url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v:
            raise ValueError("URL do banco de dados não pode estar vazia")
        if v.startswith("sqlite:///") and ":memory:" not in v:
            db_path = Path(v.replace("sqlite:///", ""))
            db_path.parent.mkdir(parents=True, exist_ok=True)
        return v


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1024, le=65535)
    reload: bool = Field(default=False)


class Settings(BaseSettings):
    """Configurações principais da aplicação Moodly."""

    model_config = SettingsConfigDict(
        env_prefix="MOODLY_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Configurações da aplicação
    app_name: str = Field(default="Moodly API")
    app_version: str = Field(default="1.0.0")
    app_description: str = Field(default="Diário pessoal de humor com autenticação JWT")
    debug: bool = Field(default=False)
    environment: Literal["development", "staging", "production"] = Field(default="development")

    # Configurações por domínio
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    # Configurações de logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", validate_default=True)
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # CORS
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "PUT", "DELETE", "OPTIONS"])
    cors_allow_headers: list[str] = Field(default=["*"])
    cors_production_origins: list[str] = Field(
        default_factory=lambda: ["https://moodly.example.com"]
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError(f"Nível de log inválido: {v}")
        return level

    @model_validator(mode="after")
    def configure_logging(self) -> "Settings":
        # Roda também com os valores padrão
        logging.basicConfig(
            level=getattr(logging, self.log_level),
            format=self.log_format
        )
        return self

    @property
    def effective_cors_origins(self) -> list[str]:
        """Retorna CORS origins baseado no ambiente."""
        if self.is_production:
            return self.cors_production_origins
        return self.cors_origins

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_database_url(self) -> str:
        return self.database.url


@lru_cache()
def get_settings() -> Settings:
    """Factory para obter instância singleton das configurações."""
    return Settings()
