"""
Módulo de autenticação JWT para Moodly.

Implementa:
- Registro e login de usuários
- Tokens JWT para autenticação
- Proteção de endpoints
"""
from app.auth.config import AuthConfig, get_auth_config
from app.auth.dependencies import RequiredUser, get_current_user
from app.auth.router import router as auth_router

__all__ = [
    "AuthConfig",
    "get_auth_config",
    "get_current_user",
    "RequiredUser",
    "auth_router",
]
