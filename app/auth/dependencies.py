"""
Dependencies de autenticação para FastAPI.
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.auth.models import User
from app.auth.service import get_auth_service
from app.core.exceptions import AuthenticationError
from app.dependencies import get_db_session

logger = logging.getLogger(__name__)

NO_TOKEN_MESSAGE = "Not authorized to access this route (no token)"
USER_NOT_FOUND_MESSAGE = "User not found, invalid token?"

# Sem auto_error: a ausência do token vira AuthenticationError (401)
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Session = Depends(get_db_session)
) -> User:
    """
    Resolve o usuário autenticado a partir do header Authorization.

    Etapas, nesta ordem: extrair o token bearer, verificar o token e
    carregar o usuário. Um token válido de usuário removido falha na
    última etapa.
    """
    if not credentials or not credentials.credentials:
        raise AuthenticationError(NO_TOKEN_MESSAGE)

    auth_service = get_auth_service(db)
    token_data = auth_service.verify_token(credentials.credentials)

    user = auth_service.get_user_by_id(token_data.id)
    if not user:
        logger.warning(f"Token válido para usuário inexistente: {token_data.id}")
        raise AuthenticationError(USER_NOT_FOUND_MESSAGE)

    return user


# Type alias para injeção de dependências
RequiredUser = Annotated[User, Depends(get_current_user)]
