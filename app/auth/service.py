"""
Serviço de autenticação JWT.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.config import get_auth_config
from app.auth.models import User
from app.auth.schemas import LoginRequest, TokenPayload, UserCreate
from app.core.exceptions import AuthenticationError, ConflictError, DatabaseError

logger = logging.getLogger(__name__)
config = get_auth_config()

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
TOKEN_FAILED_MESSAGE = "Not authorized to access this route (token failed)"

# Contexto de criptografia para senhas
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=config.bcrypt_rounds
)


class AuthService:
    """Serviço para operações de autenticação."""

    def __init__(self, db: Session):
        self.db = db

    # ==================
    # Password Handling
    # ==================

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verifica se a senha está correta."""
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            # passlib recusa senhas acima de MAX_PASSWORD_SIZE
            return False

    def hash_password(self, password: str) -> str:
        """Gera hash salgado da senha."""
        return pwd_context.hash(password)

    # ==================
    # User Operations
    # ==================

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Busca usuário por email (sem diferenciar maiúsculas)."""
        try:
            return self.db.query(User).filter(
                func.lower(User.email) == email.strip().lower()
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Erro ao buscar usuário por email: {e}")
            raise DatabaseError(f"Falha ao buscar usuário: {e}") from e

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        """Busca usuário por ID."""
        try:
            return self.db.query(User).filter(User.id == user_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Erro ao buscar usuário {user_id}: {e}")
            raise DatabaseError(f"Falha ao buscar usuário: {e}") from e

    def register(self, user_data: UserCreate) -> User:
        """Cria novo usuário com senha em hash."""
        if self.get_user_by_email(user_data.email):
            raise ConflictError(resource="User", field="email")

        user = User(
            name=user_data.name,
            email=user_data.email,
            password_hash=self.hash_password(user_data.password)
        )

        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError as e:
            # Registro concorrente com o mesmo email
            self.db.rollback()
            raise ConflictError(resource="User", field="email") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Erro ao criar usuário: {e}")
            raise DatabaseError(f"Falha ao criar usuário: {e}") from e

        logger.info(f"Usuário criado: {user.id}")
        return user

    def authenticate(self, credentials: LoginRequest) -> User:
        """
        Autentica usuário por email e senha.

        Email inexistente e senha incorreta levantam o mesmo erro, e o caminho
        do email inexistente também executa uma verificação de hash.
        """
        user = self.get_user_by_email(credentials.email)

        if not user:
            pwd_context.dummy_verify()
            logger.debug("Login com email não cadastrado")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        if not self.verify_password(credentials.password, user.password_hash):
            logger.debug(f"Senha incorreta para usuário {user.id}")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        logger.info(f"Usuário autenticado: {user.id}")
        return user

    # ==================
    # Token Operations
    # ==================

    def create_access_token(self, user_id: int) -> str:
        """Emite token JWT assinado contendo o id do usuário."""
        now = datetime.now(timezone.utc)
        to_encode = {
            "id": user_id,
            "iat": now,
            "exp": now + timedelta(minutes=config.jwt_access_token_expire_minutes),
        }

        return jwt.encode(
            to_encode,
            config.jwt_secret_key,
            algorithm=config.jwt_algorithm
        )

    def verify_token(self, token: str) -> TokenPayload:
        """Verifica assinatura e expiração do token e decodifica o payload."""
        try:
            payload = jwt.decode(
                token,
                config.jwt_secret_key,
                algorithms=[config.jwt_algorithm]
            )
            return TokenPayload.model_validate(payload)

        except (JWTError, PydanticValidationError) as e:
            logger.debug(f"Erro ao decodificar token: {e}")
            raise AuthenticationError(TOKEN_FAILED_MESSAGE) from e


def get_auth_service(db: Session) -> AuthService:
    """Factory para criar instância do AuthService."""
    return AuthService(db)
