"""
Testes unitários do serviço de tokens e do hashing de senhas.
"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.auth.config import get_auth_config
from app.auth.schemas import LoginRequest, UserCreate
from app.core.exceptions import AuthenticationError, ConflictError


class TestTokenService:

    def test_issue_and_verify_roundtrip(self, auth_service):
        token = auth_service.create_access_token(42)
        payload = auth_service.verify_token(token)

        assert payload.id == 42

    def test_default_expiration_is_one_day(self, auth_service):
        token = auth_service.create_access_token(1)
        config = get_auth_config()
        claims = jwt.decode(token, config.jwt_secret_key, algorithms=[config.jwt_algorithm])

        assert claims["exp"] - claims["iat"] == config.jwt_access_token_expire_minutes * 60
        assert config.jwt_access_token_expire_minutes == 1440

    def test_expired_token_is_rejected(self, auth_service):
        config = get_auth_config()
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = jwt.encode(
            {"id": 1, "iat": past - timedelta(days=1), "exp": past},
            config.jwt_secret_key,
            algorithm=config.jwt_algorithm
        )

        with pytest.raises(AuthenticationError):
            auth_service.verify_token(token)

    def test_token_signed_with_other_secret_is_rejected(self, auth_service):
        config = get_auth_config()
        token = jwt.encode(
            {"id": 1, "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "outra-chave-secreta-qualquer-com-tamanho",
            algorithm=config.jwt_algorithm
        )

        with pytest.raises(AuthenticationError):
            auth_service.verify_token(token)

    def test_token_without_id_is_rejected(self, auth_service):
        config = get_auth_config()
        token = jwt.encode(
            {"sub": "1", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            config.jwt_secret_key,
            algorithm=config.jwt_algorithm
        )

        with pytest.raises(AuthenticationError):
            auth_service.verify_token(token)

    def test_expired_token_rejected_by_gateway(self, test_client, auth_headers):
        config = get_auth_config()
        user_id = test_client.get("/api/v1/auth/me", headers=auth_headers).json()["user"]["id"]

        expired = jwt.encode(
            {"id": user_id, "exp": datetime.now(timezone.utc) - timedelta(seconds=5)},
            config.jwt_secret_key,
            algorithm=config.jwt_algorithm
        )
        response = test_client.get("/api/v1/moods", headers={"Authorization": f"Bearer {expired}"})

        assert response.status_code == 401
        assert "token failed" in response.json()["message"]


class TestCredentialStore:

    def test_hash_is_salted(self, auth_service):
        first = auth_service.hash_password("segredo123")
        second = auth_service.hash_password("segredo123")

        assert first != second
        assert auth_service.verify_password("segredo123", first)
        assert auth_service.verify_password("segredo123", second)
        assert not auth_service.verify_password("outra", first)

    def test_register_and_authenticate(self, auth_service):
        user = auth_service.register(
            UserCreate(name="Carla", email="carla@example.com", password="abcdef")
        )

        authenticated = auth_service.authenticate(
            LoginRequest(email="carla@example.com", password="abcdef")
        )
        assert authenticated.id == user.id

    def test_register_conflict(self, auth_service):
        data = UserCreate(name="Carla", email="carla@example.com", password="abcdef")
        auth_service.register(data)

        with pytest.raises(ConflictError):
            auth_service.register(data)

    def test_authenticate_failures_share_message(self, auth_service):
        auth_service.register(
            UserCreate(name="Carla", email="carla@example.com", password="abcdef")
        )

        with pytest.raises(AuthenticationError) as wrong_password:
            auth_service.authenticate(LoginRequest(email="carla@example.com", password="errada"))
        with pytest.raises(AuthenticationError) as unknown_email:
            auth_service.authenticate(LoginRequest(email="x@example.com", password="abcdef"))

        assert wrong_password.value.to_dict() == unknown_email.value.to_dict()
