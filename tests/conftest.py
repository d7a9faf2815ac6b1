import os

# Configurações de teste precisam existir antes de importar a aplicação
os.environ.setdefault("MOODLY_DATABASE__URL", "sqlite:///:memory:")
os.environ.setdefault("MOODLY_ENVIRONMENT", "development")
os.environ.setdefault("MOODLY_LOG_LEVEL", "WARNING")
os.environ.setdefault("MOODLY_JWT_SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("MOODLY_BCRYPT_ROUNDS", "4")

from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth.service import AuthService
from app.core.database import Base
from app.dependencies import get_db_session
from app.main import app


# FIXTURES DE BANCO DE DADOS

@pytest.fixture
def test_engine():
    """Engine SQLite in-memory, recriado a cada teste."""
    engine = create_engine(
        "sqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    Base.metadata.create_all(bind=engine)
    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_db(test_engine):
    """Sessão de banco isolada para cada teste."""
    SessionLocal = sessionmaker(
        bind=test_engine,
        autoflush=False,
        expire_on_commit=False
    )
    session = SessionLocal()

    yield session

    session.close()


# CLIENTE DE TESTE

@pytest.fixture
def test_client(test_db):
    """Cliente FastAPI configurado para testes."""
    def override_get_db():
        yield test_db

    app.dependency_overrides[get_db_session] = override_get_db

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


# DADOS DE TESTE

@pytest.fixture
def user_payload() -> Dict[str, str]:
    return {
        "name": "Ana Souza",
        "email": "ana@example.com",
        "password": "segredo123"
    }


@pytest.fixture
def registered_user(test_client, user_payload):
    """Registra um usuário pela API e retorna o payload usado."""
    response = test_client.post("/api/v1/auth/register", json=user_payload)
    assert response.status_code == 201
    return user_payload


def _login(client: TestClient, email: str, password: str) -> Dict[str, str]:
    response = client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(test_client, registered_user) -> Dict[str, str]:
    """Headers com token bearer do usuário registrado."""
    return _login(test_client, registered_user["email"], registered_user["password"])


@pytest.fixture
def other_auth_headers(test_client) -> Dict[str, str]:
    """Headers de um segundo usuário, para testes de posse."""
    payload = {"name": "Bruno Lima", "email": "bruno@example.com", "password": "outrasenha"}
    response = test_client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201
    return _login(test_client, payload["email"], payload["password"])


@pytest.fixture
def auth_service(test_db) -> AuthService:
    return AuthService(test_db)


# CONFIGURAÇÃO PYTEST

def pytest_configure(config):
    """Configuração do pytest."""
    config.addinivalue_line("markers", "integration: marca testes de integração")


@pytest.fixture(autouse=True)
def cleanup():
    """Cleanup automático entre testes."""
    yield
    app.dependency_overrides.clear()
