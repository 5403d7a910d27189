"""
Configuration partagée pour tous les tests.
Override la dépendance get_db pour éviter toute connexion réelle à PostgreSQL,
et get_current_user pour simuler un utilisateur connecté sans token.
"""

import uuid

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from app.database import get_db
from app.dependencies import get_current_user
from app.main import app
from app.models.enums import Role
from app.schemas.auth import CurrentUser

SCHOOL_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
OTHER_SCHOOL_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def client(mock_db):
    """Client HTTP de test avec la BDD mockée."""
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login_as():
    """
    Simule un utilisateur authentifié : login_as(Role.TEACHER) → CurrentUser.
    Les overrides sont nettoyés par la fixture client.
    """
    def _login(role: Role = Role.ADMIN, school_id: uuid.UUID = SCHOOL_ID, user_id: uuid.UUID = None):
        user = CurrentUser(
            id=user_id or uuid.uuid4(),
            email=f"{role.value.lower()}@ecole.be",
            role=role,
            school_id=school_id,
        )
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    return _login
