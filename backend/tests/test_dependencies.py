"""
Tests unitaires du garde d'authentification et de la décision de rôle.
"""

import uuid
from unittest.mock import MagicMock

import pytest

from app.dependencies import check_role, get_current_user, require_roles
from app.exceptions import ForbiddenError, UnauthorizedError
from app.models.enums import Role
from app.schemas.auth import CurrentUser
from app.security import create_access_token, create_refresh_token

SCHOOL_ID = uuid.uuid4()


def make_user(is_active=True, role="TEACHER"):
    user = MagicMock()
    user.id = uuid.uuid4()
    user.email = "prof@ecole.be"
    user.role = role
    user.school_id = SCHOOL_ID
    user.is_active = is_active
    return user


# --- check_role ---

def test_check_role_autorise():
    assert check_role(Role.ADMIN, [Role.ADMIN, Role.TEACHER]) is True


def test_check_role_refuse():
    assert check_role(Role.PARENT, [Role.ADMIN, Role.TEACHER]) is False


def test_check_role_accepte_une_chaine():
    assert check_role("TEACHER", (Role.TEACHER,)) is True


# --- get_current_user ---

def test_get_current_user_succes():
    user = make_user()
    db = MagicMock()
    db.get.return_value = user
    token = create_access_token(user.id, user.email, user.role)

    current = get_current_user(authorization=f"Bearer {token}", db=db)

    assert current.id == user.id
    assert current.role == Role.TEACHER
    assert current.school_id == SCHOOL_ID


def test_get_current_user_sans_entete():
    with pytest.raises(UnauthorizedError, match="manquant"):
        get_current_user(authorization=None, db=MagicMock())


def test_get_current_user_mauvais_schema():
    with pytest.raises(UnauthorizedError, match="Schéma"):
        get_current_user(authorization="Basic abc", db=MagicMock())


def test_get_current_user_refresh_token_refuse():
    user = make_user()
    token = create_refresh_token(user.id, user.email, user.role)
    with pytest.raises(UnauthorizedError):
        get_current_user(authorization=f"Bearer {token}", db=MagicMock())


def test_get_current_user_utilisateur_desactive():
    user = make_user(is_active=False)
    db = MagicMock()
    db.get.return_value = user
    token = create_access_token(user.id, user.email, user.role)
    with pytest.raises(UnauthorizedError, match="désactivé"):
        get_current_user(authorization=f"Bearer {token}", db=db)


def test_get_current_user_utilisateur_supprime():
    user = make_user()
    db = MagicMock()
    db.get.return_value = None
    token = create_access_token(user.id, user.email, user.role)
    with pytest.raises(UnauthorizedError):
        get_current_user(authorization=f"Bearer {token}", db=db)


# --- require_roles ---

def test_require_roles_autorise():
    current = CurrentUser(id=uuid.uuid4(), email="a@b.be", role=Role.ADMIN, school_id=SCHOOL_ID)
    dependency = require_roles(Role.ADMIN)
    assert dependency(current_user=current) is current


def test_require_roles_refuse():
    current = CurrentUser(id=uuid.uuid4(), email="a@b.be", role=Role.PARENT, school_id=SCHOOL_ID)
    dependency = require_roles(Role.ADMIN, Role.TEACHER)
    with pytest.raises(ForbiddenError):
        dependency(current_user=current)
