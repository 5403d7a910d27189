"""
Tests d'intégration API pour les utilisateurs (réservé aux administrateurs).
"""

import uuid
from datetime import datetime
from unittest.mock import patch

from app.exceptions import BadRequestError, ConflictError, NotFoundError
from app.models.enums import Role
from app.schemas.common import Page
from app.schemas.user import UserResponse

SCHOOL_ID = uuid.uuid4()


def make_user_response(**kwargs) -> UserResponse:
    return UserResponse(
        id=kwargs.get("id", uuid.uuid4()),
        email=kwargs.get("email", "prof@ecole.be"),
        name="Prof Dupont",
        role=kwargs.get("role", Role.TEACHER),
        school_id=SCHOOL_ID,
        is_active=True,
        created_at=datetime.now(),
    )


def make_page(items) -> Page:
    return Page(items=items, total=len(items), page=1, limit=10, total_pages=1 if items else 0,
                has_next=False, has_previous=False)


# ============================================================
# Rôles
# ============================================================

def test_users_enseignant_interdit_403(client, login_as):
    login_as(Role.TEACHER)
    response = client.get("/api/v1/users")
    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden"


def test_users_sans_token_401(client):
    response = client.get("/api/v1/users")
    assert response.status_code == 401


# ============================================================
# POST /api/v1/users
# ============================================================

def test_create_user_succes(client, login_as):
    admin = login_as(Role.ADMIN)
    with patch("app.routers.users.user_service.create_user") as mock:
        mock.return_value = make_user_response()
        response = client.post("/api/v1/users", json={
            "email": "prof@ecole.be", "password": "Passw0rd", "name": "Prof Dupont", "role": "TEACHER",
        })

    assert response.status_code == 201
    assert response.json()["role"] == "TEACHER"
    assert mock.call_args.args[1] == admin.school_id


def test_create_user_role_invalide_400(client, login_as):
    login_as(Role.ADMIN)
    response = client.post("/api/v1/users", json={
        "email": "prof@ecole.be", "password": "Passw0rd", "name": "P", "role": "DIRECTOR",
    })
    assert response.status_code == 400


def test_create_user_email_duplique_409(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.users.user_service.create_user") as mock:
        mock.side_effect = ConflictError("Cet email est déjà utilisé.")
        response = client.post("/api/v1/users", json={
            "email": "prof@ecole.be", "password": "Passw0rd", "name": "P", "role": "TEACHER",
        })
    assert response.status_code == 409


# ============================================================
# GET /api/v1/users
# ============================================================

def test_list_users_pagine(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.users.user_service.get_users") as mock:
        mock.return_value = make_page([make_user_response()])
        response = client.get("/api/v1/users?page=1&limit=10&search=dup&role=TEACHER")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert set(body) == {"items", "total", "page", "limit", "total_pages", "has_next", "has_previous"}
    filters = mock.call_args.args[2]
    assert filters.search == "dup"
    assert filters.role == Role.TEACHER


def test_list_users_limite_trop_grande_400(client, login_as):
    login_as(Role.ADMIN)
    response = client.get("/api/v1/users?limit=500")
    assert response.status_code == 400


def test_list_users_page_zero_400(client, login_as):
    login_as(Role.ADMIN)
    response = client.get("/api/v1/users?page=0")
    assert response.status_code == 400


# ============================================================
# GET / PATCH / DELETE /api/v1/users/{id}
# ============================================================

def test_get_user_autre_ecole_404(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.users.user_service.get_user") as mock:
        mock.side_effect = NotFoundError("Utilisateur introuvable.")
        response = client.get(f"/api/v1/users/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["message"] == "Utilisateur introuvable."


def test_get_user_id_invalide_400(client, login_as):
    login_as(Role.ADMIN)
    response = client.get("/api/v1/users/pas-un-uuid")
    assert response.status_code == 400


def test_update_user_succes(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.users.user_service.update_user") as mock:
        mock.return_value = make_user_response()
        response = client.patch(f"/api/v1/users/{uuid.uuid4()}", json={"is_active": False})
    assert response.status_code == 200


def test_delete_user_204(client, login_as):
    admin = login_as(Role.ADMIN)
    target = uuid.uuid4()
    with patch("app.routers.users.user_service.delete_user") as mock:
        response = client.delete(f"/api/v1/users/{target}")
    assert response.status_code == 204
    mock.assert_called_once()
    assert mock.call_args.args[2] == target
    assert mock.call_args.args[3] == admin.id


def test_delete_user_propre_compte_400(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.users.user_service.delete_user") as mock:
        mock.side_effect = BadRequestError("Impossible de supprimer votre propre compte.")
        response = client.delete(f"/api/v1/users/{uuid.uuid4()}")
    assert response.status_code == 400
