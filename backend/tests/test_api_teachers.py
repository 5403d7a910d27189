"""
Tests d'intégration API pour les enseignants.
"""

import uuid
from datetime import date
from unittest.mock import patch

from app.exceptions import BadRequestError, ConflictError
from app.models.enums import Role
from app.schemas.common import Page
from app.schemas.teacher import TeacherResponse


def make_teacher_response() -> TeacherResponse:
    return TeacherResponse(
        id=uuid.uuid4(), user_id=uuid.uuid4(), school_id=uuid.uuid4(), name="Prof Dupont",
        email="prof@ecole.be", employee_id="EMP-01", date_of_joining=date(2020, 9, 1), nb_classes=2,
    )


def test_create_teacher_succes(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.teachers.teacher_service.create_teacher") as mock:
        mock.return_value = make_teacher_response()
        response = client.post("/api/v1/teachers", json={"user_id": str(uuid.uuid4()), "employee_id": "EMP-01"})
    assert response.status_code == 201
    assert response.json()["nb_classes"] == 2


def test_create_teacher_profil_existant_409(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.teachers.teacher_service.create_teacher") as mock:
        mock.side_effect = ConflictError("Cet utilisateur a déjà un profil enseignant.")
        response = client.post("/api/v1/teachers", json={"user_id": str(uuid.uuid4())})
    assert response.status_code == 409


def test_create_teacher_mauvais_role_400(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.teachers.teacher_service.create_teacher") as mock:
        mock.side_effect = BadRequestError("L'utilisateur doit avoir le rôle TEACHER.")
        response = client.post("/api/v1/teachers", json={"user_id": str(uuid.uuid4())})
    assert response.status_code == 400


def test_list_teachers(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.teachers.teacher_service.get_teachers") as mock:
        mock.return_value = Page(
            items=[make_teacher_response()], total=1, page=1, limit=10,
            total_pages=1, has_next=False, has_previous=False,
        )
        response = client.get("/api/v1/teachers?search=dupont")
    assert response.status_code == 200
    assert response.json()["items"][0]["email"] == "prof@ecole.be"


def test_teachers_enseignant_interdit(client, login_as):
    login_as(Role.TEACHER)
    response = client.get(f"/api/v1/teachers/{uuid.uuid4()}")
    assert response.status_code == 403
