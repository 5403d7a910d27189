"""
Tests d'intégration API pour les classes scolaires.
Testent les URLs, les codes HTTP, les rôles et le format des réponses.
"""

import uuid
from datetime import datetime
from unittest.mock import patch

from app.exceptions import BadRequestError, ConflictError, NotFoundError
from app.models.enums import Role
from app.schemas.common import Page
from app.schemas.school_class import ClassResponse


# --- Helper ---

def make_class_response(**kwargs) -> ClassResponse:
    return ClassResponse(
        id=kwargs.get("id", uuid.uuid4()),
        school_id=uuid.uuid4(),
        name=kwargs.get("name", "Grade 1-A"),
        academic_year=kwargs.get("academic_year", "2024-2025"),
        nb_students=kwargs.get("nb_students", 0),
        created_at=datetime.now(),
        updated_at=datetime.now(),
    )


# ============================================================
# POST /api/v1/classes
# ============================================================

def test_create_class_succes(client, login_as):
    """Création d'une classe valide → 201."""
    login_as(Role.ADMIN)
    with patch("app.routers.classes.class_service.create_class") as mock:
        mock.return_value = make_class_response(name="Grade 1-A")
        response = client.post("/api/v1/classes", json={"name": "Grade 1-A", "academic_year": "2024-2025"})

    assert response.status_code == 201
    assert response.json()["name"] == "Grade 1-A"
    assert response.json()["nb_students"] == 0
    assert response.json()["teacher"] is None


def test_create_class_enseignant_interdit(client, login_as):
    """Seul un administrateur peut créer une classe → 403."""
    login_as(Role.TEACHER)
    response = client.post("/api/v1/classes", json={"name": "Grade 1-A", "academic_year": "2024-2025"})
    assert response.status_code == 403


def test_create_class_nom_vide(client, login_as):
    """Nom vide → 400."""
    login_as(Role.ADMIN)
    response = client.post("/api/v1/classes", json={"name": "   ", "academic_year": "2024-2025"})
    assert response.status_code == 400


def test_create_class_nom_duplique(client, login_as):
    """Même nom et même année dans l'école → 409 Conflict."""
    login_as(Role.ADMIN)
    with patch("app.routers.classes.class_service.create_class") as mock:
        mock.side_effect = ConflictError("La classe 'Grade 1-A' existe déjà pour l'année 2024-2025.")
        response = client.post("/api/v1/classes", json={"name": "Grade 1-A", "academic_year": "2024-2025"})

    assert response.status_code == 409
    assert "existe déjà" in response.json()["message"]


def test_create_class_annee_invalide(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.classes.class_service.create_class") as mock:
        mock.side_effect = BadRequestError("L'année scolaire doit être au format YYYY-YYYY.")
        response = client.post("/api/v1/classes", json={"name": "Grade 1-A", "academic_year": "2024"})
    assert response.status_code == 400


# ============================================================
# GET /api/v1/classes
# ============================================================

def test_list_classes_enseignant_autorise(client, login_as):
    login_as(Role.TEACHER)
    with patch("app.routers.classes.class_service.get_classes") as mock:
        mock.return_value = Page(
            items=[make_class_response(), make_class_response()], total=2, page=1, limit=10,
            total_pages=1, has_next=False, has_previous=False,
        )
        response = client.get("/api/v1/classes?academic_year=2024-2025")

    assert response.status_code == 200
    assert len(response.json()["items"]) == 2
    assert mock.call_args.args[2].academic_year == "2024-2025"


def test_list_classes_parent_interdit(client, login_as):
    login_as(Role.PARENT)
    response = client.get("/api/v1/classes")
    assert response.status_code == 403


# ============================================================
# GET / PATCH / DELETE /api/v1/classes/{class_id}
# ============================================================

def test_get_class_inexistante(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.classes.class_service.get_class") as mock:
        mock.side_effect = NotFoundError("Classe introuvable.")
        response = client.get(f"/api/v1/classes/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["message"] == "Classe introuvable."


def test_update_class_succes(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.classes.class_service.update_class") as mock:
        mock.return_value = make_class_response(name="Grade 1-B")
        response = client.patch(f"/api/v1/classes/{uuid.uuid4()}", json={"name": "Grade 1-B"})
    assert response.status_code == 200
    assert response.json()["name"] == "Grade 1-B"


def test_delete_class_succes(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.classes.class_service.delete_class"):
        response = client.delete(f"/api/v1/classes/{uuid.uuid4()}")
    assert response.status_code == 204


def test_delete_class_eleves_inscrits_409(client, login_as):
    """Suppression bloquée tant que des élèves sont inscrits → 409."""
    login_as(Role.ADMIN)
    with patch("app.routers.classes.class_service.delete_class") as mock:
        mock.side_effect = ConflictError("Impossible de supprimer cette classe : des élèves y sont encore inscrits.")
        response = client.delete(f"/api/v1/classes/{uuid.uuid4()}")
    assert response.status_code == 409


# ============================================================
# Inscriptions
# ============================================================

def test_enroll_students_succes(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.classes.class_service.enroll_students") as mock:
        mock.return_value = make_class_response(nb_students=2)
        response = client.post(
            f"/api/v1/classes/{uuid.uuid4()}/students",
            json={"student_ids": [str(uuid.uuid4()), str(uuid.uuid4())]},
        )
    assert response.status_code == 200
    assert response.json()["nb_students"] == 2


def test_enroll_students_liste_vide_400(client, login_as):
    login_as(Role.ADMIN)
    response = client.post(f"/api/v1/classes/{uuid.uuid4()}/students", json={"student_ids": []})
    assert response.status_code == 400


def test_unenroll_student_204(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.classes.class_service.unenroll_student"):
        response = client.delete(f"/api/v1/classes/{uuid.uuid4()}/students/{uuid.uuid4()}")
    assert response.status_code == 204
