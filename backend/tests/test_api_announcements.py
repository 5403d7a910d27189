"""
Tests d'intégration API pour les annonces.
"""

import uuid
from datetime import datetime
from unittest.mock import patch

from app.exceptions import NotFoundError
from app.models.enums import Role
from app.schemas.announcement import AnnouncementResponse
from app.schemas.common import Page


def make_announcement_response(**kwargs) -> AnnouncementResponse:
    return AnnouncementResponse(
        id=uuid.uuid4(), school_id=uuid.uuid4(), title=kwargs.get("title", "Sortie scolaire"),
        content="Vendredi au musée.", published_at=datetime(2024, 9, 1, 8, 0),
        audience=kwargs.get("audience"),
    )


def test_create_announcement_succes(client, login_as):
    teacher = login_as(Role.TEACHER)
    with patch("app.routers.announcements.announcement_service.create_announcement") as mock:
        mock.return_value = make_announcement_response(audience={"roles": ["PARENT"], "class_ids": []})
        response = client.post("/api/v1/announcements", json={
            "title": "Sortie scolaire", "content": "Vendredi au musée.", "audience": {"roles": ["PARENT"]},
        })
    assert response.status_code == 201
    assert response.json()["audience"]["roles"] == ["PARENT"]
    assert mock.call_args.args[3] == teacher.id


def test_create_announcement_audience_invalide_400(client, login_as):
    login_as(Role.ADMIN)
    response = client.post("/api/v1/announcements", json={
        "title": "T", "content": "C", "audience": {"roles": ["DIRECTOR"]},
    })
    assert response.status_code == 400


def test_create_announcement_parent_interdit(client, login_as):
    login_as(Role.PARENT)
    response = client.post("/api/v1/announcements", json={"title": "T", "content": "C"})
    assert response.status_code == 403


def test_list_announcements(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.announcements.announcement_service.get_announcements") as mock:
        mock.return_value = Page(
            items=[make_announcement_response()], total=1, page=1, limit=10,
            total_pages=1, has_next=False, has_previous=False,
        )
        response = client.get("/api/v1/announcements?search=mus")
    assert response.status_code == 200
    assert response.json()["total"] == 1


def test_my_announcements_accessible_a_tous(client, login_as):
    parent = login_as(Role.PARENT)
    with patch("app.routers.announcements.announcement_service.get_for_user") as mock:
        mock.return_value = [make_announcement_response()]
        response = client.get("/api/v1/announcements/me")
    assert response.status_code == 200
    assert len(response.json()) == 1
    assert mock.call_args.args[1] == parent


def test_get_announcement_autre_ecole_404(client, login_as):
    login_as(Role.STUDENT)
    with patch("app.routers.announcements.announcement_service.get_announcement") as mock:
        mock.side_effect = NotFoundError("Annonce introuvable.")
        response = client.get(f"/api/v1/announcements/{uuid.uuid4()}")
    assert response.status_code == 404


def test_update_announcement(client, login_as):
    login_as(Role.ADMIN)
    with patch("app.routers.announcements.announcement_service.update_announcement") as mock:
        mock.return_value = make_announcement_response(title="Nouveau titre")
        response = client.patch(f"/api/v1/announcements/{uuid.uuid4()}", json={"title": "Nouveau titre"})
    assert response.status_code == 200
    assert response.json()["title"] == "Nouveau titre"


def test_delete_announcement_etudiant_interdit(client, login_as):
    login_as(Role.STUDENT)
    response = client.delete(f"/api/v1/announcements/{uuid.uuid4()}")
    assert response.status_code == 403
