"""
Router pour les annonces.
/me est déclaré avant /{announcement_id}.
"""

import uuid
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, require_roles
from app.models.enums import Role
from app.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementFilters,
    AnnouncementResponse,
    AnnouncementUpdate,
)
from app.schemas.auth import CurrentUser
from app.schemas.common import Page
from app.services import announcement_service

router = APIRouter(prefix="/api/v1/announcements", tags=["Annonces"])

staff = require_roles(Role.ADMIN, Role.TEACHER)


@router.post("", response_model=AnnouncementResponse, status_code=201, summary="Publier une annonce")
def create_announcement(
    data: AnnouncementCreate,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return announcement_service.create_announcement(db, current_user.school_id, data, current_user.id)


@router.get("", response_model=Page[AnnouncementResponse], summary="Lister les annonces")
def list_announcements(
    filters: Annotated[AnnouncementFilters, Query()],
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return announcement_service.get_announcements(db, current_user.school_id, filters)


@router.get("/me", response_model=List[AnnouncementResponse], summary="Mes annonces")
def my_announcements(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Annonces publiées qui ciblent le rôle ou les classes de l'appelant."""
    return announcement_service.get_for_user(db, current_user)


@router.get("/{announcement_id}", response_model=AnnouncementResponse, summary="Détail d'une annonce")
def get_announcement(
    announcement_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return announcement_service.get_announcement(db, current_user.school_id, announcement_id)


@router.patch("/{announcement_id}", response_model=AnnouncementResponse, summary="Modifier une annonce")
def update_announcement(
    announcement_id: uuid.UUID,
    data: AnnouncementUpdate,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return announcement_service.update_announcement(db, current_user.school_id, announcement_id, data)


@router.delete("/{announcement_id}", status_code=204, summary="Supprimer une annonce")
def delete_announcement(
    announcement_id: uuid.UUID,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    announcement_service.delete_announcement(db, current_user.school_id, announcement_id)
