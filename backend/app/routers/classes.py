"""
Router pour la gestion des classes scolaires et des inscriptions.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_roles
from app.models.enums import Role
from app.schemas.auth import CurrentUser
from app.schemas.common import Page
from app.schemas.school_class import (
    ClassCreate,
    ClassFilters,
    ClassResponse,
    ClassStudentsAssign,
    ClassUpdate,
)
from app.services import class_service

router = APIRouter(prefix="/api/v1/classes", tags=["Classes"])

admin_only = require_roles(Role.ADMIN)
staff = require_roles(Role.ADMIN, Role.TEACHER)


@router.post("", response_model=ClassResponse, status_code=201, summary="Créer une classe")
def create_class(
    data: ClassCreate,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """Crée une classe ; le couple (nom, année scolaire) est unique dans l'école."""
    return class_service.create_class(db, current_user.school_id, data)


@router.get("", response_model=Page[ClassResponse], summary="Lister les classes")
def list_classes(
    filters: Annotated[ClassFilters, Query()],
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    """Retourne les classes avec leur enseignant et leur nombre d'élèves."""
    return class_service.get_classes(db, current_user.school_id, filters)


@router.get("/{class_id}", response_model=ClassResponse, summary="Détail d'une classe")
def get_class(
    class_id: uuid.UUID,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return class_service.get_class(db, current_user.school_id, class_id)


@router.patch("/{class_id}", response_model=ClassResponse, summary="Modifier une classe")
def update_class(
    class_id: uuid.UUID,
    data: ClassUpdate,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return class_service.update_class(db, current_user.school_id, class_id, data)


@router.delete("/{class_id}", status_code=204, summary="Supprimer une classe")
def delete_class(
    class_id: uuid.UUID,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """
    Supprime une classe définitivement.
    Bloqué (409) tant que des élèves y sont inscrits.
    """
    class_service.delete_class(db, current_user.school_id, class_id)


# --- Gestion des élèves ---

@router.post("/{class_id}/students", response_model=ClassResponse, summary="Inscrire des élèves")
def enroll_students(
    class_id: uuid.UUID,
    data: ClassStudentsAssign,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """Inscrit un ou plusieurs élèves dans une classe. Les doublons sont ignorés."""
    return class_service.enroll_students(db, current_user.school_id, class_id, data)


@router.delete("/{class_id}/students/{student_id}", status_code=204, summary="Désinscrire un élève")
def unenroll_student(
    class_id: uuid.UUID,
    student_id: uuid.UUID,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    class_service.unenroll_student(db, current_user.school_id, class_id, student_id)
