"""
Router pour les parents et leur rattachement aux élèves.
"""

import uuid
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_roles
from app.models.enums import Role
from app.schemas.auth import CurrentUser
from app.schemas.common import Page
from app.schemas.parent import (
    ParentCreate,
    ParentFilters,
    ParentResponse,
    ParentStudentLink,
    ParentUpdate,
)
from app.schemas.student import StudentResponse
from app.services import parent_service

router = APIRouter(prefix="/api/v1/parents", tags=["Parents"])

admin_only = require_roles(Role.ADMIN)
admin_or_parent = require_roles(Role.ADMIN, Role.PARENT)


@router.post("", response_model=ParentResponse, status_code=201, summary="Créer un parent")
def create_parent(
    data: ParentCreate,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return parent_service.create_parent(db, current_user.school_id, data)


@router.get("", response_model=Page[ParentResponse], summary="Lister les parents")
def list_parents(
    filters: Annotated[ParentFilters, Query()],
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return parent_service.get_parents(db, current_user.school_id, filters)


@router.get("/{parent_id}", response_model=ParentResponse, summary="Détail d'un parent")
def get_parent(
    parent_id: uuid.UUID,
    current_user: CurrentUser = Depends(admin_or_parent),
    db: Session = Depends(get_db),
):
    return parent_service.get_parent(db, current_user.school_id, parent_id)


@router.patch("/{parent_id}", response_model=ParentResponse, summary="Modifier un parent")
def update_parent(
    parent_id: uuid.UUID,
    data: ParentUpdate,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return parent_service.update_parent(db, current_user.school_id, parent_id, data)


@router.delete("/{parent_id}", status_code=204, summary="Supprimer un parent")
def delete_parent(
    parent_id: uuid.UUID,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    parent_service.delete_parent(db, current_user.school_id, parent_id)


# --- Rattachement des élèves ---

@router.get("/{parent_id}/students", response_model=List[StudentResponse], summary="Élèves d'un parent")
def get_parent_students(
    parent_id: uuid.UUID,
    current_user: CurrentUser = Depends(admin_or_parent),
    db: Session = Depends(get_db),
):
    return parent_service.get_parent_students(db, current_user.school_id, parent_id)


@router.post("/{parent_id}/students", status_code=204, summary="Rattacher un élève")
def link_student(
    parent_id: uuid.UUID,
    data: ParentStudentLink,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    parent_service.link_student(db, current_user.school_id, parent_id, data.student_id)


@router.delete("/{parent_id}/students/{student_id}", status_code=204, summary="Détacher un élève")
def unlink_student(
    parent_id: uuid.UUID,
    student_id: uuid.UUID,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    parent_service.unlink_student(db, current_user.school_id, parent_id, student_id)
