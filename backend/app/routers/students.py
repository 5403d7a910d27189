"""
Router pour les élèves.
Les routes statiques (/by-number/...) sont déclarées avant /{student_id}.
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
from app.schemas.parent import ParentResponse
from app.schemas.student import (
    StudentClassResponse,
    StudentCreate,
    StudentFilters,
    StudentResponse,
    StudentUpdate,
)
from app.services import student_service

router = APIRouter(prefix="/api/v1/students", tags=["Élèves"])

staff = require_roles(Role.ADMIN, Role.TEACHER)
readers = require_roles(Role.ADMIN, Role.TEACHER, Role.PARENT)


@router.post("", response_model=StudentResponse, status_code=201, summary="Créer un élève")
def create_student(
    data: StudentCreate,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return student_service.create_student(db, current_user.school_id, data)


@router.get("", response_model=Page[StudentResponse], summary="Lister les élèves")
def list_students(
    filters: Annotated[StudentFilters, Query()],
    current_user: CurrentUser = Depends(readers),
    db: Session = Depends(get_db),
):
    """Liste paginée, triée par nom puis prénom. Les élèves supprimés sont exclus."""
    return student_service.get_students(db, current_user.school_id, filters)


@router.get("/by-number/{student_number}", response_model=StudentResponse, summary="Rechercher par matricule")
def get_by_student_number(
    student_number: str,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return student_service.find_by_student_number(db, current_user.school_id, student_number)


@router.get("/{student_id}", response_model=StudentResponse, summary="Détail d'un élève")
def get_student(
    student_id: uuid.UUID,
    current_user: CurrentUser = Depends(readers),
    db: Session = Depends(get_db),
):
    return student_service.get_student(db, current_user.school_id, student_id)


@router.patch("/{student_id}", response_model=StudentResponse, summary="Modifier un élève")
def update_student(
    student_id: uuid.UUID,
    data: StudentUpdate,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    """Met à jour les champs fournis. Les champs absents ne sont pas modifiés."""
    return student_service.update_student(db, current_user.school_id, student_id, data)


@router.delete("/{student_id}", status_code=204, summary="Supprimer un élève")
def delete_student(
    student_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    student_service.delete_student(db, current_user.school_id, student_id)


@router.get("/{student_id}/classes", response_model=List[StudentClassResponse], summary="Classes d'un élève")
def get_student_classes(
    student_id: uuid.UUID,
    current_user: CurrentUser = Depends(readers),
    db: Session = Depends(get_db),
):
    return student_service.get_student_classes(db, current_user.school_id, student_id)


@router.get("/{student_id}/parents", response_model=List[ParentResponse], summary="Parents d'un élève")
def get_student_parents(
    student_id: uuid.UUID,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return student_service.get_student_parents(db, current_user.school_id, student_id)
