"""
Router pour les notes.
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
from app.schemas.grade import GradeCreate, GradeFilters, GradeResponse, GradeUpdate
from app.services import grade_service

router = APIRouter(prefix="/api/v1/grades", tags=["Notes"])

staff = require_roles(Role.ADMIN, Role.TEACHER)


@router.post("", response_model=GradeResponse, status_code=201, summary="Saisir une note")
def create_grade(
    data: GradeCreate,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    """L'élève doit être inscrit dans la classe (409 sinon). Note maximale par défaut : 100."""
    return grade_service.create_grade(db, current_user.school_id, data, current_user.id)


@router.get("", response_model=Page[GradeResponse], summary="Lister les notes")
def list_grades(
    filters: Annotated[GradeFilters, Query()],
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return grade_service.get_grades(db, current_user.school_id, filters)


@router.get("/student/{student_id}", response_model=Page[GradeResponse], summary="Notes d'un élève")
def get_student_grades(
    student_id: uuid.UUID,
    filters: Annotated[GradeFilters, Query()],
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return grade_service.get_student_grades(db, current_user.school_id, student_id, filters)


@router.get("/class/{class_id}", response_model=Page[GradeResponse], summary="Notes d'une classe")
def get_class_grades(
    class_id: uuid.UUID,
    filters: Annotated[GradeFilters, Query()],
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return grade_service.get_class_grades(db, current_user.school_id, class_id, filters)


@router.get("/{grade_id}", response_model=GradeResponse, summary="Détail d'une note")
def get_grade(
    grade_id: uuid.UUID,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return grade_service.get_grade(db, current_user.school_id, grade_id)


@router.patch("/{grade_id}", response_model=GradeResponse, summary="Modifier une note")
def update_grade(
    grade_id: uuid.UUID,
    data: GradeUpdate,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return grade_service.update_grade(db, current_user.school_id, grade_id, data)


@router.delete("/{grade_id}", status_code=204, summary="Supprimer une note")
def delete_grade(
    grade_id: uuid.UUID,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    grade_service.delete_grade(db, current_user.school_id, grade_id)
