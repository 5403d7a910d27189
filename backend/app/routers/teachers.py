"""
Router pour les profils enseignants (administrateurs uniquement).
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
from app.schemas.teacher import TeacherCreate, TeacherFilters, TeacherResponse
from app.services import teacher_service

router = APIRouter(prefix="/api/v1/teachers", tags=["Enseignants"])

admin_only = require_roles(Role.ADMIN)


@router.post("", response_model=TeacherResponse, status_code=201, summary="Créer un enseignant")
def create_teacher(
    data: TeacherCreate,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """Crée le profil enseignant d'un utilisateur existant de rôle TEACHER."""
    return teacher_service.create_teacher(db, current_user.school_id, data)


@router.get("", response_model=Page[TeacherResponse], summary="Lister les enseignants")
def list_teachers(
    filters: Annotated[TeacherFilters, Query()],
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return teacher_service.get_teachers(db, current_user.school_id, filters)


@router.get("/{teacher_id}", response_model=TeacherResponse, summary="Détail d'un enseignant")
def get_teacher(
    teacher_id: uuid.UUID,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return teacher_service.get_teacher(db, current_user.school_id, teacher_id)
