"""
Router pour les présences.
Les routes statiques (/bulk, /summary, /student/..., /class/...) sont déclarées avant /{record_id}.
"""

import uuid
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_roles
from app.exceptions import NotFoundError
from app.models.enums import Role
from app.schemas.attendance import (
    AttendanceBulkCreate,
    AttendanceCreate,
    AttendanceFilters,
    AttendanceResponse,
    AttendanceSummary,
    AttendanceSummaryQuery,
    AttendanceUpdate,
)
from app.schemas.auth import CurrentUser
from app.schemas.common import Page
from app.services import attendance_service, parent_service

router = APIRouter(prefix="/api/v1/attendance", tags=["Présences"])

staff = require_roles(Role.ADMIN, Role.TEACHER)


@router.post("", response_model=AttendanceResponse, status_code=201, summary="Enregistrer une présence")
def create_attendance(
    data: AttendanceCreate,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return attendance_service.create_attendance(db, current_user.school_id, data, current_user.id)


@router.post("/bulk", response_model=List[AttendanceResponse], status_code=201, summary="Enregistrer un lot de présences")
def create_bulk(
    data: AttendanceBulkCreate,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    """Tout-ou-rien : la première erreur annule l'ensemble du lot."""
    return attendance_service.create_bulk(db, current_user.school_id, data.records, current_user.id)


@router.get("/summary", response_model=AttendanceSummary, summary="Statistiques de présence")
def get_summary(
    query: Annotated[AttendanceSummaryQuery, Query()],
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return attendance_service.get_summary(
        db, current_user.school_id,
        student_id=query.student_id,
        class_id=query.class_id,
        start_date=query.start_date,
        end_date=query.end_date,
    )


@router.get("/student/{student_id}", response_model=Page[AttendanceResponse], summary="Présences d'un élève")
def get_student_attendance(
    student_id: uuid.UUID,
    filters: Annotated[AttendanceFilters, Query()],
    current_user: CurrentUser = Depends(require_roles(Role.ADMIN, Role.TEACHER, Role.PARENT)),
    db: Session = Depends(get_db),
):
    """Un parent ne voit que les présences de ses propres enfants."""
    if current_user.role == Role.PARENT and not parent_service.is_guardian(
        db, current_user.school_id, current_user.id, student_id,
    ):
        raise NotFoundError("Élève introuvable.")
    return attendance_service.get_student_attendance(db, current_user.school_id, student_id, filters)


@router.get("/class/{class_id}", response_model=Page[AttendanceResponse], summary="Présences d'une classe")
def get_class_attendance(
    class_id: uuid.UUID,
    filters: Annotated[AttendanceFilters, Query()],
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return attendance_service.get_class_attendance(db, current_user.school_id, class_id, filters)


@router.get("/{record_id}", response_model=AttendanceResponse, summary="Détail d'une présence")
def get_attendance(
    record_id: uuid.UUID,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return attendance_service.get_attendance(db, current_user.school_id, record_id)


@router.patch("/{record_id}", response_model=AttendanceResponse, summary="Modifier une présence")
def update_attendance(
    record_id: uuid.UUID,
    data: AttendanceUpdate,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    return attendance_service.update_attendance(db, current_user.school_id, record_id, data)


@router.delete("/{record_id}", status_code=204, summary="Supprimer une présence")
def delete_attendance(
    record_id: uuid.UUID,
    current_user: CurrentUser = Depends(staff),
    db: Session = Depends(get_db),
):
    attendance_service.delete_attendance(db, current_user.school_id, record_id)
