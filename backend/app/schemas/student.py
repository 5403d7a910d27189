"""
Schémas Pydantic pour les élèves.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from app.models.enums import EnrollmentStatus
from app.schemas.common import PageQuery


class StudentCreate(BaseModel):
    """Schéma de création d'un élève (POST /students)."""
    student_number: str
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    enrollment_status: EnrollmentStatus = EnrollmentStatus.ACTIVE
    user_id: Optional[uuid.UUID] = None

    @field_validator("student_number", "first_name", "last_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()


class StudentUpdate(BaseModel):
    """Schéma de mise à jour partielle (PATCH /students/{id})."""
    student_number: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    enrollment_status: Optional[EnrollmentStatus] = None
    user_id: Optional[uuid.UUID] = None

    # null explicite refusé sur les colonnes obligatoires
    @field_validator("student_number", "first_name", "last_name")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()

    @field_validator("enrollment_status")
    @classmethod
    def status_not_null(cls, v: Optional[EnrollmentStatus]) -> EnrollmentStatus:
        if v is None:
            raise ValueError("Le statut d'inscription ne peut pas être vide.")
        return v


class StudentResponse(BaseModel):
    id: uuid.UUID
    school_id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    student_number: str
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    enrollment_status: EnrollmentStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StudentFilters(PageQuery):
    search: Optional[str] = None  # prénom, nom ou matricule
    class_id: Optional[uuid.UUID] = None
    enrollment_status: Optional[EnrollmentStatus] = None


class StudentClassResponse(BaseModel):
    """Classe suivie par un élève."""
    class_id: uuid.UUID
    name: str
    academic_year: str
    enrolled_at: Optional[datetime] = None
