"""
Schémas Pydantic pour les classes scolaires.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from app.schemas.common import PageQuery


class ClassCreate(BaseModel):
    name: str
    academic_year: str  # YYYY-YYYY, vérifié par le service
    teacher_id: Optional[uuid.UUID] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom de la classe ne peut pas être vide.")
        return v.strip()


class ClassUpdate(BaseModel):
    name: Optional[str] = None
    academic_year: Optional[str] = None
    teacher_id: Optional[uuid.UUID] = None

    # Champs absents = inchangés ; null explicite refusé (colonnes NOT NULL)
    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("Le nom de la classe ne peut pas être vide.")
        return v.strip()

    @field_validator("academic_year")
    @classmethod
    def academic_year_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("L'année scolaire ne peut pas être vide.")
        return v


class TeacherSummary(BaseModel):
    id: uuid.UUID
    name: str
    email: str


class ClassResponse(BaseModel):
    id: uuid.UUID
    school_id: uuid.UUID
    name: str
    academic_year: str
    teacher: Optional[TeacherSummary] = None
    nb_students: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ClassFilters(PageQuery):
    search: Optional[str] = None
    teacher_id: Optional[uuid.UUID] = None
    academic_year: Optional[str] = None


class ClassStudentsAssign(BaseModel):
    """Corps de requête pour inscrire des élèves dans une classe."""
    student_ids: List[uuid.UUID]

    @field_validator("student_ids")
    @classmethod
    def not_empty(cls, v: List[uuid.UUID]) -> List[uuid.UUID]:
        if not v:
            raise ValueError("La liste d'élèves ne peut pas être vide.")
        return v
