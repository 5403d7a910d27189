"""
Schémas Pydantic pour les parents.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from app.models.enums import ParentRelation
from app.schemas.common import PageQuery


class ParentCreate(BaseModel):
    first_name: str
    last_name: str
    relation_to_student: ParentRelation
    contact_phone: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    user_id: Optional[uuid.UUID] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()


class ParentUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    relation_to_student: Optional[ParentRelation] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    user_id: Optional[uuid.UUID] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()

    @field_validator("relation_to_student")
    @classmethod
    def relation_not_null(cls, v: Optional[ParentRelation]) -> ParentRelation:
        if v is None:
            raise ValueError("Le lien de parenté ne peut pas être vide.")
        return v


class ParentResponse(BaseModel):
    id: uuid.UUID
    school_id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    first_name: str
    last_name: str
    relation_to_student: ParentRelation
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ParentFilters(PageQuery):
    search: Optional[str] = None  # prénom, nom ou email de contact


class ParentStudentLink(BaseModel):
    """Corps de requête pour rattacher un élève à un parent."""
    student_id: uuid.UUID
