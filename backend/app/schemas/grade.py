"""
Schémas Pydantic pour les notes.
"""

import uuid
import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.enums import GradeType
from app.schemas.common import DateRangeQuery


class GradeCreate(BaseModel):
    student_id: uuid.UUID
    class_id: uuid.UUID
    type: GradeType
    value: float = Field(ge=0, le=100)
    max_value: Optional[float] = Field(default=None, gt=0, le=100)  # défaut : 100
    date: dt.date
    title: str
    remarks: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le titre ne peut pas être vide.")
        return v.strip()


class GradeUpdate(BaseModel):
    type: Optional[GradeType] = None
    value: Optional[float] = Field(default=None, ge=0, le=100)
    max_value: Optional[float] = Field(default=None, gt=0, le=100)
    date: Optional[dt.date] = None
    title: Optional[str] = None
    remarks: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le titre ne peut pas être vide.")
        return v.strip() if v else v


class GradeResponse(BaseModel):
    id: uuid.UUID
    school_id: uuid.UUID
    student_id: uuid.UUID
    class_id: uuid.UUID
    type: GradeType
    value: float
    max_value: float
    date: dt.date
    title: str
    remarks: Optional[str] = None
    recorded_by_id: Optional[uuid.UUID] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    model_config = {"from_attributes": True}


class GradeFilters(DateRangeQuery):
    type: Optional[GradeType] = None
    class_id: Optional[uuid.UUID] = None
    student_id: Optional[uuid.UUID] = None
