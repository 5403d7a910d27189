"""
Schémas Pydantic pour les présences.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre le champ `date` et le type `datetime.date` dans Pydantic v2.
"""

import uuid
import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, field_validator

from app.models.enums import AttendanceStatus
from app.schemas.common import DateRangeQuery


class AttendanceCreate(BaseModel):
    student_id: uuid.UUID
    class_id: Optional[uuid.UUID] = None
    date: dt.date
    status: AttendanceStatus
    session_id: Optional[str] = None  # obligatoire, vérifié par le service (400 explicite)
    remarks: Optional[str] = None


class AttendanceBulkCreate(BaseModel):
    records: List[AttendanceCreate]

    @field_validator("records")
    @classmethod
    def at_least_one_record(cls, v: List[AttendanceCreate]) -> List[AttendanceCreate]:
        if not v:
            raise ValueError("Au moins un enregistrement de présence est requis.")
        return v


class AttendanceUpdate(BaseModel):
    class_id: Optional[uuid.UUID] = None
    date: Optional[dt.date] = None
    status: Optional[AttendanceStatus] = None
    session_id: Optional[str] = None
    remarks: Optional[str] = None


class AttendanceResponse(BaseModel):
    id: uuid.UUID
    school_id: uuid.UUID
    student_id: uuid.UUID
    class_id: Optional[uuid.UUID] = None
    date: dt.date
    status: AttendanceStatus
    session_id: str
    remarks: Optional[str] = None
    recorded_by_id: Optional[uuid.UUID] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    model_config = {"from_attributes": True}


class AttendanceFilters(DateRangeQuery):
    class_id: Optional[uuid.UUID] = None
    student_id: Optional[uuid.UUID] = None
    status: Optional[AttendanceStatus] = None


class AttendanceSummary(BaseModel):
    total_records: int
    present: int
    absent: int
    late: int
    excused: int
    attendance_rate: float  # (présents + retards) / total, en %


class AttendanceSummaryQuery(BaseModel):
    student_id: Optional[uuid.UUID] = None
    class_id: Optional[uuid.UUID] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
