"""
Modèle SQLAlchemy pour les présences.

Unicité : au plus un enregistrement par (élève, date, session, école).
Deux sessions différentes le même jour (ex. "AM" et "PM") coexistent.
"""

import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("student_id", "date", "session_id", "school_id", name="uq_attendance_student_date_session"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)

    date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False)       # PRESENT, ABSENT, LATE, EXCUSED
    session_id = Column(String(50), nullable=False)   # Ex: "AM", "Période 1"
    remarks = Column(Text, nullable=True)

    recorded_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
