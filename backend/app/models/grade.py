"""
Modèle SQLAlchemy pour les notes.
"""

import uuid
from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Grade(Base):
    __tablename__ = "grades"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)

    type = Column(String(20), nullable=False)  # EXAM, QUIZ, HOMEWORK, PROJECT, PARTICIPATION, OTHER
    value = Column(Float, nullable=False)
    max_value = Column(Float, default=100, nullable=False)
    date = Column(Date, nullable=False)
    title = Column(String(255), nullable=False)
    remarks = Column(Text, nullable=True)

    recorded_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
