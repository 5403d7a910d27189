"""
Schémas Pydantic pour les enseignants.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from app.schemas.common import PageQuery


class TeacherCreate(BaseModel):
    """Crée le profil enseignant d'un utilisateur existant de rôle TEACHER."""
    user_id: uuid.UUID
    employee_id: Optional[str] = None
    date_of_joining: Optional[date] = None  # défaut : aujourd'hui


class TeacherResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    school_id: uuid.UUID
    name: str
    email: str
    employee_id: Optional[str] = None
    date_of_joining: date
    nb_classes: int
    created_at: Optional[datetime] = None


class TeacherFilters(PageQuery):
    search: Optional[str] = None  # nom, email ou matricule employé
