"""
Schémas Pydantic pour les utilisateurs.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from app.models.enums import Role
from app.schemas.common import PageQuery


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    name: str
    role: Role

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom ne peut pas être vide.")
        return v.strip()


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le nom ne peut pas être vide.")
        return v.strip() if v else v


class UserResponse(BaseModel):
    """Utilisateur sans son hash de mot de passe."""
    id: uuid.UUID
    email: str
    name: str
    role: Role
    school_id: uuid.UUID
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserFilters(PageQuery):
    search: Optional[str] = None
    role: Optional[Role] = None
