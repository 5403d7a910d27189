"""
Schémas Pydantic pour l'authentification (inscription école, login, refresh).
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr

from app.models.enums import Role
from app.schemas.user import UserResponse


class SchoolInfo(BaseModel):
    name: str
    address: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None


class RegisterRequest(BaseModel):
    """Inscription d'une école et de son premier administrateur."""
    email: EmailStr
    password: str
    name: Optional[str] = None  # défaut : partie locale de l'email
    school: SchoolInfo


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class SchoolResponse(BaseModel):
    id: uuid.UUID
    name: str
    address: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    user: UserResponse
    school: SchoolResponse


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(TokenPair):
    user: UserResponse


class CurrentUser(BaseModel):
    """Identité de l'appelant, extraite du token et vérifiée en base."""
    id: uuid.UUID
    email: str
    role: Role
    school_id: uuid.UUID
