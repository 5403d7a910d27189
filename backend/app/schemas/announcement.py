"""
Schémas Pydantic pour les annonces.

audience : {"roles": [...], "class_ids": [...]} ou null (= toute l'école).
"ALL" dans roles rend l'annonce visible par tous les rôles.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator

from app.models.enums import Role
from app.schemas.common import DateRangeQuery

AUDIENCE_ALL = "ALL"
AUDIENCE_ROLES = {AUDIENCE_ALL} | {role.value for role in Role}


def _to_naive_utc(v: Optional[datetime]) -> Optional[datetime]:
    # Les colonnes DateTime sont stockées en UTC sans fuseau
    if v is not None and v.tzinfo is not None:
        return v.astimezone(timezone.utc).replace(tzinfo=None)
    return v


class Audience(BaseModel):
    roles: List[str] = []
    class_ids: List[uuid.UUID] = []

    @field_validator("roles")
    @classmethod
    def valid_roles(cls, v: List[str]) -> List[str]:
        unknown = set(v) - AUDIENCE_ROLES
        if unknown:
            raise ValueError(f"Rôle(s) d'audience invalide(s) : {sorted(unknown)}")
        return v


class AnnouncementCreate(BaseModel):
    title: str
    content: str
    published_at: Optional[datetime] = None  # défaut : maintenant
    audience: Optional[Audience] = None

    @field_validator("title", "content")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()

    @field_validator("published_at")
    @classmethod
    def naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(v)


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    published_at: Optional[datetime] = None
    audience: Optional[Audience] = None

    @field_validator("title", "content")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip() if v else v

    @field_validator("published_at")
    @classmethod
    def naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(v)


class AnnouncementResponse(BaseModel):
    id: uuid.UUID
    school_id: uuid.UUID
    title: str
    content: str
    published_at: datetime
    audience: Optional[Dict[str, Any]] = None
    created_by_user_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AnnouncementFilters(DateRangeQuery):
    """start_date / end_date portent sur published_at."""
    search: Optional[str] = None  # titre ou contenu
    created_by_user_id: Optional[uuid.UUID] = None
