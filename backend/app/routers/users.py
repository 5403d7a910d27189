"""
Router pour la gestion des comptes utilisateurs (administrateurs uniquement).
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_roles
from app.models.enums import Role
from app.schemas.auth import CurrentUser
from app.schemas.common import Page
from app.schemas.user import UserCreate, UserFilters, UserResponse, UserUpdate
from app.services import user_service

router = APIRouter(prefix="/api/v1/users", tags=["Utilisateurs"])

admin_only = require_roles(Role.ADMIN)


@router.post("", response_model=UserResponse, status_code=201, summary="Créer un utilisateur")
def create_user(
    data: UserCreate,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return user_service.create_user(db, current_user.school_id, data)


@router.get("", response_model=Page[UserResponse], summary="Lister les utilisateurs")
def list_users(
    filters: Annotated[UserFilters, Query()],
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return user_service.get_users(db, current_user.school_id, filters)


@router.get("/{user_id}", response_model=UserResponse, summary="Détail d'un utilisateur")
def get_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return user_service.get_user(db, current_user.school_id, user_id)


@router.patch("/{user_id}", response_model=UserResponse, summary="Modifier un utilisateur")
def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return user_service.update_user(db, current_user.school_id, user_id, data)


@router.delete("/{user_id}", status_code=204, summary="Supprimer un utilisateur")
def delete_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """Suppression définitive. Un administrateur ne peut pas supprimer son propre compte."""
    user_service.delete_user(db, current_user.school_id, user_id, current_user.id)
