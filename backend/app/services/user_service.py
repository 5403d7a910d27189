"""
Service métier pour la gestion des comptes utilisateurs d'une école.
"""

import uuid
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError, ConflictError
from app.models.user import User
from app.schemas.common import Page
from app.schemas.user import UserCreate, UserFilters, UserResponse, UserUpdate
from app.security import hash_password
from app.services.pagination import get_owned, paginate, tenant_filter
from app.services.validators import validate_password

logger = logging.getLogger(__name__)

NOT_FOUND = "Utilisateur introuvable."


def _email_taken(db: Session, email: str, exclude_id: uuid.UUID = None) -> bool:
    stmt = select(User.id).where(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return db.execute(stmt).scalar() is not None


def create_user(db: Session, school_id: uuid.UUID, data: UserCreate) -> UserResponse:
    """
    Crée un utilisateur dans l'école de l'appelant.
    L'email est unique sur toute la plateforme (pas seulement dans l'école).
    """
    validate_password(data.password)
    if _email_taken(db, data.email):
        raise ConflictError("Cet email est déjà utilisé.")

    user = User(
        id=uuid.uuid4(),
        email=data.email,
        password_hash=hash_password(data.password),
        name=data.name,
        role=data.role.value,
        school_id=school_id,
        is_active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Cet email est déjà utilisé.")
    db.refresh(user)
    logger.info("Utilisateur créé : %s (%s)", user.email, user.role)
    return UserResponse.model_validate(user)


def get_users(db: Session, school_id: uuid.UUID, filters: UserFilters) -> Page[UserResponse]:
    criteria = tenant_filter(
        User, school_id,
        search=filters.search,
        search_fields=(User.name, User.email),
        equals=((User.role, filters.role.value if filters.role else None),),
    )
    return paginate(
        db, select(User), criteria, filters.page, filters.limit,
        UserResponse.model_validate, order_by=(User.created_at.desc(),),
    )


def get_user(db: Session, school_id: uuid.UUID, user_id: uuid.UUID) -> UserResponse:
    return UserResponse.model_validate(get_owned(db, User, user_id, school_id, NOT_FOUND))


def update_user(
    db: Session, school_id: uuid.UUID, user_id: uuid.UUID, data: UserUpdate,
) -> UserResponse:
    """Met à jour les champs fournis ; un nouveau mot de passe est re-hashé."""
    user = get_owned(db, User, user_id, school_id, NOT_FOUND)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("email") and update_data["email"] != user.email:
        if _email_taken(db, update_data["email"], exclude_id=user.id):
            raise ConflictError("Cet email est déjà utilisé.")

    password = update_data.pop("password", None)
    if password is not None:
        validate_password(password)
        user.password_hash = hash_password(password)

    if update_data.get("role") is not None:
        update_data["role"] = update_data["role"].value

    for field, value in update_data.items():
        if value is not None:
            setattr(user, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Cet email est déjà utilisé.")
    db.refresh(user)
    logger.info("Utilisateur mis à jour : %s", user.id)
    return UserResponse.model_validate(user)


def delete_user(
    db: Session, school_id: uuid.UUID, user_id: uuid.UUID, current_user_id: uuid.UUID,
) -> None:
    if user_id == current_user_id:
        raise BadRequestError("Impossible de supprimer votre propre compte.")
    user = get_owned(db, User, user_id, school_id, NOT_FOUND)
    db.delete(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Cet utilisateur est encore référencé et ne peut pas être supprimé.")
    logger.info("Utilisateur supprimé : %s", user_id)
