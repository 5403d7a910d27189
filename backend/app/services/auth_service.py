"""
Service d'authentification : inscription école + administrateur, login, refresh.

Le login renvoie le même message pour un email inconnu, un compte désactivé
ou un mauvais mot de passe ; la raison exacte n'apparaît que dans les logs.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import AppError, ConflictError, UnauthorizedError
from app.models.enums import Role
from app.models.school import School
from app.models.user import User
from app.schemas.auth import (
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    SchoolResponse,
    TokenPair,
)
from app.schemas.user import UserResponse
from app.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from app.services.validators import validate_password, validate_school_info

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Email ou mot de passe incorrect."


def _issue_tokens(user: User) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(user.id, user.email, user.role),
        refresh_token=create_refresh_token(user.id, user.email, user.role),
    )


def register(db: Session, data: RegisterRequest) -> RegisterResponse:
    """
    Crée une école et son premier administrateur dans une seule transaction.

    Étapes :
    1. Valider le mot de passe et les informations de l'école
    2. Refuser un email déjà utilisé ou un nom d'école existant (insensible à la casse)
    3. Insérer école + utilisateur ADMIN, un seul commit
    """
    validate_password(data.password)
    validate_school_info(
        data.school.name, data.school.address, data.school.contact_email, data.school.contact_phone,
    )

    existing_user = db.execute(
        select(User).where(func.lower(User.email) == data.email.lower())
    ).scalar()
    if existing_user:
        raise ConflictError("Cet email est déjà utilisé.")

    school_name = data.school.name.strip()
    existing_school = db.execute(
        select(School).where(func.lower(School.name) == school_name.lower())
    ).scalar()
    if existing_school:
        raise ConflictError("Une école avec ce nom existe déjà.")

    # IDs générés côté Python : l'utilisateur référence l'école sans flush intermédiaire
    school = School(
        id=uuid.uuid4(),
        name=school_name,
        address=data.school.address,
        contact_email=data.school.contact_email,
        contact_phone=data.school.contact_phone,
    )
    user = User(
        id=uuid.uuid4(),
        email=data.email,
        password_hash=hash_password(data.password),
        name=(data.name or "").strip() or data.email.split("@")[0],
        role=Role.ADMIN.value,
        school_id=school.id,
        is_active=True,
    )
    db.add(school)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Cet email ou ce nom d'école est déjà utilisé.")

    db.refresh(school)
    db.refresh(user)
    logger.info("École inscrite : %s (%s), administrateur %s", school.name, school.id, user.email)

    return RegisterResponse(
        user=UserResponse.model_validate(user),
        school=SchoolResponse.model_validate(school),
    )


def login(db: Session, email: str, password: str) -> LoginResponse:
    user = db.execute(select(User).where(func.lower(User.email) == email.lower())).scalar()

    if user is None:
        logger.warning("Login refusé : email inconnu (%s)", email)
        raise UnauthorizedError(INVALID_CREDENTIALS)
    if not user.is_active:
        logger.warning("Login refusé : compte désactivé (%s)", email)
        raise UnauthorizedError(INVALID_CREDENTIALS)
    if not verify_password(password, user.password_hash):
        logger.warning("Login refusé : mot de passe incorrect (%s)", email)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    tokens = _issue_tokens(user)
    user.last_login = datetime.now(timezone.utc).replace(tzinfo=None)
    db.commit()

    logger.info("Login réussi : %s (%s)", user.email, user.role)
    return LoginResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user=UserResponse.model_validate(user),
    )


def refresh_token(db: Session, token: str) -> TokenPair:
    """
    Échange un refresh token valide contre une nouvelle paire (rotation).
    L'utilisateur doit toujours exister et être actif.
    """
    try:
        payload = decode_token(token, REFRESH_TOKEN_TYPE)
        user_id = uuid.UUID(payload["sub"])
    except (AppError, ValueError):
        logger.warning("Refresh refusé : token invalide")
        raise UnauthorizedError("Refresh token invalide.")

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        logger.warning("Refresh refusé : utilisateur %s absent ou désactivé", user_id)
        raise UnauthorizedError("Utilisateur invalide ou désactivé.")

    return _issue_tokens(user)


def get_profile(db: Session, user_id: uuid.UUID) -> UserResponse:
    user = db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("Utilisateur invalide ou désactivé.")
    return UserResponse.model_validate(user)
