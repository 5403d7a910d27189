"""
Dépendances FastAPI d'authentification et d'autorisation.

get_current_user : Bearer token → utilisateur actif → CurrentUser
require_roles    : fabrique une dépendance qui refuse (403) les rôles non listés
"""

import logging
import uuid
from typing import Callable, Iterable, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import ForbiddenError, UnauthorizedError
from app.models.enums import Role
from app.models.user import User
from app.schemas.auth import CurrentUser
from app.security import ACCESS_TOKEN_TYPE, decode_token

logger = logging.getLogger(__name__)


def _parse_bearer(authorization: Optional[str]) -> str:
    if not authorization:
        raise UnauthorizedError("En-tête Authorization manquant.")
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise UnauthorizedError("Schéma d'authentification invalide.")
    return parts[1].strip()


def get_current_user(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db),
) -> CurrentUser:
    token = _parse_bearer(authorization)
    payload = decode_token(token, ACCESS_TOKEN_TYPE)

    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise UnauthorizedError("Token invalide.")

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("Utilisateur invalide ou désactivé.")

    return CurrentUser(id=user.id, email=user.email, role=user.role, school_id=user.school_id)


def check_role(role: Role, allowed: Iterable[Role]) -> bool:
    """Décision d'autorisation pure : le rôle vérifié fait-il partie des rôles de la route ?"""
    return Role(role) in set(allowed)


def require_roles(*roles: Role) -> Callable[..., CurrentUser]:
    def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not check_role(current_user.role, roles):
            logger.warning(
                "Accès refusé : %s (%s) sur une route réservée à %s",
                current_user.email, current_user.role.value, [r.value for r in roles],
            )
            raise ForbiddenError("Rôle insuffisant pour cette action.")
        return current_user

    return dependency
