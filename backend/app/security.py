"""
Hachage des mots de passe (bcrypt) et émission / vérification des tokens JWT.

Deux types de tokens partagent le même secret : "access" (courte durée, envoyé
en Bearer sur chaque requête) et "refresh" (longue durée, échangé uniquement
sur /auth/refresh). Le claim "type" empêche d'utiliser l'un à la place de l'autre.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import jwt

from app.config import settings
from app.exceptions import UnauthorizedError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Hash corrompu ou non bcrypt en base
        return False


def _create_token(user_id: uuid.UUID, email: str, role: str, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "type": token_type,
        "jti": uuid.uuid4().hex,  # deux tokens émis la même seconde restent distincts
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(user_id: uuid.UUID, email: str, role: str) -> str:
    return _create_token(
        user_id, email, role, ACCESS_TOKEN_TYPE,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user_id: uuid.UUID, email: str, role: str) -> str:
    return _create_token(
        user_id, email, role, REFRESH_TOKEN_TYPE,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> Dict[str, Any]:
    """
    Vérifie la signature, l'expiration et le type du token.
    Lève UnauthorizedError au moindre problème.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise UnauthorizedError("Token expiré.") from exc
    except jwt.InvalidTokenError as exc:
        raise UnauthorizedError("Token invalide.") from exc

    if "sub" not in payload or "role" not in payload:
        raise UnauthorizedError("Token invalide.")
    if payload.get("type") != expected_type:
        raise UnauthorizedError("Type de token invalide.")
    return payload
