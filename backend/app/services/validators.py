"""
Règles de validation métier partagées par les services.

Fonctions pures : aucune ne touche à la base. Chacune lève BadRequestError
(→ HTTP 400) dès la première règle violée. Les fonctions dépendant de la date
du jour acceptent un paramètre `today` pour rester testables.
"""

import datetime as dt
import re
from enum import Enum
from typing import Optional, Type

from app.exceptions import BadRequestError

ACADEMIC_YEAR_PATTERN = re.compile(r"^(\d{4})-(\d{4})$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s-]{8,}$")

PASSWORD_MIN_LENGTH = 6
CLASS_NAME_MAX_LENGTH = 100
GRADE_MAX = 100


def validate_academic_year(academic_year: str, today: Optional[dt.date] = None) -> str:
    """
    Format YYYY-YYYY, fin = début + 1, début dans [année courante - 1, année courante + 1].
    """
    match = ACADEMIC_YEAR_PATTERN.match(academic_year or "")
    if not match:
        raise BadRequestError("L'année scolaire doit être au format YYYY-YYYY.")

    start_year, end_year = int(match.group(1)), int(match.group(2))
    if end_year != start_year + 1:
        raise BadRequestError("L'année de fin doit suivre immédiatement l'année de début.")

    current_year = (today or dt.date.today()).year
    if start_year < current_year - 1 or start_year > current_year + 1:
        raise BadRequestError(
            f"L'année scolaire doit commencer entre {current_year - 1} et {current_year + 1}."
        )
    return academic_year


def validate_password(password: str) -> str:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise BadRequestError(
            f"Le mot de passe doit contenir au moins {PASSWORD_MIN_LENGTH} caractères."
        )
    if not re.search(r"[A-Z]", password):
        raise BadRequestError("Le mot de passe doit contenir au moins une majuscule.")
    if not re.search(r"[a-z]", password):
        raise BadRequestError("Le mot de passe doit contenir au moins une minuscule.")
    if not re.search(r"[0-9]", password):
        raise BadRequestError("Le mot de passe doit contenir au moins un chiffre.")
    return password


def validate_email(email: str) -> str:
    if not EMAIL_PATTERN.match(email or ""):
        raise BadRequestError("Format d'email invalide.")
    return email


def validate_attendance_date(value, today: Optional[dt.date] = None) -> dt.date:
    """Accepte une date, un datetime ou une chaîne ISO. Refuse les dates futures."""
    if isinstance(value, str):
        try:
            value = dt.date.fromisoformat(value)
        except ValueError:
            raise BadRequestError("Format de date invalide.")
    elif isinstance(value, dt.datetime):
        value = value.date()
    elif not isinstance(value, dt.date):
        raise BadRequestError("Format de date invalide.")

    if value > (today or dt.date.today()):
        raise BadRequestError("La date de présence ne peut pas être dans le futur.")
    return value


def validate_session_id(session_id: Optional[str]) -> str:
    if session_id is None:
        raise BadRequestError("L'identifiant de session est obligatoire.")
    if not session_id.strip():
        raise BadRequestError("L'identifiant de session ne peut pas être vide.")
    return session_id.strip()


def validate_enum(value, enum_cls: Type[Enum], label: str) -> str:
    """Retourne la valeur brute (str) si elle appartient à l'énumération."""
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise BadRequestError(f"{label} invalide. Valeurs acceptées : {allowed}")


def validate_date_range(start_date: Optional[dt.date], end_date: Optional[dt.date]) -> None:
    """Les deux bornes ou aucune ; début ≤ fin."""
    if (start_date is None) != (end_date is None):
        raise BadRequestError("start_date et end_date doivent être fournies ensemble.")
    if start_date is not None and start_date > end_date:
        raise BadRequestError("La date de début ne peut pas être après la date de fin.")


def validate_class_name(name: str) -> str:
    if not name or not name.strip():
        raise BadRequestError("Le nom de la classe est obligatoire.")
    if len(name.strip()) > CLASS_NAME_MAX_LENGTH:
        raise BadRequestError(
            f"Le nom de la classe ne peut pas dépasser {CLASS_NAME_MAX_LENGTH} caractères."
        )
    return name.strip()


def validate_school_info(
    name: str,
    address: Optional[str] = None,
    contact_email: Optional[str] = None,
    contact_phone: Optional[str] = None,
) -> None:
    if not name or len(name.strip()) < 2:
        raise BadRequestError("Le nom de l'école doit contenir au moins 2 caractères.")
    if address is not None and len(address.strip()) < 5:
        raise BadRequestError("L'adresse de l'école doit contenir au moins 5 caractères.")
    if contact_email:
        validate_email(contact_email)
    if contact_phone and not PHONE_PATTERN.match(contact_phone):
        raise BadRequestError("Format de numéro de téléphone invalide.")


def validate_grade_value(value: float, max_value: float) -> None:
    if max_value <= 0 or max_value > GRADE_MAX:
        raise BadRequestError(f"La note maximale doit être comprise entre 0 (exclu) et {GRADE_MAX}.")
    if value < 0 or value > max_value:
        raise BadRequestError("La note doit être comprise entre 0 et la note maximale.")
