"""
Requêtes scopées par école et pagination.

- tenant_filter : construit la liste de critères WHERE, toujours épinglée sur school_id
- compute_page  : arithmétique skip/take + métadonnées de page
- paginate      : exécute le COUNT puis la page, retourne l'enveloppe Page
- get_owned     : lecture par ID avec contrôle d'appartenance à l'école

Une ressource d'une autre école est traitée exactement comme une ressource
inexistante (404) : l'appelant ne peut pas distinguer les deux cas.
"""

import datetime as dt
import math
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError, NotFoundError
from app.schemas.common import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, Page
from app.services.validators import validate_date_range


@dataclass(frozen=True)
class PageInfo:
    skip: int
    take: int
    total_pages: int
    has_next: bool
    has_previous: bool


def validate_page_params(page: int, limit: int) -> None:
    if page < 1:
        raise BadRequestError("Le numéro de page doit être supérieur à 0.")
    if limit < 1 or limit > MAX_LIMIT:
        raise BadRequestError(f"La limite doit être comprise entre 1 et {MAX_LIMIT}.")


def compute_page(total: int, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> PageInfo:
    """
    Une page au-delà de total_pages n'est pas une erreur : elle est simplement vide.
    total = 0 → total_pages = 0, has_next = False.
    """
    validate_page_params(page, limit)
    total_pages = math.ceil(total / limit)
    return PageInfo(
        skip=(page - 1) * limit,
        take=limit,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
    )


def day_bounds(start_date: Optional[dt.date], end_date: Optional[dt.date]):
    """Convertit un intervalle de dates en bornes datetime inclusives (00:00 → 23:59:59.999999)."""
    validate_date_range(start_date, end_date)
    if start_date is None:
        return None, None
    return dt.datetime.combine(start_date, dt.time.min), dt.datetime.combine(end_date, dt.time.max)


def tenant_filter(
    model,
    school_id: uuid.UUID,
    *,
    search: Optional[str] = None,
    search_fields: Sequence[Any] = (),
    date_field=None,
    start_date=None,
    end_date=None,
    equals: Iterable[Tuple[Any, Any]] = (),
    extra: Iterable[Any] = (),
) -> list:
    """
    Critères WHERE d'une requête de liste.

    - school_id toujours imposé
    - search : sous-chaîne insensible à la casse, OU logique sur search_fields
    - start_date / end_date : intervalle inclusif sur date_field (les deux ou aucune)
    - equals : paires (colonne, valeur), ignorées quand la valeur vaut None
    """
    criteria = [model.school_id == school_id]

    if search and search.strip() and search_fields:
        term = search.strip()
        criteria.append(or_(*(field.icontains(term, autoescape=True) for field in search_fields)))

    validate_date_range(start_date, end_date)
    if date_field is not None and start_date is not None:
        criteria.append(date_field.between(start_date, end_date))

    for column, value in equals:
        if value is not None:
            criteria.append(column == value)

    criteria.extend(extra)
    return criteria


def paginate(
    db: Session,
    stmt,
    criteria: list,
    page: int,
    limit: int,
    mapper: Callable[[Any], Any],
    order_by: Sequence[Any] = (),
) -> Page:
    """Exécute COUNT + page sur `stmt` filtré par `criteria` et mappe chaque ligne."""
    validate_page_params(page, limit)
    filtered = stmt.where(*criteria)

    total = db.execute(
        select(func.count()).select_from(filtered.order_by(None).subquery())
    ).scalar() or 0
    info = compute_page(total, page, limit)

    rows = db.execute(
        filtered.order_by(*order_by).offset(info.skip).limit(info.take)
    ).scalars().all()

    return Page(
        items=[mapper(row) for row in rows],
        total=total,
        page=page,
        limit=limit,
        total_pages=info.total_pages,
        has_next=info.has_next,
        has_previous=info.has_previous,
    )


def get_owned(db: Session, model, entity_id: uuid.UUID, school_id: uuid.UUID, message: str):
    """
    Retourne l'entité si elle existe, appartient à l'école et n'est pas supprimée
    logiquement ; sinon NotFoundError.
    """
    entity = db.get(model, entity_id)
    if entity is None or entity.school_id != school_id or getattr(entity, "is_deleted", False):
        raise NotFoundError(message)
    return entity
