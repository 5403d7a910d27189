"""
Schémas Pydantic partagés : enveloppe paginée, paramètres de pagination,
corps d'erreur.
"""

import datetime as dt
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class PageQuery(BaseModel):
    """Paramètres de pagination communs à toutes les routes de liste."""
    page: int = Field(default=DEFAULT_PAGE, ge=1)
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)


class DateRangeQuery(PageQuery):
    """Pagination + intervalle de dates inclusif (les deux bornes ou aucune)."""
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None


class Page(BaseModel, Generic[T]):
    """
    Enveloppe retournée par toutes les routes de liste paginées :
    {items, total, page, limit, total_pages, has_next, has_previous}
    """
    items: List[T]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_previous: bool


class ErrorResponse(BaseModel):
    status_code: int
    message: str
    error: str
