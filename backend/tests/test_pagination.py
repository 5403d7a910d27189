"""
Tests unitaires du calcul de pagination et des critères scopés par école.
"""

import uuid
from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from app.exceptions import BadRequestError, NotFoundError
from app.models.attendance import AttendanceRecord
from app.models.student import Student
from app.services.pagination import compute_page, day_bounds, get_owned, paginate, tenant_filter

SCHOOL_ID = uuid.uuid4()


# --- compute_page ---

def test_compute_page_premiere_page():
    info = compute_page(total=25, page=1, limit=10)
    assert info.skip == 0
    assert info.take == 10
    assert info.total_pages == 3
    assert info.has_next is True
    assert info.has_previous is False


def test_compute_page_derniere_page():
    info = compute_page(total=25, page=3, limit=10)
    assert info.skip == 20
    assert info.has_next is False
    assert info.has_previous is True


def test_compute_page_au_dela_du_total_non_rejetee():
    info = compute_page(total=5, page=4, limit=10)
    assert info.skip == 30
    assert info.total_pages == 1
    assert info.has_next is False
    assert info.has_previous is True


def test_compute_page_aucun_resultat():
    info = compute_page(total=0, page=1, limit=10)
    assert info.total_pages == 0
    assert info.has_next is False


@pytest.mark.parametrize("page, limit", [(0, 10), (1, 0), (1, 101)])
def test_compute_page_parametres_invalides(page, limit):
    with pytest.raises(BadRequestError):
        compute_page(total=10, page=page, limit=limit)


# --- tenant_filter ---

def test_tenant_filter_impose_toujours_l_ecole():
    criteria = tenant_filter(Student, SCHOOL_ID)
    assert len(criteria) == 1
    assert "school_id" in str(criteria[0])


def test_tenant_filter_recherche_sur_plusieurs_champs():
    criteria = tenant_filter(
        Student, SCHOOL_ID,
        search="dup",
        search_fields=(Student.first_name, Student.last_name),
    )
    assert len(criteria) == 2
    sql = str(criteria[1]).lower()
    assert "first_name" in sql and "last_name" in sql
    assert " or " in sql


def test_tenant_filter_recherche_vide_ignoree():
    criteria = tenant_filter(Student, SCHOOL_ID, search="   ", search_fields=(Student.first_name,))
    assert len(criteria) == 1


def test_tenant_filter_egalites_none_ignorees():
    criteria = tenant_filter(
        Student, SCHOOL_ID,
        equals=((Student.enrollment_status, None), (Student.gender, "F")),
    )
    assert len(criteria) == 2


def test_tenant_filter_intervalle_de_dates():
    criteria = tenant_filter(
        AttendanceRecord, SCHOOL_ID,
        date_field=AttendanceRecord.date,
        start_date=date(2024, 9, 1),
        end_date=date(2024, 9, 30),
    )
    assert len(criteria) == 2
    assert "BETWEEN" in str(criteria[1])


def test_tenant_filter_borne_seule_rejetee():
    with pytest.raises(BadRequestError):
        tenant_filter(
            AttendanceRecord, SCHOOL_ID,
            date_field=AttendanceRecord.date,
            start_date=date(2024, 9, 1),
        )


def test_day_bounds_inclusif():
    start, end = day_bounds(date(2024, 9, 1), date(2024, 9, 2))
    assert start.hour == 0 and start.minute == 0
    assert end.date() == date(2024, 9, 2)
    assert end.hour == 23 and end.minute == 59


def test_day_bounds_sans_bornes():
    assert day_bounds(None, None) == (None, None)


# --- paginate ---

def test_paginate_enveloppe():
    db = MagicMock()
    db.execute.return_value.scalar.return_value = 12
    db.execute.return_value.scalars.return_value.all.return_value = ["a", "b"]

    page = paginate(
        db, select(Student), tenant_filter(Student, SCHOOL_ID), page=2, limit=10,
        mapper=str.upper,
    )

    assert page.items == ["A", "B"]
    assert page.total == 12
    assert page.page == 2
    assert page.limit == 10
    assert page.total_pages == 2
    assert page.has_next is False
    assert page.has_previous is True
    assert db.execute.call_count == 2  # COUNT puis page


def test_paginate_total_none_vaut_zero():
    db = MagicMock()
    db.execute.return_value.scalar.return_value = None
    db.execute.return_value.scalars.return_value.all.return_value = []

    page = paginate(db, select(Student), [], page=1, limit=10, mapper=lambda x: x)
    assert page.total == 0
    assert page.total_pages == 0
    assert page.items == []


# --- get_owned ---

def test_get_owned_meme_ecole():
    entity = MagicMock(school_id=SCHOOL_ID, is_deleted=False)
    db = MagicMock()
    db.get.return_value = entity
    assert get_owned(db, Student, uuid.uuid4(), SCHOOL_ID, "introuvable") is entity


def test_get_owned_autre_ecole_404():
    db = MagicMock()
    db.get.return_value = MagicMock(school_id=uuid.uuid4(), is_deleted=False)
    with pytest.raises(NotFoundError, match="introuvable"):
        get_owned(db, Student, uuid.uuid4(), SCHOOL_ID, "introuvable")


def test_get_owned_inexistant_404():
    db = MagicMock()
    db.get.return_value = None
    with pytest.raises(NotFoundError):
        get_owned(db, Student, uuid.uuid4(), SCHOOL_ID, "introuvable")


def test_get_owned_supprime_logiquement_404():
    db = MagicMock()
    db.get.return_value = MagicMock(school_id=SCHOOL_ID, is_deleted=True)
    with pytest.raises(NotFoundError):
        get_owned(db, Student, uuid.uuid4(), SCHOOL_ID, "introuvable")
