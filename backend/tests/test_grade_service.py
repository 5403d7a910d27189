"""
Tests unitaires pour le service des notes.
"""

import uuid
from datetime import date
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from app.exceptions import BadRequestError, ConflictError, NotFoundError
from app.models.enums import GradeType
from app.models.grade import Grade
from app.models.school_class import SchoolClass, StudentClass
from app.models.student import Student
from app.schemas.grade import GradeCreate, GradeFilters, GradeUpdate
from app.services.grade_service import (
    create_grade,
    delete_grade,
    get_class_grades,
    get_grade,
    get_student_grades,
    update_grade,
)

SCHOOL_ID = uuid.uuid4()


# --- Helpers ---

def make_refs(enrolled=True, school_id=SCHOOL_ID):
    student = Student(
        id=uuid.uuid4(), school_id=school_id, student_number="S-001",
        first_name="Alice", last_name="Dupont", enrollment_status="ACTIVE", is_deleted=False,
    )
    school_class = SchoolClass(id=uuid.uuid4(), school_id=school_id, name="Grade 1-A", academic_year="2024-2025")
    get_map = {Student: student, SchoolClass: school_class}
    if enrolled:
        get_map[StudentClass] = StudentClass(student_id=student.id, class_id=school_class.id, school_id=school_id)
    return student, school_class, get_map


def make_grade(**kwargs) -> Grade:
    return Grade(
        id=uuid.uuid4(), school_id=kwargs.get("school_id", SCHOOL_ID),
        student_id=uuid.uuid4(), class_id=uuid.uuid4(), type="EXAM",
        value=kwargs.get("value", 14.0), max_value=kwargs.get("max_value", 20.0),
        date=date(2024, 10, 1), title="Contrôle fractions",
    )


def make_db_mock(get_map=None):
    get_map = get_map or {}
    db = MagicMock()
    db.get.side_effect = lambda model, _id: get_map.get(model)
    db.execute.return_value.scalar.return_value = 0
    db.execute.return_value.scalars.return_value.all.return_value = []
    return db


def make_payload(student, school_class, **kwargs) -> GradeCreate:
    return GradeCreate(
        student_id=student.id, class_id=school_class.id, type=GradeType.EXAM,
        value=kwargs.get("value", 15), max_value=kwargs.get("max_value"),
        date=date(2024, 10, 1), title="Contrôle fractions",
    )


# --- Validation des schémas ---

def test_grade_create_valeur_negative_rejetee():
    with pytest.raises(ValidationError):
        GradeCreate(
            student_id=uuid.uuid4(), class_id=uuid.uuid4(), type="EXAM",
            value=-1, date=date(2024, 10, 1), title="T",
        )


def test_grade_create_titre_vide_rejete():
    with pytest.raises(ValidationError):
        GradeCreate(
            student_id=uuid.uuid4(), class_id=uuid.uuid4(), type="EXAM",
            value=10, date=date(2024, 10, 1), title="  ",
        )


# --- create_grade ---

def test_create_grade_max_par_defaut_100():
    student, school_class, get_map = make_refs()
    db = make_db_mock(get_map)

    result = create_grade(db, SCHOOL_ID, make_payload(student, school_class, value=87))

    assert result.max_value == 100
    assert result.value == 87
    assert result.type == GradeType.EXAM
    db.commit.assert_called_once()


def test_create_grade_superieure_au_max():
    student, school_class, get_map = make_refs()
    db = make_db_mock(get_map)
    with pytest.raises(BadRequestError):
        create_grade(db, SCHOOL_ID, make_payload(student, school_class, value=25, max_value=20))
    db.add.assert_not_called()


def test_create_grade_eleve_non_inscrit_409():
    student, school_class, get_map = make_refs(enrolled=False)
    db = make_db_mock(get_map)
    with pytest.raises(ConflictError, match="pas inscrit"):
        create_grade(db, SCHOOL_ID, make_payload(student, school_class))
    db.add.assert_not_called()


def test_create_grade_classe_autre_ecole():
    student, school_class, get_map = make_refs()
    school_class.school_id = uuid.uuid4()
    db = make_db_mock(get_map)
    with pytest.raises(NotFoundError, match="Classe"):
        create_grade(db, SCHOOL_ID, make_payload(student, school_class))


# --- listes ---

def test_get_student_grades_pagine():
    student, _, get_map = make_refs()
    db = make_db_mock(get_map)
    db.execute.return_value.scalar.return_value = 1
    db.execute.return_value.scalars.return_value.all.return_value = [make_grade()]

    page = get_student_grades(db, SCHOOL_ID, student.id, GradeFilters(type=GradeType.EXAM))

    assert page.total == 1
    assert page.items[0].title == "Contrôle fractions"


def test_get_class_grades_classe_inconnue():
    db = make_db_mock()
    with pytest.raises(NotFoundError):
        get_class_grades(db, SCHOOL_ID, uuid.uuid4(), GradeFilters())


def test_get_student_grades_intervalle_incomplet():
    student, _, get_map = make_refs()
    db = make_db_mock(get_map)
    with pytest.raises(BadRequestError):
        get_student_grades(db, SCHOOL_ID, student.id, GradeFilters(start_date=date(2024, 9, 1)))


# --- find_one / update / remove ---

def test_get_grade_autre_ecole_404():
    db = make_db_mock({Grade: make_grade(school_id=uuid.uuid4())})
    with pytest.raises(NotFoundError, match="Note introuvable"):
        get_grade(db, SCHOOL_ID, uuid.uuid4())


def test_update_grade_valeur_verifiee_contre_max_existant():
    grade = make_grade(value=14, max_value=20)
    db = make_db_mock({Grade: grade})
    with pytest.raises(BadRequestError):
        update_grade(db, SCHOOL_ID, grade.id, GradeUpdate(value=25))
    assert grade.value == 14
    db.commit.assert_not_called()


def test_update_grade_autre_ecole_404():
    grade = make_grade(school_id=uuid.uuid4(), value=14, max_value=20)
    db = make_db_mock({Grade: grade})
    with pytest.raises(NotFoundError, match="Note introuvable"):
        update_grade(db, SCHOOL_ID, grade.id, GradeUpdate(value=17))
    assert grade.value == 14
    db.commit.assert_not_called()


def test_update_grade_succes():
    grade = make_grade(value=14, max_value=20)
    db = make_db_mock({Grade: grade})
    result = update_grade(db, SCHOOL_ID, grade.id, GradeUpdate(value=17, remarks="Rattrapage"))
    assert grade.value == 17
    assert result.remarks == "Rattrapage"


def test_delete_grade():
    grade = make_grade()
    db = make_db_mock({Grade: grade})
    delete_grade(db, SCHOOL_ID, grade.id)
    db.delete.assert_called_once_with(grade)
