"""
Service métier pour la gestion des élèves.

La suppression est logique (is_deleted) : les présences et notes historiques
restent rattachées à l'élève. Un élève supprimé n'apparaît plus nulle part.
"""

import uuid
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError
from app.models.parent import Parent, StudentParent
from app.models.school_class import SchoolClass, StudentClass
from app.models.student import Student
from app.models.user import User
from app.schemas.common import Page
from app.schemas.parent import ParentResponse
from app.schemas.student import (
    StudentClassResponse,
    StudentCreate,
    StudentFilters,
    StudentResponse,
    StudentUpdate,
)
from app.services.pagination import get_owned, paginate, tenant_filter

logger = logging.getLogger(__name__)

NOT_FOUND = "Élève introuvable."


def _number_taken(
    db: Session, school_id: uuid.UUID, student_number: str, exclude_id: uuid.UUID = None,
) -> bool:
    stmt = select(Student.id).where(
        Student.school_id == school_id,
        Student.student_number == student_number,
    )
    if exclude_id is not None:
        stmt = stmt.where(Student.id != exclude_id)
    return db.execute(stmt).scalar() is not None


def _check_user(db: Session, school_id: uuid.UUID, user_id: Optional[uuid.UUID]) -> None:
    if user_id is None:
        return
    user = db.get(User, user_id)
    if user is None or user.school_id != school_id:
        raise NotFoundError("Utilisateur introuvable.")


def create_student(db: Session, school_id: uuid.UUID, data: StudentCreate) -> StudentResponse:
    """
    Crée un élève. Le matricule (student_number) est unique dans l'école.
    """
    if _number_taken(db, school_id, data.student_number):
        raise ConflictError(f"Le matricule '{data.student_number}' est déjà utilisé.")
    _check_user(db, school_id, data.user_id)

    student = Student(
        id=uuid.uuid4(),
        school_id=school_id,
        user_id=data.user_id,
        student_number=data.student_number,
        first_name=data.first_name,
        last_name=data.last_name,
        date_of_birth=data.date_of_birth,
        gender=data.gender,
        enrollment_status=data.enrollment_status.value,
        is_deleted=False,
    )
    db.add(student)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Le matricule '{data.student_number}' est déjà utilisé.")
    db.refresh(student)
    logger.info("Élève créé : %s %s (%s)", student.first_name, student.last_name, student.id)
    return StudentResponse.model_validate(student)


def get_students(db: Session, school_id: uuid.UUID, filters: StudentFilters) -> Page[StudentResponse]:
    """Liste paginée, recherche sur prénom, nom et matricule."""
    stmt = select(Student)
    extra = [Student.is_deleted.is_(False)]
    if filters.class_id is not None:
        stmt = stmt.join(StudentClass, StudentClass.student_id == Student.id)
        extra.append(StudentClass.class_id == filters.class_id)

    status = filters.enrollment_status.value if filters.enrollment_status else None
    criteria = tenant_filter(
        Student, school_id,
        search=filters.search,
        search_fields=(Student.first_name, Student.last_name, Student.student_number),
        equals=((Student.enrollment_status, status),),
        extra=extra,
    )
    return paginate(
        db, stmt, criteria, filters.page, filters.limit,
        StudentResponse.model_validate,
        order_by=(Student.last_name, Student.first_name),
    )


def get_student(db: Session, school_id: uuid.UUID, student_id: uuid.UUID) -> StudentResponse:
    return StudentResponse.model_validate(get_owned(db, Student, student_id, school_id, NOT_FOUND))


def find_by_student_number(db: Session, school_id: uuid.UUID, student_number: str) -> StudentResponse:
    student = db.execute(
        select(Student).where(
            Student.school_id == school_id,
            Student.student_number == student_number,
            Student.is_deleted.is_(False),
        )
    ).scalar()
    if student is None:
        raise NotFoundError(NOT_FOUND)
    return StudentResponse.model_validate(student)


def update_student(
    db: Session, school_id: uuid.UUID, student_id: uuid.UUID, data: StudentUpdate,
) -> StudentResponse:
    student = get_owned(db, Student, student_id, school_id, NOT_FOUND)
    update_data = data.model_dump(exclude_unset=True)

    number = update_data.get("student_number")
    if number and number != student.student_number and _number_taken(db, school_id, number, student.id):
        raise ConflictError(f"Le matricule '{number}' est déjà utilisé.")
    if "user_id" in update_data:
        _check_user(db, school_id, update_data["user_id"])
    if update_data.get("enrollment_status") is not None:
        update_data["enrollment_status"] = update_data["enrollment_status"].value

    for field, value in update_data.items():
        setattr(student, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Le matricule est déjà utilisé.")
    db.refresh(student)
    logger.info("Élève mis à jour : %s", student.id)
    return StudentResponse.model_validate(student)


def delete_student(db: Session, school_id: uuid.UUID, student_id: uuid.UUID) -> None:
    """Suppression logique."""
    student = get_owned(db, Student, student_id, school_id, NOT_FOUND)
    student.is_deleted = True
    db.commit()
    logger.info("Élève supprimé (logique) : %s", student_id)


def get_student_classes(
    db: Session, school_id: uuid.UUID, student_id: uuid.UUID,
) -> List[StudentClassResponse]:
    get_owned(db, Student, student_id, school_id, NOT_FOUND)
    rows = db.execute(
        select(SchoolClass, StudentClass.enrolled_at)
        .join(StudentClass, StudentClass.class_id == SchoolClass.id)
        .where(
            StudentClass.student_id == student_id,
            SchoolClass.school_id == school_id,
        )
        .order_by(SchoolClass.academic_year.desc(), SchoolClass.name)
    ).all()
    return [
        StudentClassResponse(
            class_id=c.id, name=c.name, academic_year=c.academic_year, enrolled_at=enrolled_at,
        )
        for c, enrolled_at in rows
    ]


def get_student_parents(
    db: Session, school_id: uuid.UUID, student_id: uuid.UUID,
) -> List[ParentResponse]:
    get_owned(db, Student, student_id, school_id, NOT_FOUND)
    parents = db.execute(
        select(Parent)
        .join(StudentParent, StudentParent.parent_id == Parent.id)
        .where(
            StudentParent.student_id == student_id,
            Parent.school_id == school_id,
            Parent.is_deleted.is_(False),
        )
        .order_by(Parent.last_name, Parent.first_name)
    ).scalars().all()
    return [ParentResponse.model_validate(p) for p in parents]
