"""
Service métier pour la gestion des classes scolaires et des inscriptions.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError, ConflictError, NotFoundError
from app.models.school_class import SchoolClass, StudentClass
from app.models.student import Student
from app.models.teacher import Teacher
from app.models.user import User
from app.schemas.common import Page
from app.schemas.school_class import (
    ClassCreate,
    ClassFilters,
    ClassResponse,
    ClassStudentsAssign,
    ClassUpdate,
    TeacherSummary,
)
from app.services.pagination import get_owned, paginate, tenant_filter
from app.services.validators import validate_academic_year, validate_class_name

logger = logging.getLogger(__name__)

NOT_FOUND = "Classe introuvable."
MAX_CLASSES_PER_TEACHER = 5


def _check_teacher(
    db: Session,
    school_id: uuid.UUID,
    teacher_id: Optional[uuid.UUID],
    exclude_class_id: Optional[uuid.UUID] = None,
) -> None:
    """L'enseignant doit appartenir à l'école et avoir moins de 5 classes."""
    if teacher_id is None:
        return
    get_owned(db, Teacher, teacher_id, school_id, "Enseignant introuvable.")

    stmt = select(func.count()).select_from(SchoolClass).where(
        SchoolClass.teacher_id == teacher_id,
        SchoolClass.school_id == school_id,
    )
    if exclude_class_id is not None:
        stmt = stmt.where(SchoolClass.id != exclude_class_id)
    nb_classes = db.execute(stmt).scalar() or 0
    if nb_classes >= MAX_CLASSES_PER_TEACHER:
        raise BadRequestError(
            f"Un enseignant ne peut pas avoir plus de {MAX_CLASSES_PER_TEACHER} classes."
        )


def _name_taken(
    db: Session,
    school_id: uuid.UUID,
    name: str,
    academic_year: str,
    exclude_id: Optional[uuid.UUID] = None,
) -> bool:
    stmt = select(SchoolClass.id).where(
        SchoolClass.school_id == school_id,
        SchoolClass.name == name,
        SchoolClass.academic_year == academic_year,
    )
    if exclude_id is not None:
        stmt = stmt.where(SchoolClass.id != exclude_id)
    return db.execute(stmt).scalar() is not None


def create_class(db: Session, school_id: uuid.UUID, data: ClassCreate) -> ClassResponse:
    """
    Crée une nouvelle classe.
    Le couple (nom, année scolaire) est unique dans l'école.
    """
    name = validate_class_name(data.name)
    academic_year = validate_academic_year(data.academic_year)
    _check_teacher(db, school_id, data.teacher_id)

    if _name_taken(db, school_id, name, academic_year):
        raise ConflictError(f"La classe '{name}' existe déjà pour l'année {academic_year}.")

    school_class = SchoolClass(
        id=uuid.uuid4(),
        school_id=school_id,
        name=name,
        academic_year=academic_year,
        teacher_id=data.teacher_id,
    )
    db.add(school_class)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"La classe '{name}' existe déjà pour l'année {academic_year}.")
    db.refresh(school_class)
    logger.info("Classe créée : %s %s (%s)", name, academic_year, school_class.id)
    return _to_response(db, school_class)


def get_classes(db: Session, school_id: uuid.UUID, filters: ClassFilters) -> Page[ClassResponse]:
    """Retourne les classes de l'école, triées par année puis par nom."""
    criteria = tenant_filter(
        SchoolClass, school_id,
        search=filters.search,
        search_fields=(SchoolClass.name,),
        equals=(
            (SchoolClass.teacher_id, filters.teacher_id),
            (SchoolClass.academic_year, filters.academic_year),
        ),
    )
    return paginate(
        db, select(SchoolClass), criteria, filters.page, filters.limit,
        lambda c: _to_response(db, c),
        order_by=(SchoolClass.academic_year.desc(), SchoolClass.name),
    )


def get_class(db: Session, school_id: uuid.UUID, class_id: uuid.UUID) -> ClassResponse:
    return _to_response(db, get_owned(db, SchoolClass, class_id, school_id, NOT_FOUND))


def update_class(
    db: Session, school_id: uuid.UUID, class_id: uuid.UUID, data: ClassUpdate,
) -> ClassResponse:
    """Met à jour les champs fournis d'une classe."""
    school_class = get_owned(db, SchoolClass, class_id, school_id, NOT_FOUND)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("name") is not None:
        update_data["name"] = validate_class_name(update_data["name"])
    if update_data.get("academic_year") is not None:
        update_data["academic_year"] = validate_academic_year(update_data["academic_year"])
    if update_data.get("teacher_id") is not None and update_data["teacher_id"] != school_class.teacher_id:
        _check_teacher(db, school_id, update_data["teacher_id"], exclude_class_id=class_id)

    name = update_data.get("name") or school_class.name
    academic_year = update_data.get("academic_year") or school_class.academic_year
    if (name, academic_year) != (school_class.name, school_class.academic_year):
        if _name_taken(db, school_id, name, academic_year, exclude_id=class_id):
            raise ConflictError(f"La classe '{name}' existe déjà pour l'année {academic_year}.")

    for field, value in update_data.items():
        setattr(school_class, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Une classe avec ce nom existe déjà pour cette année.")
    db.refresh(school_class)
    logger.info("Classe mise à jour : %s", school_class.id)
    return _to_response(db, school_class)


def delete_class(db: Session, school_id: uuid.UUID, class_id: uuid.UUID) -> None:
    """
    Supprime une classe définitivement.
    Bloqué tant que des élèves y sont inscrits.
    """
    school_class = get_owned(db, SchoolClass, class_id, school_id, NOT_FOUND)

    enrolled = db.execute(
        select(StudentClass.student_id).where(StudentClass.class_id == class_id).limit(1)
    ).scalar()
    if enrolled:
        raise ConflictError(
            "Impossible de supprimer cette classe : des élèves y sont encore inscrits."
        )

    db.delete(school_class)
    db.commit()
    logger.info("Classe supprimée : %s", class_id)


def enroll_students(
    db: Session, school_id: uuid.UUID, class_id: uuid.UUID, data: ClassStudentsAssign,
) -> ClassResponse:
    """
    Inscrit des élèves dans une classe.
    Les élèves déjà inscrits sont ignorés (pas de doublon).
    """
    school_class = get_owned(db, SchoolClass, class_id, school_id, NOT_FOUND)

    requested = list(dict.fromkeys(data.student_ids))
    found = set(db.execute(
        select(Student.id).where(
            Student.id.in_(requested),
            Student.school_id == school_id,
            Student.is_deleted.is_(False),
        )
    ).scalars().all())
    missing = [sid for sid in requested if sid not in found]
    if missing:
        raise NotFoundError(f"Élève(s) introuvable(s) : {', '.join(str(m) for m in missing)}")

    existing = set(db.execute(
        select(StudentClass.student_id).where(StudentClass.class_id == class_id)
    ).scalars().all())

    to_insert = [
        {"class_id": class_id, "student_id": sid, "school_id": school_id}
        for sid in requested
        if sid not in existing
    ]

    if to_insert:
        db.bulk_insert_mappings(StudentClass, to_insert)
        db.commit()
        logger.info("%d élève(s) inscrit(s) dans la classe %s", len(to_insert), class_id)

    return _to_response(db, school_class)


def unenroll_student(
    db: Session, school_id: uuid.UUID, class_id: uuid.UUID, student_id: uuid.UUID,
) -> None:
    get_owned(db, SchoolClass, class_id, school_id, NOT_FOUND)
    link = db.get(StudentClass, (student_id, class_id))
    if link is None:
        raise NotFoundError("Cet élève n'est pas inscrit dans cette classe.")
    db.delete(link)
    db.commit()
    logger.info("Élève %s désinscrit de la classe %s", student_id, class_id)


def _to_response(db: Session, school_class: SchoolClass) -> ClassResponse:
    """Construit le schéma de réponse avec l'enseignant et le nombre d'élèves."""
    nb_students = db.execute(
        select(func.count())
        .select_from(StudentClass)
        .where(StudentClass.class_id == school_class.id)
    ).scalar() or 0

    teacher = None
    if school_class.teacher_id is not None:
        row = db.execute(
            select(Teacher.id, User.name, User.email)
            .join(User, User.id == Teacher.user_id)
            .where(Teacher.id == school_class.teacher_id)
        ).first()
        if row is not None:
            teacher = TeacherSummary(id=row[0], name=row[1], email=row[2])

    return ClassResponse(
        id=school_class.id,
        school_id=school_class.school_id,
        name=school_class.name,
        academic_year=school_class.academic_year,
        teacher=teacher,
        nb_students=nb_students,
        created_at=school_class.created_at,
        updated_at=school_class.updated_at,
    )
