"""
Service métier pour les notes.
Une note ne peut être saisie que pour un élève inscrit dans la classe concernée.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import ConflictError
from app.models.grade import Grade
from app.models.school_class import SchoolClass, StudentClass
from app.models.student import Student
from app.schemas.common import Page
from app.schemas.grade import GradeCreate, GradeFilters, GradeResponse, GradeUpdate
from app.services.pagination import get_owned, paginate, tenant_filter
from app.services.validators import validate_grade_value

logger = logging.getLogger(__name__)

NOT_FOUND = "Note introuvable."
DEFAULT_MAX_VALUE = 100.0


def create_grade(
    db: Session,
    school_id: uuid.UUID,
    data: GradeCreate,
    recorded_by_id: Optional[uuid.UUID] = None,
) -> GradeResponse:
    max_value = data.max_value if data.max_value is not None else DEFAULT_MAX_VALUE
    validate_grade_value(data.value, max_value)

    get_owned(db, Student, data.student_id, school_id, "Élève introuvable.")
    get_owned(db, SchoolClass, data.class_id, school_id, "Classe introuvable.")

    enrollment = db.get(StudentClass, (data.student_id, data.class_id))
    if enrollment is None:
        raise ConflictError("L'élève n'est pas inscrit dans cette classe.")

    grade = Grade(
        id=uuid.uuid4(),
        school_id=school_id,
        student_id=data.student_id,
        class_id=data.class_id,
        type=data.type.value,
        value=data.value,
        max_value=max_value,
        date=data.date,
        title=data.title,
        remarks=data.remarks,
        recorded_by_id=recorded_by_id,
    )
    db.add(grade)
    db.commit()
    db.refresh(grade)
    logger.info("Note créée : élève %s, %s/%s (%s)", data.student_id, data.value, max_value, grade.id)
    return GradeResponse.model_validate(grade)


def get_grades(
    db: Session, school_id: uuid.UUID, filters: GradeFilters, **scope,
) -> Page[GradeResponse]:
    """
    Liste paginée des notes. `scope` (student_id / class_id) prend le pas
    sur les filtres de même nom pour les routes imbriquées.
    """
    student_id = scope.get("student_id", filters.student_id)
    class_id = scope.get("class_id", filters.class_id)
    criteria = tenant_filter(
        Grade, school_id,
        date_field=Grade.date,
        start_date=filters.start_date,
        end_date=filters.end_date,
        equals=(
            (Grade.type, filters.type.value if filters.type else None),
            (Grade.student_id, student_id),
            (Grade.class_id, class_id),
        ),
    )
    return paginate(
        db, select(Grade), criteria, filters.page, filters.limit,
        GradeResponse.model_validate,
        order_by=(Grade.date.desc(), Grade.title),
    )


def get_student_grades(
    db: Session, school_id: uuid.UUID, student_id: uuid.UUID, filters: GradeFilters,
) -> Page[GradeResponse]:
    get_owned(db, Student, student_id, school_id, "Élève introuvable.")
    return get_grades(db, school_id, filters, student_id=student_id)


def get_class_grades(
    db: Session, school_id: uuid.UUID, class_id: uuid.UUID, filters: GradeFilters,
) -> Page[GradeResponse]:
    get_owned(db, SchoolClass, class_id, school_id, "Classe introuvable.")
    return get_grades(db, school_id, filters, class_id=class_id)


def get_grade(db: Session, school_id: uuid.UUID, grade_id: uuid.UUID) -> GradeResponse:
    return GradeResponse.model_validate(get_owned(db, Grade, grade_id, school_id, NOT_FOUND))


def update_grade(
    db: Session, school_id: uuid.UUID, grade_id: uuid.UUID, data: GradeUpdate,
) -> GradeResponse:
    """La note est re-vérifiée contre la note maximale (nouvelle ou existante)."""
    grade = get_owned(db, Grade, grade_id, school_id, NOT_FOUND)
    update_data = data.model_dump(exclude_unset=True)

    value = update_data.get("value")
    max_value = update_data.get("max_value")
    validate_grade_value(
        value if value is not None else grade.value,
        max_value if max_value is not None else grade.max_value,
    )
    if update_data.get("type") is not None:
        update_data["type"] = update_data["type"].value

    for field, new_value in update_data.items():
        if new_value is not None or field == "remarks":
            setattr(grade, field, new_value)

    db.commit()
    db.refresh(grade)
    logger.info("Note mise à jour : %s", grade.id)
    return GradeResponse.model_validate(grade)


def delete_grade(db: Session, school_id: uuid.UUID, grade_id: uuid.UUID) -> None:
    grade = get_owned(db, Grade, grade_id, school_id, NOT_FOUND)
    db.delete(grade)
    db.commit()
    logger.info("Note supprimée : %s", grade_id)
