"""
Service métier pour les parents et leur rattachement aux élèves.
"""

import uuid
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError
from app.models.parent import Parent, StudentParent
from app.models.student import Student
from app.models.user import User
from app.schemas.common import Page
from app.schemas.parent import ParentCreate, ParentFilters, ParentResponse, ParentUpdate
from app.schemas.student import StudentResponse
from app.services.pagination import get_owned, paginate, tenant_filter

logger = logging.getLogger(__name__)

NOT_FOUND = "Parent introuvable."


def _check_user(db: Session, school_id: uuid.UUID, user_id: Optional[uuid.UUID]) -> None:
    """Le compte lié doit appartenir à la même école."""
    if user_id is None:
        return
    user = db.get(User, user_id)
    if user is None or user.school_id != school_id:
        raise NotFoundError("Utilisateur introuvable.")


def create_parent(db: Session, school_id: uuid.UUID, data: ParentCreate) -> ParentResponse:
    _check_user(db, school_id, data.user_id)

    parent = Parent(
        id=uuid.uuid4(),
        school_id=school_id,
        user_id=data.user_id,
        first_name=data.first_name,
        last_name=data.last_name,
        relation_to_student=data.relation_to_student.value,
        contact_phone=data.contact_phone,
        contact_email=data.contact_email,
        is_deleted=False,
    )
    db.add(parent)
    db.commit()
    db.refresh(parent)
    logger.info("Parent créé : %s %s (%s)", parent.first_name, parent.last_name, parent.id)
    return ParentResponse.model_validate(parent)


def get_parents(db: Session, school_id: uuid.UUID, filters: ParentFilters) -> Page[ParentResponse]:
    criteria = tenant_filter(
        Parent, school_id,
        search=filters.search,
        search_fields=(Parent.first_name, Parent.last_name, Parent.contact_email),
        extra=[Parent.is_deleted.is_(False)],
    )
    return paginate(
        db, select(Parent), criteria, filters.page, filters.limit,
        ParentResponse.model_validate,
        order_by=(Parent.last_name, Parent.first_name),
    )


def get_parent(db: Session, school_id: uuid.UUID, parent_id: uuid.UUID) -> ParentResponse:
    return ParentResponse.model_validate(get_owned(db, Parent, parent_id, school_id, NOT_FOUND))


def update_parent(
    db: Session, school_id: uuid.UUID, parent_id: uuid.UUID, data: ParentUpdate,
) -> ParentResponse:
    parent = get_owned(db, Parent, parent_id, school_id, NOT_FOUND)
    update_data = data.model_dump(exclude_unset=True)
    if "user_id" in update_data:
        _check_user(db, school_id, update_data["user_id"])
    if update_data.get("relation_to_student") is not None:
        update_data["relation_to_student"] = update_data["relation_to_student"].value

    for field, value in update_data.items():
        setattr(parent, field, value)

    db.commit()
    db.refresh(parent)
    logger.info("Parent mis à jour : %s", parent.id)
    return ParentResponse.model_validate(parent)


def delete_parent(db: Session, school_id: uuid.UUID, parent_id: uuid.UUID) -> None:
    """Suppression logique, les liens élève ↔ parent sont conservés."""
    parent = get_owned(db, Parent, parent_id, school_id, NOT_FOUND)
    parent.is_deleted = True
    db.commit()
    logger.info("Parent supprimé (logique) : %s", parent_id)


def get_parent_students(
    db: Session, school_id: uuid.UUID, parent_id: uuid.UUID,
) -> List[StudentResponse]:
    get_owned(db, Parent, parent_id, school_id, NOT_FOUND)
    students = db.execute(
        select(Student)
        .join(StudentParent, StudentParent.student_id == Student.id)
        .where(
            StudentParent.parent_id == parent_id,
            Student.school_id == school_id,
            Student.is_deleted.is_(False),
        )
        .order_by(Student.last_name, Student.first_name)
    ).scalars().all()
    return [StudentResponse.model_validate(s) for s in students]


def link_student(
    db: Session, school_id: uuid.UUID, parent_id: uuid.UUID, student_id: uuid.UUID,
) -> None:
    """Rattache un élève de la même école à un parent. Un lien existant → 409."""
    get_owned(db, Parent, parent_id, school_id, NOT_FOUND)
    get_owned(db, Student, student_id, school_id, "Élève introuvable.")

    existing = db.execute(
        select(StudentParent).where(
            StudentParent.parent_id == parent_id,
            StudentParent.student_id == student_id,
        )
    ).scalar()
    if existing:
        raise ConflictError("Cet élève est déjà rattaché à ce parent.")

    db.add(StudentParent(student_id=student_id, parent_id=parent_id, school_id=school_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Cet élève est déjà rattaché à ce parent.")
    logger.info("Élève %s rattaché au parent %s", student_id, parent_id)


def unlink_student(
    db: Session, school_id: uuid.UUID, parent_id: uuid.UUID, student_id: uuid.UUID,
) -> None:
    get_owned(db, Parent, parent_id, school_id, NOT_FOUND)
    link = db.execute(
        select(StudentParent).where(
            StudentParent.parent_id == parent_id,
            StudentParent.student_id == student_id,
            StudentParent.school_id == school_id,
        )
    ).scalar()
    if link is None:
        raise NotFoundError("Cet élève n'est pas rattaché à ce parent.")
    db.delete(link)
    db.commit()
    logger.info("Élève %s détaché du parent %s", student_id, parent_id)


def is_guardian(
    db: Session, school_id: uuid.UUID, user_id: uuid.UUID, student_id: uuid.UUID,
) -> bool:
    """Vrai si l'utilisateur (rôle PARENT) est rattaché à l'élève via un profil parent."""
    link = db.execute(
        select(StudentParent.student_id)
        .join(Parent, Parent.id == StudentParent.parent_id)
        .where(
            Parent.user_id == user_id,
            Parent.school_id == school_id,
            Parent.is_deleted.is_(False),
            StudentParent.student_id == student_id,
        )
    ).scalar()
    return link is not None
