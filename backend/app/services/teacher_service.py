"""
Service métier pour les profils enseignants.
"""

import uuid
import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError, ConflictError, NotFoundError
from app.models.enums import Role
from app.models.school_class import SchoolClass
from app.models.teacher import Teacher
from app.models.user import User
from app.schemas.common import Page
from app.schemas.teacher import TeacherCreate, TeacherFilters, TeacherResponse
from app.services.pagination import compute_page, get_owned, tenant_filter

logger = logging.getLogger(__name__)

NOT_FOUND = "Enseignant introuvable."


def _to_response(db: Session, teacher: Teacher, user: User = None) -> TeacherResponse:
    """Convertit un Teacher en réponse avec nom, email et nombre de classes."""
    if user is None:
        user = db.get(User, teacher.user_id)
    nb_classes = db.execute(
        select(func.count()).select_from(SchoolClass).where(SchoolClass.teacher_id == teacher.id)
    ).scalar() or 0
    return TeacherResponse(
        id=teacher.id,
        user_id=teacher.user_id,
        school_id=teacher.school_id,
        name=user.name if user else "",
        email=user.email if user else "",
        employee_id=teacher.employee_id,
        date_of_joining=teacher.date_of_joining,
        nb_classes=nb_classes,
        created_at=teacher.created_at,
    )


def create_teacher(db: Session, school_id: uuid.UUID, data: TeacherCreate) -> TeacherResponse:
    """
    Crée le profil enseignant d'un utilisateur.
    L'utilisateur doit appartenir à l'école et avoir le rôle TEACHER.
    Un seul profil par utilisateur.
    """
    user = db.get(User, data.user_id)
    if user is None or user.school_id != school_id:
        raise NotFoundError("Utilisateur introuvable.")
    if user.role != Role.TEACHER.value:
        raise BadRequestError("L'utilisateur doit avoir le rôle TEACHER.")

    existing = db.execute(select(Teacher.id).where(Teacher.user_id == data.user_id)).scalar()
    if existing:
        raise ConflictError("Cet utilisateur a déjà un profil enseignant.")

    teacher = Teacher(
        id=uuid.uuid4(),
        user_id=user.id,
        school_id=school_id,
        employee_id=data.employee_id,
        date_of_joining=data.date_of_joining or date.today(),
    )
    db.add(teacher)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Cet utilisateur a déjà un profil enseignant.")
    db.refresh(teacher)
    logger.info("Enseignant créé : %s (%s)", user.email, teacher.id)
    return _to_response(db, teacher, user)


def get_teachers(db: Session, school_id: uuid.UUID, filters: TeacherFilters) -> Page[TeacherResponse]:
    """Liste paginée ; la recherche porte sur le nom, l'email et le matricule employé."""
    criteria = tenant_filter(
        Teacher, school_id,
        search=filters.search,
        search_fields=(User.name, User.email, Teacher.employee_id),
    )
    base = select(Teacher, User).join(User, User.id == Teacher.user_id).where(*criteria)

    total = db.execute(
        select(func.count()).select_from(base.subquery())
    ).scalar() or 0
    info = compute_page(total, filters.page, filters.limit)

    rows = db.execute(
        base.order_by(User.name).offset(info.skip).limit(info.take)
    ).all()

    return Page(
        items=[_to_response(db, teacher, user) for teacher, user in rows],
        total=total,
        page=filters.page,
        limit=filters.limit,
        total_pages=info.total_pages,
        has_next=info.has_next,
        has_previous=info.has_previous,
    )


def get_teacher(db: Session, school_id: uuid.UUID, teacher_id: uuid.UUID) -> TeacherResponse:
    teacher = get_owned(db, Teacher, teacher_id, school_id, NOT_FOUND)
    return _to_response(db, teacher)
