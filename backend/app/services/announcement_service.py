"""
Service métier pour les annonces.

Règle d'audience (is_visible) :
- audience absente ou vide → visible par toute l'école
- "ALL" ou le rôle de l'appelant dans audience.roles → visible
- une des classes de l'appelant dans audience.class_ids → visible
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.announcement import Announcement
from app.models.enums import Role
from app.models.parent import Parent, StudentParent
from app.models.school_class import SchoolClass, StudentClass
from app.models.student import Student
from app.models.teacher import Teacher
from app.schemas.announcement import (
    AUDIENCE_ALL,
    AnnouncementCreate,
    AnnouncementFilters,
    AnnouncementResponse,
    AnnouncementUpdate,
)
from app.schemas.auth import CurrentUser
from app.schemas.common import Page
from app.services.pagination import day_bounds, get_owned, paginate, tenant_filter

logger = logging.getLogger(__name__)

NOT_FOUND = "Annonce introuvable."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _audience_json(audience) -> Optional[dict]:
    if audience is None:
        return None
    return {
        "roles": list(audience.roles),
        "class_ids": [str(cid) for cid in audience.class_ids],
    }


def is_visible(audience: Optional[dict], role: Role, class_ids: Iterable[uuid.UUID]) -> bool:
    if not audience:
        return True
    roles = audience.get("roles") or []
    targeted_classes = {str(cid) for cid in audience.get("class_ids") or []}
    if not roles and not targeted_classes:
        return True
    if AUDIENCE_ALL in roles or Role(role).value in roles:
        return True
    return bool(targeted_classes & {str(cid) for cid in class_ids})


def create_announcement(
    db: Session, school_id: uuid.UUID, data: AnnouncementCreate, created_by_user_id: uuid.UUID,
) -> AnnouncementResponse:
    for class_id in (data.audience.class_ids if data.audience else []):
        get_owned(db, SchoolClass, class_id, school_id, "Classe introuvable.")

    announcement = Announcement(
        id=uuid.uuid4(),
        school_id=school_id,
        title=data.title,
        content=data.content,
        published_at=data.published_at or _utcnow(),
        audience=_audience_json(data.audience),
        created_by_user_id=created_by_user_id,
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    logger.info("Annonce créée : %s (%s)", announcement.title, announcement.id)
    return AnnouncementResponse.model_validate(announcement)


def get_announcements(
    db: Session, school_id: uuid.UUID, filters: AnnouncementFilters,
) -> Page[AnnouncementResponse]:
    start, end = day_bounds(filters.start_date, filters.end_date)
    criteria = tenant_filter(
        Announcement, school_id,
        search=filters.search,
        search_fields=(Announcement.title, Announcement.content),
        date_field=Announcement.published_at,
        start_date=start,
        end_date=end,
        equals=((Announcement.created_by_user_id, filters.created_by_user_id),),
    )
    return paginate(
        db, select(Announcement), criteria, filters.page, filters.limit,
        AnnouncementResponse.model_validate,
        order_by=(Announcement.published_at.desc(),),
    )


def get_announcement(
    db: Session, school_id: uuid.UUID, announcement_id: uuid.UUID,
) -> AnnouncementResponse:
    return AnnouncementResponse.model_validate(
        get_owned(db, Announcement, announcement_id, school_id, NOT_FOUND)
    )


def update_announcement(
    db: Session, school_id: uuid.UUID, announcement_id: uuid.UUID, data: AnnouncementUpdate,
) -> AnnouncementResponse:
    announcement = get_owned(db, Announcement, announcement_id, school_id, NOT_FOUND)
    update_data = data.model_dump(exclude_unset=True)

    if "audience" in update_data:
        for class_id in (data.audience.class_ids if data.audience else []):
            get_owned(db, SchoolClass, class_id, school_id, "Classe introuvable.")
        update_data["audience"] = _audience_json(data.audience)

    for field, value in update_data.items():
        if value is not None or field == "audience":
            setattr(announcement, field, value)

    db.commit()
    db.refresh(announcement)
    logger.info("Annonce mise à jour : %s", announcement.id)
    return AnnouncementResponse.model_validate(announcement)


def delete_announcement(db: Session, school_id: uuid.UUID, announcement_id: uuid.UUID) -> None:
    announcement = get_owned(db, Announcement, announcement_id, school_id, NOT_FOUND)
    db.delete(announcement)
    db.commit()
    logger.info("Annonce supprimée : %s", announcement_id)


def _class_ids_for(db: Session, user: CurrentUser) -> List[uuid.UUID]:
    """Classes rattachées à l'appelant selon son rôle."""
    if user.role == Role.STUDENT:
        stmt = (
            select(StudentClass.class_id)
            .join(Student, Student.id == StudentClass.student_id)
            .where(Student.user_id == user.id, Student.school_id == user.school_id)
        )
    elif user.role == Role.TEACHER:
        stmt = (
            select(SchoolClass.id)
            .join(Teacher, Teacher.id == SchoolClass.teacher_id)
            .where(Teacher.user_id == user.id, SchoolClass.school_id == user.school_id)
        )
    elif user.role == Role.PARENT:
        stmt = (
            select(StudentClass.class_id)
            .join(StudentParent, StudentParent.student_id == StudentClass.student_id)
            .join(Parent, Parent.id == StudentParent.parent_id)
            .where(Parent.user_id == user.id, Parent.school_id == user.school_id)
        )
    else:
        return []
    return list(db.execute(stmt).scalars().all())


def get_for_user(db: Session, user: CurrentUser) -> List[AnnouncementResponse]:
    """Annonces déjà publiées visibles par l'appelant, les plus récentes d'abord."""
    announcements = db.execute(
        select(Announcement)
        .where(
            Announcement.school_id == user.school_id,
            Announcement.published_at <= _utcnow(),
        )
        .order_by(Announcement.published_at.desc())
    ).scalars().all()

    class_ids = _class_ids_for(db, user)
    return [
        AnnouncementResponse.model_validate(a)
        for a in announcements
        if is_visible(a.audience, user.role, class_ids)
    ]
