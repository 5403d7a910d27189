"""
Service métier pour les présences.

Unicité : un seul enregistrement par (élève, date, session) dans une école.
Le bulk est tout-ou-rien : tous les enregistrements sont validés avant la
moindre écriture, puis insérés dans une seule transaction.
"""

import datetime as dt
import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import AppError, ConflictError
from app.models.attendance import AttendanceRecord
from app.models.enums import AttendanceStatus
from app.models.school_class import SchoolClass
from app.models.student import Student
from app.schemas.attendance import (
    AttendanceCreate,
    AttendanceFilters,
    AttendanceResponse,
    AttendanceSummary,
    AttendanceUpdate,
)
from app.schemas.common import Page
from app.services.pagination import get_owned, paginate, tenant_filter
from app.services.validators import (
    validate_attendance_date,
    validate_enum,
    validate_session_id,
)

logger = logging.getLogger(__name__)

NOT_FOUND = "Enregistrement de présence introuvable."
DUPLICATE = "Une présence existe déjà pour cet élève à cette date et cette session."


def _validate(data: AttendanceCreate) -> tuple:
    """Validation sans accès BDD : (date, session_id, status)."""
    date = validate_attendance_date(data.date)
    session_id = validate_session_id(data.session_id)
    status = validate_enum(data.status, AttendanceStatus, "Statut de présence")
    return date, session_id, status


def _check_refs(
    db: Session, school_id: uuid.UUID, student_id: uuid.UUID, class_id: Optional[uuid.UUID],
) -> None:
    get_owned(db, Student, student_id, school_id, "Élève introuvable.")
    if class_id is not None:
        get_owned(db, SchoolClass, class_id, school_id, "Classe introuvable.")


def _exists(
    db: Session,
    school_id: uuid.UUID,
    student_id: uuid.UUID,
    date: dt.date,
    session_id: str,
    exclude_id: Optional[uuid.UUID] = None,
) -> bool:
    stmt = select(AttendanceRecord.id).where(
        AttendanceRecord.school_id == school_id,
        AttendanceRecord.student_id == student_id,
        AttendanceRecord.date == date,
        AttendanceRecord.session_id == session_id,
    )
    if exclude_id is not None:
        stmt = stmt.where(AttendanceRecord.id != exclude_id)
    return db.execute(stmt).scalar() is not None


def _build_record(
    school_id: uuid.UUID, data: AttendanceCreate, date, session_id, status, recorded_by_id,
) -> AttendanceRecord:
    return AttendanceRecord(
        id=uuid.uuid4(),
        school_id=school_id,
        student_id=data.student_id,
        class_id=data.class_id,
        date=date,
        status=status,
        session_id=session_id,
        remarks=data.remarks,
        recorded_by_id=recorded_by_id,
    )


def create_attendance(
    db: Session,
    school_id: uuid.UUID,
    data: AttendanceCreate,
    recorded_by_id: Optional[uuid.UUID] = None,
) -> AttendanceResponse:
    date, session_id, status = _validate(data)
    _check_refs(db, school_id, data.student_id, data.class_id)
    if _exists(db, school_id, data.student_id, date, session_id):
        raise ConflictError(DUPLICATE)

    record = _build_record(school_id, data, date, session_id, status, recorded_by_id)
    db.add(record)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE)
    db.refresh(record)
    logger.info(
        "Présence enregistrée : élève %s, %s, session %s → %s",
        data.student_id, date, session_id, status,
    )
    return AttendanceResponse.model_validate(record)


def create_bulk(
    db: Session,
    school_id: uuid.UUID,
    records: List[AttendanceCreate],
    recorded_by_id: Optional[uuid.UUID] = None,
) -> List[AttendanceResponse]:
    """
    Insère un lot de présences en une seule transaction.

    Étapes :
    1. Valider chaque enregistrement (date, session, statut) avant toute écriture
    2. Pour chaque enregistrement : élève/classe de l'école, pas de doublon
       (en base ou dans le lot lui-même)
    3. Un seul commit ; la première erreur annule tout le lot
    """
    validated = [(data, *_validate(data)) for data in records]

    # autoflush=False : les INSERTs en attente ne sont pas visibles via SELECT
    seen_in_batch: set = set()
    created: List[AttendanceRecord] = []
    try:
        for data, date, session_id, status in validated:
            _check_refs(db, school_id, data.student_id, data.class_id)

            key = (data.student_id, date, session_id)
            if key in seen_in_batch or _exists(db, school_id, data.student_id, date, session_id):
                raise ConflictError(DUPLICATE)
            seen_in_batch.add(key)

            record = _build_record(school_id, data, date, session_id, status, recorded_by_id)
            db.add(record)
            created.append(record)

        db.commit()
    except AppError:
        db.rollback()
        logger.warning("Lot de présences annulé (%d enregistrement(s))", len(records))
        raise
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE)

    for record in created:
        db.refresh(record)
    logger.info("Lot de présences enregistré : %d enregistrement(s)", len(created))
    return [AttendanceResponse.model_validate(r) for r in created]


def _list(
    db: Session, school_id: uuid.UUID, filters: AttendanceFilters, *equals,
) -> Page[AttendanceResponse]:
    status = filters.status.value if filters.status else None
    criteria = tenant_filter(
        AttendanceRecord, school_id,
        date_field=AttendanceRecord.date,
        start_date=filters.start_date,
        end_date=filters.end_date,
        equals=((AttendanceRecord.status, status), *equals),
    )
    return paginate(
        db, select(AttendanceRecord), criteria, filters.page, filters.limit,
        AttendanceResponse.model_validate,
        order_by=(AttendanceRecord.date.desc(), AttendanceRecord.session_id),
    )


def get_student_attendance(
    db: Session, school_id: uuid.UUID, student_id: uuid.UUID, filters: AttendanceFilters,
) -> Page[AttendanceResponse]:
    get_owned(db, Student, student_id, school_id, "Élève introuvable.")
    return _list(
        db, school_id, filters,
        (AttendanceRecord.student_id, student_id),
        (AttendanceRecord.class_id, filters.class_id),
    )


def get_class_attendance(
    db: Session, school_id: uuid.UUID, class_id: uuid.UUID, filters: AttendanceFilters,
) -> Page[AttendanceResponse]:
    get_owned(db, SchoolClass, class_id, school_id, "Classe introuvable.")
    return _list(
        db, school_id, filters,
        (AttendanceRecord.class_id, class_id),
        (AttendanceRecord.student_id, filters.student_id),
    )


def compute_summary(counts: dict) -> AttendanceSummary:
    """Taux de présence = (présents + retards) / total × 100, 0 si aucun enregistrement."""
    present = counts.get(AttendanceStatus.PRESENT.value, 0)
    absent = counts.get(AttendanceStatus.ABSENT.value, 0)
    late = counts.get(AttendanceStatus.LATE.value, 0)
    excused = counts.get(AttendanceStatus.EXCUSED.value, 0)
    total = present + absent + late + excused
    rate = round((present + late) / total * 100, 2) if total else 0.0
    return AttendanceSummary(
        total_records=total,
        present=present,
        absent=absent,
        late=late,
        excused=excused,
        attendance_rate=rate,
    )


def get_summary(
    db: Session,
    school_id: uuid.UUID,
    student_id: Optional[uuid.UUID] = None,
    class_id: Optional[uuid.UUID] = None,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> AttendanceSummary:
    criteria = tenant_filter(
        AttendanceRecord, school_id,
        date_field=AttendanceRecord.date,
        start_date=start_date,
        end_date=end_date,
        equals=(
            (AttendanceRecord.student_id, student_id),
            (AttendanceRecord.class_id, class_id),
        ),
    )
    rows = db.execute(
        select(AttendanceRecord.status, func.count())
        .where(*criteria)
        .group_by(AttendanceRecord.status)
    ).all()
    return compute_summary({status: count for status, count in rows})


def get_attendance(db: Session, school_id: uuid.UUID, record_id: uuid.UUID) -> AttendanceResponse:
    return AttendanceResponse.model_validate(
        get_owned(db, AttendanceRecord, record_id, school_id, NOT_FOUND)
    )


def update_attendance(
    db: Session, school_id: uuid.UUID, record_id: uuid.UUID, data: AttendanceUpdate,
) -> AttendanceResponse:
    """Mise à jour partielle ; date, session et statut sont re-validés."""
    record = get_owned(db, AttendanceRecord, record_id, school_id, NOT_FOUND)
    update_data = data.model_dump(exclude_unset=True)

    if "date" in update_data:
        update_data["date"] = validate_attendance_date(update_data["date"])
    if "session_id" in update_data:
        update_data["session_id"] = validate_session_id(update_data["session_id"])
    if "status" in update_data:
        update_data["status"] = validate_enum(update_data["status"], AttendanceStatus, "Statut de présence")
    if update_data.get("class_id") is not None:
        get_owned(db, SchoolClass, update_data["class_id"], school_id, "Classe introuvable.")

    date = update_data.get("date", record.date)
    session_id = update_data.get("session_id", record.session_id)
    if (date, session_id) != (record.date, record.session_id):
        if _exists(db, school_id, record.student_id, date, session_id, exclude_id=record.id):
            raise ConflictError(DUPLICATE)

    for field, value in update_data.items():
        setattr(record, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE)
    db.refresh(record)
    logger.info("Présence mise à jour : %s", record.id)
    return AttendanceResponse.model_validate(record)


def delete_attendance(db: Session, school_id: uuid.UUID, record_id: uuid.UUID) -> None:
    record = get_owned(db, AttendanceRecord, record_id, school_id, NOT_FOUND)
    db.delete(record)
    db.commit()
    logger.info("Présence supprimée : %s", record_id)
