"""
Service métier des présences : marquage par code QR, saisie manuelle, consultation, récapitulatif.

Un élève n'a qu'une présence par (matière, date) : la contrainte unique
uq_attendance_subject_student_date tranche entre deux marquages concurrents,
la vérification préalable ne fait que renvoyer le bon message sans passer par l'INSERT.
"""

import datetime as dt
import logging
import math
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from collegeconnect.exceptions import AlreadyMarked, ExpiredCode, InvalidCode, NotFound
from collegeconnect.models.attendance import AttendanceRecord
from collegeconnect.models.subject import Subject
from collegeconnect.models.user import User
from collegeconnect.schemas.attendance import (
    AttendanceCreate,
    MarkAttendanceResponse,
    SubjectAttendanceSummary,
)
from collegeconnect.services.attendance_code_service import get_code
from collegeconnect.timeutils import utcnow

logger = logging.getLogger(__name__)

MARKED_MESSAGE = "Attendance marked successfully"


def redeem_code(db: Session, code: str, student_id: int) -> MarkAttendanceResponse:
    """
    Marque l'élève présent à la séance désignée par le code.

    Étapes :
    1. Code inconnu → InvalidCode
    2. Code expiré → ExpiredCode (la ligne reste jusqu'à la purge : le message reste stable)
    3. Présence déjà enregistrée pour (matière, élève, date) → AlreadyMarked
    4. Sinon création d'une présence "scan" liée au code
    """
    issued = get_code(db, code)
    if issued is None:
        raise InvalidCode()

    if utcnow() > issued.expires_at:
        raise ExpiredCode()

    if find_record(db, issued.subject_id, student_id, issued.class_date) is not None:
        raise AlreadyMarked()

    record = AttendanceRecord(
        subject_id=issued.subject_id,
        student_id=student_id,
        faculty_id=issued.faculty_id,
        date=issued.class_date,
        status=True,
        method="scan",
        qr_code=code,
    )
    _insert_record(db, record)

    logger.info(
        "Présence marquée par scan : élève %s, matière %s, %s",
        student_id, issued.subject_id, issued.class_date,
    )
    return MarkAttendanceResponse(success=True, message=MARKED_MESSAGE)


def mark_manual(db: Session, faculty_id: int, data: AttendanceCreate) -> AttendanceRecord:
    """
    Enregistre une présence ou une absence saisie par un enseignant.
    Lève NotFound si l'élève ou la matière n'existe pas, AlreadyMarked si la présence existe déjà.
    """
    student = db.get(User, data.student_id)
    if student is None or student.role != "student":
        raise NotFound("Student not found")
    if db.get(Subject, data.subject_id) is None:
        raise NotFound("Subject not found")

    if find_record(db, data.subject_id, data.student_id, data.date) is not None:
        raise AlreadyMarked()

    record = AttendanceRecord(
        subject_id=data.subject_id,
        student_id=data.student_id,
        faculty_id=faculty_id,
        date=data.date,
        status=data.status,
        method="manual",
    )
    _insert_record(db, record)
    db.refresh(record)

    logger.info(
        "Présence saisie par %s : élève %s, matière %s, %s, %s",
        faculty_id, data.student_id, data.subject_id, data.date,
        "présent" if data.status else "absent",
    )
    return record


def find_record(
    db: Session, subject_id: int, student_id: int, date: dt.date
) -> Optional[AttendanceRecord]:
    return db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.subject_id == subject_id,
            AttendanceRecord.student_id == student_id,
            AttendanceRecord.date == date,
        )
    ).scalar()


def list_records(
    db: Session,
    subject_id: Optional[int] = None,
    student_id: Optional[int] = None,
    faculty_id: Optional[int] = None,
    date: Optional[dt.date] = None,
) -> List[AttendanceRecord]:
    """Retourne les présences correspondant à tous les filtres fournis, plus récentes d'abord."""
    query = select(AttendanceRecord)
    if subject_id is not None:
        query = query.where(AttendanceRecord.subject_id == subject_id)
    if student_id is not None:
        query = query.where(AttendanceRecord.student_id == student_id)
    if faculty_id is not None:
        query = query.where(AttendanceRecord.faculty_id == faculty_id)
    if date is not None:
        query = query.where(AttendanceRecord.date == date)

    return db.execute(
        query.order_by(AttendanceRecord.date.desc(), AttendanceRecord.id)
    ).scalars().all()


def student_summary(db: Session, student_id: int) -> List[SubjectAttendanceSummary]:
    """
    Taux de présence d'un élève par matière (arrondi à l'entier, .5 vers le haut).
    Les présences d'une matière supprimée ne sont pas comptées (jointure interne).
    """
    rows = db.execute(
        select(
            Subject.id,
            Subject.name,
            func.count(AttendanceRecord.id),
            func.sum(case((AttendanceRecord.status.is_(True), 1), else_=0)),
        )
        .join(Subject, Subject.id == AttendanceRecord.subject_id)
        .where(AttendanceRecord.student_id == student_id)
        .group_by(Subject.id, Subject.name)
        .order_by(Subject.name)
    ).all()

    summary = []
    for subject_id, subject_name, total, present in rows:
        percentage = (present or 0) * 100 / total if total else 0
        summary.append(
            SubjectAttendanceSummary(
                subject_id=subject_id,
                subject_name=subject_name,
                percentage=math.floor(percentage + 0.5),
            )
        )
    return summary


def _insert_record(db: Session, record: AttendanceRecord) -> None:
    """INSERT + commit ; une violation de l'unicité (marquage concurrent) devient AlreadyMarked."""
    db.add(record)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(
            "Marquage concurrent rejeté : élève %s, matière %s, %s",
            record.student_id, record.subject_id, record.date,
        )
        raise AlreadyMarked()
