"""
Émission des codes QR de présence.

Flux :
  1. L'enseignant demande un code pour une matière et une date de cours
  2. Un code aléatoire (16 octets, hexadécimal) est stocké avec son expiration (QR_CODE_TTL_MINUTES)
  3. L'enseignant affiche le code (texte ou image QR) ; les élèves le scannent avant expiration

Le code représente la séance, pas un élève : il peut être utilisé par toute la classe.
Les codes expirés depuis plus de QR_CODE_RETENTION_HOURS sont purgés à chaque émission et par le scheduler ;
avant ce délai, un code expiré reste identifié comme tel au scan.
"""

import datetime as dt
import io
import logging
import secrets
from datetime import timedelta
from typing import Optional

import qrcode
from sqlalchemy import delete
from sqlalchemy.orm import Session

from collegeconnect.config import settings
from collegeconnect.exceptions import NotFound
from collegeconnect.models.attendance import AttendanceCode
from collegeconnect.models.subject import Subject
from collegeconnect.timeutils import utcnow

logger = logging.getLogger(__name__)

CODE_BYTES = 16


def issue_code(db: Session, faculty_id: int, subject_id: int, class_date: dt.date) -> AttendanceCode:
    """
    Crée un code de présence pour (enseignant, matière, date).
    Lève NotFound si la matière n'existe pas.
    """
    if db.get(Subject, subject_id) is None:
        raise NotFound("Subject not found")

    purge_expired_codes(db)

    now = utcnow()
    attendance_code = AttendanceCode(
        code=secrets.token_hex(CODE_BYTES),
        faculty_id=faculty_id,
        subject_id=subject_id,
        class_date=class_date,
        created_at=now,
        expires_at=now + timedelta(minutes=settings.QR_CODE_TTL_MINUTES),
    )
    db.add(attendance_code)
    db.commit()
    db.refresh(attendance_code)

    logger.info(
        "Code de présence émis par %s (matière %s, %s), expire à %s",
        faculty_id, subject_id, class_date, attendance_code.expires_at,
    )
    return attendance_code


def get_code(db: Session, code: str) -> Optional[AttendanceCode]:
    return db.get(AttendanceCode, code)


def purge_expired_codes(db: Session) -> int:
    """Supprime les codes expirés depuis plus de QR_CODE_RETENTION_HOURS. Retourne le nombre supprimé."""
    cutoff = utcnow() - timedelta(hours=settings.QR_CODE_RETENTION_HOURS)
    result = db.execute(delete(AttendanceCode).where(AttendanceCode.expires_at < cutoff))
    db.commit()
    return result.rowcount or 0


def render_code_png(code: str, box_size: int = 12) -> bytes:
    """
    Image PNG du code de présence, affichée sur l'écran de l'enseignant.
    Correction d'erreur niveau M (~15 %) ; box_size = taille d'un module en pixels.
    """
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_M, box_size=box_size, border=2)
    qr.add_data(code)
    qr.make(fit=True)
    with io.BytesIO() as png:
        qr.make_image().save(png, format="PNG")
        return png.getvalue()
