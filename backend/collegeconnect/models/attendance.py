"""
Modèles SQLAlchemy pour les présences et les codes QR de présence.

Unicité (subject_id, student_id, date) portée par la base :
deux marquages concurrents pour le même élève/cours/jour ne peuvent pas passer tous les deux.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint, func

from collegeconnect.database import Base


class AttendanceCode(Base):
    """Code court émis par un enseignant pour une séance (cours + date), valable jusqu'à expires_at."""
    __tablename__ = "attendance_codes"

    code = Column(String(64), primary_key=True)  # 16 octets aléatoires en hexadécimal
    faculty_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    class_date = Column(Date, nullable=False)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)


class AttendanceRecord(Base):
    """Présence (ou absence) d'un élève à un cours pour une date, saisie manuellement ou par scan."""
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("subject_id", "student_id", "date", name="uq_attendance_subject_student_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    faculty_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(Boolean, nullable=False)                   # True = présent
    method = Column(String(20), nullable=False, default="manual")  # manual, scan
    qr_code = Column(String(64), nullable=True)                # Code d'origine si scan (pas de FK : purgé)
    created_at = Column(DateTime, server_default=func.now())
