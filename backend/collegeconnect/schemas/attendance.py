"""
Schémas Pydantic pour les présences : émission de code QR, marquage par scan,
saisie manuelle, consultation et récapitulatif.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre le champ `date` et le type `datetime.date` dans Pydantic v2.
"""

import datetime as dt
from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from collegeconnect.schemas.common import CamelModel, CamelRequest


class QrCodeRequest(CamelRequest):
    """Corps de requête POST /api/attendance/qr-code."""
    subject_id: int
    date: dt.date
    faculty_id: Optional[int] = None  # Envoyé par l'ancien client ; doit être l'appelant


class QrCodeResponse(CamelModel):
    qr_code: str
    expires_at: datetime


class MarkAttendanceRequest(CamelRequest):
    """Corps de requête POST /api/attendance/mark."""
    qr_code: str
    student_id: Optional[int] = None  # Par défaut : l'élève authentifié

    @field_validator("qr_code")
    @classmethod
    def qr_code_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("QR code is required")
        return v.strip()


class MarkAttendanceResponse(CamelModel):
    success: bool
    message: str


class AttendanceCreate(CamelRequest):
    """Saisie manuelle par un enseignant (POST /api/attendance)."""
    subject_id: int
    student_id: int
    date: dt.date
    status: bool  # True = présent


class AttendanceRecordResponse(CamelModel):
    id: int
    subject_id: int
    student_id: int
    faculty_id: int
    date: dt.date
    status: bool
    method: str
    qr_code: Optional[str]


class RecordEnvelope(CamelModel):
    record: AttendanceRecordResponse


class RecordsEnvelope(CamelModel):
    records: List[AttendanceRecordResponse]


class SubjectAttendanceSummary(CamelModel):
    """Taux de présence d'un élève pour une matière (pourcentage arrondi)."""
    subject_id: int
    subject_name: str
    percentage: int


class SummaryEnvelope(CamelModel):
    summary: List[SubjectAttendanceSummary]
