"""
Router des présences.
Émission de codes QR et saisie manuelle par les enseignants, marquage par scan par les élèves.
"""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from collegeconnect.database import get_db
from collegeconnect.dependencies import get_current_user, require_roles
from collegeconnect.exceptions import DomainError, RedemptionError
from collegeconnect.models.user import User
from collegeconnect.schemas.attendance import (
    AttendanceCreate,
    MarkAttendanceRequest,
    MarkAttendanceResponse,
    QrCodeRequest,
    QrCodeResponse,
    RecordEnvelope,
    RecordsEnvelope,
    SummaryEnvelope,
)
from collegeconnect.services import attendance_code_service, attendance_service

router = APIRouter(prefix="/api/attendance", tags=["Présences"])


@router.post("/qr-code", response_model=QrCodeResponse, summary="Générer un code QR de présence")
def generate_qr_code(
    data: QrCodeRequest,
    faculty: User = Depends(require_roles("faculty")),
    db: Session = Depends(get_db),
):
    """
    Émet un code valable QR_CODE_TTL_MINUTES pour la matière et la date données.
    L'enseignant émetteur est l'appelant ; un facultyId différent dans le corps est refusé (403).
    """
    if data.faculty_id is not None and data.faculty_id != faculty.id:
        raise HTTPException(status_code=403, detail="Cannot issue a QR code on behalf of another faculty member")

    try:
        issued = attendance_code_service.issue_code(db, faculty.id, data.subject_id, data.date)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"qr_code": issued.code, "expires_at": issued.expires_at}


@router.get("/qr-code/{code}/image", summary="Image PNG d'un code QR de présence")
def qr_code_image(
    code: str,
    faculty: User = Depends(require_roles("faculty")),
    db: Session = Depends(get_db),
):
    """Rend le code en image QR pour l'affichage en classe. 404 si le code est inconnu ou purgé."""
    issued = attendance_code_service.get_code(db, code)
    if issued is None or issued.faculty_id != faculty.id:
        raise HTTPException(status_code=404, detail="QR code not found")

    return Response(content=attendance_code_service.render_code_png(issued.code), media_type="image/png")


@router.post("/mark", response_model=MarkAttendanceResponse, summary="Marquer sa présence par code QR")
@router.post("/scan", response_model=MarkAttendanceResponse, include_in_schema=False)
def mark_attendance(
    data: MarkAttendanceRequest,
    student: User = Depends(require_roles("student")),
    db: Session = Depends(get_db),
):
    """
    Marque l'élève authentifié présent à la séance du code scanné.

    Retourne 400 avec {success: false, message} si le code est inconnu, expiré,
    ou si la présence est déjà enregistrée (messages distincts).
    """
    if data.student_id is not None and data.student_id != student.id:
        raise HTTPException(status_code=403, detail="Students can only mark their own attendance")

    try:
        return attendance_service.redeem_code(db, data.qr_code, student.id)
    except RedemptionError as e:
        body = MarkAttendanceResponse(success=False, message=e.message)
        return JSONResponse(status_code=400, content=body.model_dump(by_alias=True))


@router.post("", response_model=RecordEnvelope, status_code=201, summary="Saisir une présence manuellement")
def create_attendance_record(
    data: AttendanceCreate,
    faculty: User = Depends(require_roles("faculty")),
    db: Session = Depends(get_db),
):
    """Enregistre la présence ou l'absence d'un élève. 400 si déjà saisie, 404 si élève/matière inconnu."""
    try:
        record = attendance_service.mark_manual(db, faculty.id, data)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"record": record}


@router.get("", response_model=RecordsEnvelope, summary="Consulter les présences")
def list_attendance_records(
    subject_id: Optional[int] = Query(None, alias="subjectId"),
    student_id: Optional[int] = Query(None, alias="studentId"),
    faculty_id: Optional[int] = Query(None, alias="facultyId"),
    date: Optional[dt.date] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Filtres cumulés ; un élève ne voit que ses propres présences."""
    if user.role == "student":
        student_id = user.id

    records = attendance_service.list_records(
        db, subject_id=subject_id, student_id=student_id, faculty_id=faculty_id, date=date,
    )
    return {"records": records}


@router.get(
    "/summary/student/{student_id}",
    response_model=SummaryEnvelope,
    summary="Taux de présence d'un élève par matière",
)
def student_attendance_summary(
    student_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Un élève ne peut consulter que son propre récapitulatif (403 sinon)."""
    if user.role == "student" and user.id != student_id:
        raise HTTPException(status_code=403, detail="Students can only view their own attendance summary")
    return {"summary": attendance_service.student_summary(db, student_id)}
