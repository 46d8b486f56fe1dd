"""
Router de consultation des comptes (annuaire étudiants / enseignants).
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from collegeconnect.database import get_db
from collegeconnect.dependencies import get_current_user
from collegeconnect.schemas.user import UserEnvelope, UsersEnvelope
from collegeconnect.services import user_service

router = APIRouter(
    prefix="/api/users",
    tags=["Utilisateurs"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=UsersEnvelope, summary="Lister les utilisateurs")
def list_users(
    role: Optional[str] = None,
    department: Optional[str] = None,
    year: Optional[str] = None,
    email: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Filtre par rôle, département et année (filtres cumulés).
    Si email est fourni, les autres filtres sont ignorés et la liste contient au plus un compte.
    """
    if email:
        user = user_service.get_user_by_email(db, email)
        return {"users": [user] if user else []}

    return {"users": user_service.list_users(db, role=role, department=department, year=year)}


@router.get("/{user_id}", response_model=UserEnvelope, summary="Détail d'un utilisateur")
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = user_service.get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"user": user}
