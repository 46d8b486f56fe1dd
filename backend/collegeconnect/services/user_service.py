"""
Service métier des comptes utilisateurs : création, recherche et vérification des identifiants.

L'unicité de l'email et du college_id est garantie par les index uniques de la table users ;
la vérification préalable ne sert qu'à produire le bon message d'erreur.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from collegeconnect.exceptions import DuplicateCollegeId, DuplicateEmail, InvalidCredentials
from collegeconnect.models.user import User
from collegeconnect.schemas.user import UserCreate
from collegeconnect.services.password_service import hash_password, verify_password

logger = logging.getLogger(__name__)


def create_user(db: Session, data: UserCreate) -> User:
    """
    Crée un compte avec le mot de passe haché.

    Lève DuplicateEmail ou DuplicateCollegeId si l'un des identifiants est déjà pris,
    y compris lorsqu'une inscription concurrente l'emporte entre la vérification et l'INSERT.
    """
    _ensure_available(db, data.email, data.college_id)

    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        college_id=data.college_id,
        role=data.role,
        department=data.department,
        year=data.year,
        position=data.position,
        profile_picture=data.profile_picture,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Course perdue : l'autre requête est maintenant visible, on identifie la contrainte
        _ensure_available(db, data.email, data.college_id)
        raise DuplicateEmail()
    db.refresh(user)

    logger.info("Compte créé : %s (%s, id=%s)", user.email, user.role, user.id)
    return user


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(
        select(User).where(User.email == email.strip().lower())
    ).scalar()


def get_user_by_college_id(db: Session, college_id: str) -> Optional[User]:
    return db.execute(
        select(User).where(User.college_id == college_id)
    ).scalar()


def list_users(
    db: Session,
    role: Optional[str] = None,
    department: Optional[str] = None,
    year: Optional[str] = None,
) -> List[User]:
    """Retourne les comptes correspondant à tous les filtres fournis, triés par nom puis prénom."""
    query = select(User)
    if role:
        query = query.where(User.role == role)
    if department:
        query = query.where(func.lower(User.department) == department.lower())
    if year:
        query = query.where(User.year == year)

    return db.execute(query.order_by(User.last_name, User.first_name)).scalars().all()


def authenticate_user(db: Session, email: str, password: str) -> User:
    """
    Vérifie un couple email / mot de passe.
    Lève InvalidCredentials avec le même message que l'email soit inconnu ou le mot de passe faux.
    """
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Échec de connexion pour %s", email)
        raise InvalidCredentials()
    return user


def _ensure_available(db: Session, email: str, college_id: str) -> None:
    if get_user_by_email(db, email) is not None:
        raise DuplicateEmail()
    if get_user_by_college_id(db, college_id) is not None:
        raise DuplicateCollegeId()
