"""
Router d'authentification : inscription, connexion, déconnexion, profil courant.
La session est portée par un cookie httponly ; un JWT est aussi remis au login.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from collegeconnect.config import settings
from collegeconnect.database import get_db
from collegeconnect.dependencies import get_current_user, set_session_cookie
from collegeconnect.exceptions import DomainError
from collegeconnect.models.user import User
from collegeconnect.schemas.user import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    UserCreate,
    UserEnvelope,
)
from collegeconnect.services import identity_service, session_service, token_service, user_service

router = APIRouter(prefix="/api/auth", tags=["Authentification"])


@router.post("/register", response_model=UserEnvelope, status_code=201, summary="Créer un compte")
def register(data: UserCreate, response: Response, db: Session = Depends(get_db)):
    """
    Crée un compte étudiant ou enseignant puis ouvre directement une session.
    Retourne 400 si l'email ou le college ID est déjà utilisé.
    """
    try:
        user = user_service.create_user(db, data)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    user_session = session_service.login(db, user)
    set_session_cookie(response, user_session.sid)
    return {"user": user}


@router.post("/login", response_model=LoginResponse, summary="Se connecter")
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """
    Vérifie email et mot de passe, ouvre une session (cookie) et remet un token Bearer signé.
    Retourne 401 avec un message identique pour un email inconnu ou un mot de passe faux.
    """
    try:
        user = user_service.authenticate_user(db, data.email, data.password)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    user_session = session_service.login(db, user)
    set_session_cookie(response, user_session.sid)
    return {"user": user, "access_token": token_service.create_access_token(user.id)}


@router.post("/logout", response_model=LogoutResponse, summary="Se déconnecter")
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    """Ferme la session courante (s'il y en a une) et efface le cookie."""
    session_service.logout(db, request.cookies.get(settings.SESSION_COOKIE_NAME))
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True}


@router.get("/me", response_model=UserEnvelope, summary="Utilisateur courant")
def me(user: User = Depends(get_current_user)):
    return {"user": user}


@router.post("/dev-session", response_model=UserEnvelope, summary="Session de développement")
def dev_session(response: Response, db: Session = Depends(get_db)):
    """
    Ouvre une session pour l'enseignant fictif du mode développement.
    N'existe (404) que si DEV_AUTH_ENABLED est activé.
    """
    if not settings.DEV_AUTH_ENABLED:
        raise HTTPException(status_code=404, detail="Not Found")

    user = identity_service.get_or_create_dev_user(db)
    user_session = session_service.login(db, user)
    set_session_cookie(response, user_session.sid)
    return {"user": user}
