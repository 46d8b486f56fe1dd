"""
Dépendances FastAPI d'authentification et cookie de session.

    @router.post("/qr-code")
    def generate(..., faculty: User = Depends(require_roles("faculty"))): ...
"""

from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from collegeconnect.config import settings
from collegeconnect.database import get_db
from collegeconnect.exceptions import Forbidden, Unauthenticated
from collegeconnect.models.user import User
from collegeconnect.services import identity_service, session_service


def set_session_cookie(response: Response, sid: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=sid,
        max_age=int(session_service.session_max_age().total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.ENV == "production",
    )


def get_current_user(request: Request, response: Response, db: Session = Depends(get_db)) -> User:
    """
    Utilisateur appelant ; 401 si aucune stratégie n'aboutit.
    Identifié par cookie : le cookie est réémis pour suivre l'expiration glissante de la session.
    """
    try:
        user = identity_service.authenticate(request, db)
    except Unauthenticated as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    if request.state.auth_strategy == identity_service.resolve_session.__name__:
        set_session_cookie(response, request.cookies[settings.SESSION_COOKIE_NAME])
    return user


def require_roles(*roles: str):
    """Dépendance qui exige l'un des rôles donnés ; 403 sinon."""
    def dependency(user: User = Depends(get_current_user)) -> User:
        try:
            return identity_service.authorize_role(user, roles)
        except Forbidden as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)

    return dependency
