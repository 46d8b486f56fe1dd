"""
Identification de l'appelant d'une requête.

Les stratégies sont essayées dans un ordre fixe ; la première qui retourne un utilisateur l'emporte :
  1. cookie de session
  2. en-tête Authorization: Bearer (JWT signé, ou "user-<id>" historique)
  3. paramètre ?userId=
  4. en-têtes x-user-id / x-current-user
  5. repli développement (?dev=true ou x-dev-mode: true) → enseignant fictif

Les stratégies 2 ("user-<id>"), 3 et 4 font confiance à un id fourni par le client et la 5 donne
les droits enseignant sans vérification. Elles ne servent qu'à la compatibilité avec l'ancien
client : en production, TRUST_ID_CLAIMS=False et DEV_AUTH_ENABLED=False.
"""

import json
import logging
import secrets
from typing import Callable, Iterable, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.requests import Request

from collegeconnect.config import settings
from collegeconnect.exceptions import Forbidden, Unauthenticated
from collegeconnect.models.user import User
from collegeconnect.services import session_service, token_service, user_service
from collegeconnect.services.password_service import hash_password

logger = logging.getLogger(__name__)

LEGACY_TOKEN_PREFIX = "user-"
DEV_USER_COLLEGE_ID = "DEV-FACULTY"
MAX_USER_ID = 2**31 - 1  # Colonne INTEGER

Resolver = Callable[[Request, Session], Optional[User]]


def resolve_session(request: Request, db: Session) -> Optional[User]:
    return session_service.get_session_user(db, request.cookies.get(settings.SESSION_COOKIE_NAME))


def resolve_bearer_token(request: Request, db: Session) -> Optional[User]:
    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    credentials = credentials.strip()
    if scheme.lower() != "bearer" or not credentials:
        return None

    if credentials.startswith(LEGACY_TOKEN_PREFIX):
        if not settings.TRUST_ID_CLAIMS:
            return None
        return _user_from_claim(db, credentials[len(LEGACY_TOKEN_PREFIX):])

    user_id = token_service.decode_access_token(credentials)
    return _user_from_claim(db, user_id)


def resolve_query_param(request: Request, db: Session) -> Optional[User]:
    if not settings.TRUST_ID_CLAIMS:
        return None
    return _user_from_claim(db, request.query_params.get("userId"))


def resolve_headers(request: Request, db: Session) -> Optional[User]:
    if not settings.TRUST_ID_CLAIMS:
        return None

    user = _user_from_claim(db, request.headers.get("x-user-id"))
    if user is not None:
        return user

    # Profil sérialisé par le client : seul l'id est utilisé, le reste vient de la base
    raw_profile = request.headers.get("x-current-user")
    if not raw_profile:
        return None
    try:
        profile = json.loads(raw_profile)
    except ValueError:
        logger.warning("En-tête x-current-user illisible ignoré")
        return None
    if not isinstance(profile, dict):
        return None
    return _user_from_claim(db, profile.get("id"))


def resolve_dev_fallback(request: Request, db: Session) -> Optional[User]:
    if not settings.DEV_AUTH_ENABLED:
        return None
    dev_flag = request.query_params.get("dev") or request.headers.get("x-dev-mode")
    if (dev_flag or "").lower() != "true":
        return None

    logger.warning("DEV MODE : identité enseignant fictive utilisée pour %s", request.url.path)
    return get_or_create_dev_user(db)


RESOLVERS: Sequence[Resolver] = (
    resolve_session,
    resolve_bearer_token,
    resolve_query_param,
    resolve_headers,
    resolve_dev_fallback,
)


def authenticate(request: Request, db: Session, resolvers: Iterable[Resolver] = RESOLVERS) -> User:
    """
    Retourne l'utilisateur du premier résolveur qui aboutit ; lève Unauthenticated sinon.
    Le nom du résolveur retenu est noté dans request.state.auth_strategy.
    """
    for resolver in resolvers:
        user = resolver(request, db)
        if user is not None:
            request.state.auth_strategy = resolver.__name__
            logger.debug("Requête %s identifiée par %s : utilisateur %s",
                         request.url.path, resolver.__name__, user.id)
            return user
    raise Unauthenticated()


def authorize_role(user: User, allowed_roles: Iterable[str]) -> User:
    """Vérifie que le rôle de l'utilisateur fait partie des rôles autorisés ; lève Forbidden sinon."""
    allowed = set(allowed_roles)
    if user.role not in allowed:
        logger.warning("Accès refusé à l'utilisateur %s (rôle %s, attendu %s)",
                       user.id, user.role, sorted(allowed))
        raise Forbidden()
    return user


def get_or_create_dev_user(db: Session) -> User:
    """Enseignant fictif du mode développement, créé au premier usage (mot de passe inutilisable)."""
    user = user_service.get_user_by_email(db, settings.DEV_USER_EMAIL)
    if user is not None:
        return user

    user = User(
        email=settings.DEV_USER_EMAIL.lower(),
        password_hash=hash_password(secrets.token_urlsafe(32)),
        first_name="Dev",
        last_name="Faculty",
        college_id=DEV_USER_COLLEGE_ID,
        role="faculty",
        department="Development",
        position="Developer",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Premier usage concurrent : l'autre requête a créé le compte
        db.rollback()
        existing = user_service.get_user_by_email(db, settings.DEV_USER_EMAIL)
        if existing is None:
            raise
        return existing
    db.refresh(user)
    logger.warning("DEV MODE : compte enseignant fictif créé (%s)", user.email)
    return user


def _user_from_claim(db: Session, raw_id) -> Optional[User]:
    """Résout un id brut (chaîne ou entier) ; tout ce qui n'est pas un entier positif est ignoré."""
    if isinstance(raw_id, bool) or raw_id is None:
        return None
    raw = str(raw_id).strip()
    if not raw.isdecimal() or int(raw) > MAX_USER_ID:
        return None
    return user_service.get_user_by_id(db, int(raw))
