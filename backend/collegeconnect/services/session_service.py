"""
Gestion des sessions de connexion côté serveur (table user_sessions).

Le cookie ne contient qu'un identifiant aléatoire (sid). Une session expire après
SESSION_MAX_AGE_DAYS d'inactivité ou à la déconnexion.
"""

import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from collegeconnect.config import settings
from collegeconnect.models.user import User, UserSession
from collegeconnect.timeutils import utcnow

logger = logging.getLogger(__name__)


def session_max_age() -> timedelta:
    return timedelta(days=settings.SESSION_MAX_AGE_DAYS)


def login(db: Session, user: User) -> UserSession:
    """Ouvre une nouvelle session pour l'utilisateur. Chaque appel crée une session indépendante."""
    now = utcnow()
    user_session = UserSession(
        sid=secrets.token_urlsafe(32),
        user_id=user.id,
        created_at=now,
        last_seen_at=now,
        expires_at=now + session_max_age(),
    )
    db.add(user_session)
    db.commit()

    logger.info("Session ouverte pour l'utilisateur %s", user.id)
    return user_session


def get_session_user(db: Session, sid: Optional[str]) -> Optional[User]:
    """
    Retourne l'utilisateur lié au sid, ou None (sid absent, inconnu ou expiré).
    Une session valide voit son expiration repoussée ; une session expirée est supprimée.
    """
    if not sid:
        return None

    user_session = db.get(UserSession, sid)
    if user_session is None:
        return None

    now = utcnow()
    if user_session.expires_at <= now:
        db.delete(user_session)
        db.commit()
        return None

    user = db.get(User, user_session.user_id)
    if user is None:
        return None

    user_session.last_seen_at = now
    user_session.expires_at = now + session_max_age()
    db.commit()
    return user


def logout(db: Session, sid: Optional[str]) -> None:
    """Ferme la session ; sans effet si elle n'existe pas."""
    if not sid:
        return
    user_session = db.get(UserSession, sid)
    if user_session is not None:
        user_id = user_session.user_id
        db.delete(user_session)
        db.commit()
        logger.info("Session fermée pour l'utilisateur %s", user_id)


def purge_expired_sessions(db: Session) -> int:
    """Supprime les sessions expirées. Retourne le nombre de lignes supprimées."""
    result = db.execute(delete(UserSession).where(UserSession.expires_at <= utcnow()))
    db.commit()
    return result.rowcount or 0
