"""
Tokens d'accès signés (JWT HS256) remis au login, utilisables en "Authorization: Bearer".
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from collegeconnect.config import settings

logger = logging.getLogger(__name__)


def create_access_token(user_id: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[int]:
    """Retourne l'id utilisateur d'un token valide, None si signature, expiration ou contenu invalide."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError as exc:
        logger.debug("Token Bearer rejeté : %s", exc)
        return None

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.isdecimal():
        return None
    return int(subject)
