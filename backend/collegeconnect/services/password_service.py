"""
Hachage et vérification des mots de passe.

Format courant : werkzeug, méthode scrypt ("scrypt:N:r:p$sel$hash"), sel aléatoire à chaque appel.
Format historique : comptes importés de l'ancien service Node, "<clé hex 64 octets>.<sel>"
(scrypt N=16384, r=8, p=1), vérifiés sans être réémis.
"""

import hashlib
import hmac
import logging

from werkzeug.security import check_password_hash, generate_password_hash

from collegeconnect.config import settings

logger = logging.getLogger(__name__)

_LEGACY_KEY_HEX_LENGTH = 128


def hash_password(password: str) -> str:
    """Retourne le credential stocké pour un mot de passe en clair."""
    return generate_password_hash(password, method=settings.PASSWORD_HASH_METHOD)


def verify_password(password: str, credential: str) -> bool:
    """
    Compare un mot de passe en clair à un credential stocké (comparaison à temps constant).
    Un credential vide, tronqué ou d'une méthode inconnue donne False, jamais une exception.
    """
    if not credential:
        return False

    try:
        if "$" not in credential:
            return _verify_legacy(password, credential)
        return check_password_hash(credential, password)
    except (ValueError, OverflowError):
        # Méthode ou paramètres illisibles (ex. "scrypt:abc$..."), mot de passe non encodable
        logger.warning("Credential au format invalide ignoré")
        return False


def _verify_legacy(password: str, credential: str) -> bool:
    key_hex, sep, salt = credential.partition(".")
    if not sep or not salt or len(key_hex) != _LEGACY_KEY_HEX_LENGTH:
        return False
    try:
        expected = bytes.fromhex(key_hex)
    except ValueError:
        return False

    derived = hashlib.scrypt(
        password.encode("utf-8"), salt=salt.encode("utf-8"), n=16384, r=8, p=1, dklen=64,
    )
    return hmac.compare_digest(derived, expected)
