"""
Erreurs métier levées par les services.

Chaque erreur porte le code HTTP et le message renvoyé au client ;
les routers et les dépendances les traduisent en HTTPException.
Elles héritent de ValueError comme les erreurs métier du reste des services.
"""

from typing import Optional


class DomainError(ValueError):
    status_code = 400
    message = "Bad request"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class DuplicateEmail(DomainError):
    message = "User with this email already exists"


class DuplicateCollegeId(DomainError):
    message = "This College ID is already in use"


class InvalidCredentials(DomainError):
    # Même message pour email inconnu et mot de passe faux (pas d'énumération de comptes)
    status_code = 401
    message = "Invalid email or password"


class Unauthenticated(DomainError):
    status_code = 401
    message = "Not authenticated"


class Forbidden(DomainError):
    status_code = 403
    message = "You do not have permission to perform this action"


class NotFound(DomainError):
    status_code = 404
    message = "Not found"


class RedemptionError(DomainError):
    """Échec du marquage de présence par code ; le router renvoie {success: false, message}."""


class InvalidCode(RedemptionError):
    message = "Invalid QR code"


class ExpiredCode(RedemptionError):
    message = "QR code has expired"


class AlreadyMarked(RedemptionError):
    message = "Attendance already marked"
