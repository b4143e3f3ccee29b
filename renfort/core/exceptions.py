"""
Domain exceptions for Renfort.

Every error carries a human-readable ``message`` and the HTTP-style
``status_code`` a controller layer should answer with:

- NotFoundError (404): mission or referenced entity absent
- BadRequestError (400): invalid request or domain rule violation
- InternalError (500): unexpected failure; the message stays generic and
  the original exception is kept in ``cause`` for server-side logs
"""

from typing import Any, Optional


class RenfortError(Exception):
    """Base exception for all Renfort domain errors."""

    status_code: int = 500
    default_message: str = "Une erreur inattendue est survenue"
    error_code: str = "ERROR"

    def __init__(self, message: Optional[str] = None, **details: Any) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for an API error response."""
        return {
            "success": False,
            "message": self.message,
            "error_code": self.error_code,
            "status_code": self.status_code,
        }

    def __str__(self) -> str:
        return self.message


class NotFoundError(RenfortError):
    """Raised when a mission or other referenced entity does not exist."""

    status_code = 404
    default_message = "Ressource non trouvée"
    error_code = "NOT_FOUND"


class BadRequestError(RenfortError):
    """Raised when a request is invalid or breaks a domain rule."""

    status_code = 400
    default_message = "Requête invalide"
    error_code = "BAD_REQUEST"


class MissionClosedError(BadRequestError):
    """Raised when applying to a mission that is no longer OPEN."""

    default_message = "Cette mission n'accepte plus de candidatures"
    error_code = "MISSION_CLOSED"


class AlreadyAppliedError(BadRequestError):
    """Raised when a talent applies twice to the same mission."""

    default_message = "Vous avez déjà postulé à cette mission"
    error_code = "ALREADY_APPLIED"


class InvalidTransitionError(BadRequestError):
    """Raised when a mission status change is not allowed."""

    default_message = "Transition de statut non autorisée"
    error_code = "INVALID_TRANSITION"


class InternalError(RenfortError):
    """Raised for unexpected failures; wraps the original exception."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        cause: Optional[BaseException] = None,
        **details: Any,
    ) -> None:
        super().__init__(message, **details)
        self.cause = cause
