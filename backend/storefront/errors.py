"""Error taxonomy shared by services and the HTTP layer."""

from typing import Any, Dict


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationError(StorefrontError):
    status_code = 400


class NotFound(StorefrontError):
    status_code = 404


class InvalidState(StorefrontError):
    status_code = 400


class StorageError(StorefrontError):
    status_code = 500


class Conflict(StorefrontError):
    status_code = 409


class AuthenticationFailed(StorefrontError):
    status_code = 401


class EmailNotVerified(StorefrontError):
    status_code = 403


class MailDeliveryError(Exception):
    """Verification mail could not be handed to the SMTP server."""
