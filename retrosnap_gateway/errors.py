"""Error taxonomy for the gateway.

Every error carries the HTTP status it maps to. The API layer renders them
as ``{"error": message}`` through a single exception handler in ``main``.
"""
from typing import Dict, Optional


class GatewayError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = 500
    default_message: str = "An internal error occurred."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> Dict:
        return {"error": self.message}


class Unauthenticated(GatewayError):
    """Missing or invalid bearer credential. The client must log in again."""

    status_code = 401
    default_message = "Unauthorized: Invalid token."

    def to_body(self) -> Dict:
        return {"error": self.message, "reauthenticate": True}


class MalformedIdentity(GatewayError):
    """Identity provider accepted the token but returned unusable claims."""

    status_code = 400
    default_message = "User email not found in token."


class Forbidden(GatewayError):
    status_code = 403
    default_message = "Forbidden: Admin access required."


class InvalidArgument(GatewayError):
    status_code = 400
    default_message = "Invalid request."


class OutOfCredits(GatewayError):
    status_code = 402
    default_message = "You are out of credits."


class NotFound(GatewayError):
    status_code = 404
    default_message = "Not Found"


class UpstreamUnavailable(GatewayError):
    """Identity provider or model API could not be reached."""

    status_code = 500
    default_message = "An upstream service is unavailable."


class GatewayTimeout(UpstreamUnavailable):
    """An outbound call exceeded its time budget."""

    status_code = 504
    default_message = "The upstream service did not respond in time."


class ConfigurationError(GatewayError):
    status_code = 500
    default_message = "Server is not configured."


class StoreUnavailable(GatewayError):
    status_code = 500
    default_message = "An error occurred with the credit system."


class ClientDisconnected(GatewayError):
    """Caller went away before the upstream call. A committed reservation stays spent."""

    status_code = 499
    default_message = "Client closed request."
