"""Business logic services for the gateway."""

from .account_service import AccountService
from .authorization import AuthorizationGate, is_admin
from .metering_service import MeteringService

__all__ = ["AccountService", "AuthorizationGate", "MeteringService", "is_admin"]
