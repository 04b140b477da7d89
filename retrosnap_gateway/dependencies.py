"""FastAPI dependency functions backed by the DI container.

Routers depend on these functions rather than on the container directly,
so tests can swap implementations with ``container.<provider>.override``.
"""

from retrosnap_gateway.container import get_container
from retrosnap_gateway.interfaces.protocols import IAccountStore, IIdentityResolver
from retrosnap_gateway.services.account_service import AccountService
from retrosnap_gateway.services.authorization import AuthorizationGate
from retrosnap_gateway.services.metering_service import MeteringService


def get_identity_resolver() -> IIdentityResolver:
    """
    Get identity resolver from container.

    Returns:
        IIdentityResolver: Identity provider client
    """
    return get_container().identity_client()


def get_account_store() -> IAccountStore:
    return get_container().account_store()


def get_authorization_gate() -> AuthorizationGate:
    return get_container().authorization_gate()


def get_account_service() -> AccountService:
    """
    Get account service from container.

    Wired with the configured account store and authorization gate.

    Returns:
        AccountService: Account lookups and admin credit operations
    """
    return get_container().account_service()


def get_metering_service() -> MeteringService:
    """
    Get metering service from container.

    Wired with the configured account store and the model API client.

    Returns:
        MeteringService: Credit-gated access to the model API
    """
    return get_container().metering_service()
