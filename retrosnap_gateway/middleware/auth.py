"""Authentication dependencies for gateway routes."""
from typing import Optional

from fastapi import Depends, Header, Request

from retrosnap_gateway import logging_client
from retrosnap_gateway.config import settings
from retrosnap_gateway.dependencies import get_authorization_gate, get_identity_resolver
from retrosnap_gateway.domain.account import Identity
from retrosnap_gateway.errors import ConfigurationError
from retrosnap_gateway.interfaces.protocols import IIdentityResolver
from retrosnap_gateway.services.authorization import AuthorizationGate
from retrosnap_gateway.utils.masking import mask_email

logger = logging_client.setup_logger('gateway-auth')


async def require_configuration() -> None:
    """
    Fail closed when required settings are missing.

    Attached to every API router so no security check ever runs against
    an empty admin list or identity-provider domain.

    Raises:
        ConfigurationError: one or more required settings are unset (500)
    """
    missing = settings.missing_required()
    if missing:
        logger.error(f"Refusing request: missing configuration {', '.join(missing)}")
        raise ConfigurationError()


async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
    resolver: IIdentityResolver = Depends(get_identity_resolver)
) -> Identity:
    """
    Dependency that verifies the bearer credential and returns the caller.

    Identity always comes from the identity provider, never from the request
    body or other client-controlled fields.

    Raises:
        Unauthenticated, MalformedIdentity, GatewayTimeout, UpstreamUnavailable
    """
    identity = await resolver.resolve(authorization)
    request.state.identity = identity
    logger.info(f"{request.method} {request.url.path} by {mask_email(identity.email)}")
    return identity


async def require_admin(
    identity: Identity = Depends(get_current_identity),
    gate: AuthorizationGate = Depends(get_authorization_gate)
) -> Identity:
    """
    Dependency to require an admin caller.

    Raises:
        Forbidden: caller is not a configured admin (403)
    """
    return gate.require_admin(identity)
