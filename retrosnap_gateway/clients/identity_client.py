"""HTTP client that verifies bearer credentials against the identity provider."""

import logging
from typing import Dict, Optional

import httpx

from retrosnap_gateway.domain.account import Identity
from retrosnap_gateway.errors import (
    GatewayTimeout,
    MalformedIdentity,
    Unauthenticated,
    UpstreamUnavailable
)

logger = logging.getLogger(__name__)

DEV_IDENTITY = Identity(user_id="dev-user", email="dev@example.com")


def parse_bearer(authorization: Optional[str]) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` value.

    Raises:
        Unauthenticated: header missing or not a bearer credential
    """
    if not authorization:
        raise Unauthenticated("Unauthorized: Missing Authorization header.")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthenticated("Unauthorized: Expected 'Bearer <token>'.")

    return parts[1]


class IdentityClient:
    """
    Resolves callers through the Auth0 ``/userinfo`` endpoint.

    The development identity is only reachable when ``dev_mode`` was set at
    construction time from the deployment context. Nothing a request carries
    can switch it on.
    """

    def __init__(
        self,
        domain: str,
        dev_mode: bool = False,
        dev_token: str = "dev-token",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize identity client.

        Args:
            domain: Identity provider domain (e.g., tenant.us.auth0.com)
            dev_mode: True only in a development deployment
            dev_token: Sentinel token that maps to the development identity
            timeout: Seconds before the provider call is abandoned
            client: Optional pre-built HTTP client (tests inject a mock transport)
        """
        self.domain = domain.strip().rstrip("/")
        self.dev_mode = dev_mode
        self.dev_token = dev_token
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def userinfo_url(self) -> str:
        if self.domain.startswith(("http://", "https://")):
            return f"{self.domain}/userinfo"
        return f"https://{self.domain}/userinfo"

    async def resolve(self, authorization: Optional[str]) -> Identity:
        """
        Verify the credential and return the caller's identity.

        Raises:
            Unauthenticated: missing/invalid credential (401)
            MalformedIdentity: provider returned no usable sub/email (400)
            GatewayTimeout: provider did not answer in time (504)
            UpstreamUnavailable: provider unreachable (500)
        """
        token = parse_bearer(authorization)

        if token == self.dev_token:
            if self.dev_mode:
                logger.debug("Development token accepted")
                return DEV_IDENTITY
            logger.warning("Development token presented outside dev context; rejecting")
            raise Unauthenticated()

        try:
            response = await self.client.get(
                self.userinfo_url,
                headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.TimeoutException as e:
            logger.error(f"Identity provider timed out: {type(e).__name__}")
            raise GatewayTimeout("Timed out while verifying your session. Please try again.")
        except httpx.RequestError as e:
            logger.error(f"Identity provider unreachable: {type(e).__name__}: {e}")
            raise UpstreamUnavailable("An internal error occurred during authentication.")

        if not response.is_success:
            logger.warning(f"Identity provider rejected token: HTTP {response.status_code}")
            raise Unauthenticated()

        try:
            claims: Dict = response.json()
        except ValueError:
            logger.warning("Identity provider returned a non-JSON body")
            raise MalformedIdentity()

        return self._identity_from_claims(claims)

    @staticmethod
    def _identity_from_claims(claims: Dict) -> Identity:
        if not isinstance(claims, dict):
            raise MalformedIdentity()

        subject = claims.get("sub")
        email = claims.get("email")

        if not isinstance(subject, str) or not subject.strip():
            raise MalformedIdentity("User identifier not found in token.")
        if not isinstance(email, str) or not email.strip():
            raise MalformedIdentity()

        return Identity(user_id=subject.strip(), email=email.strip())

    async def close(self):
        await self.client.aclose()
