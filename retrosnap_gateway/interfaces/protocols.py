"""
Interface Protocols for Dependency Inversion Principle

Defines abstract interfaces that services depend on, allowing for easy testing
and swapping of implementations:
- High-level modules (services, routers) depend on these protocols
- Storage and HTTP adapters implement them
"""

from typing import Protocol, List, Optional, Dict, Any

from retrosnap_gateway.domain.account import Account, Identity


class IAccountStore(Protocol):
    """
    Interface for credit account persistence.

    Every mutation is atomic per account. Implementations must never perform
    an unguarded read-then-write on ``credits``.

    Implementations:
    - DynamoDBAccountStore (conditional update_item)
    - InMemoryAccountStore (per-account asyncio locks; dev and tests)
    """

    async def get_or_create(
        self,
        user_id: str,
        email: str,
        initial_credits: int
    ) -> Account:
        """Return the account for ``user_id``, creating it on first sight."""
        ...

    async def try_deduct_one(self, user_id: str) -> int:
        """Decrement by one if positive and return the new balance.

        Raises:
            OutOfCredits: balance is zero; nothing was changed.
        """
        ...

    async def set_credits(self, email_or_id: str, value: int) -> Account:
        """Set an absolute balance (admin only)."""
        ...

    async def add_credits(self, email_or_id: str, amount: int) -> int:
        """Atomically add ``amount`` and return the new balance (admin only)."""
        ...

    async def list_all(self) -> List[Account]:
        """All accounts ordered by email ascending, then id."""
        ...

    async def find(self, email_or_id: str) -> Optional[Account]:
        """Look an account up by id, falling back to email."""
        ...


class IIdentityResolver(Protocol):
    """
    Interface for turning a bearer credential into a verified identity.

    Implementations:
    - IdentityClient (Auth0 /userinfo over HTTP)
    """

    async def resolve(self, authorization: Optional[str]) -> Identity:
        """Verify the Authorization header value and return the caller identity."""
        ...


class IModelClient(Protocol):
    """
    Interface for the upstream image-generation API.

    Implementations:
    - ModelClient (Gemini generateContent over HTTP)
    """

    async def generate_content(self, model: str, payload: Dict[str, Any]) -> "UpstreamResponse":
        """Forward a generation request and return the raw upstream response."""
        ...


class UpstreamResponse(Protocol):
    status_code: int
    content: bytes
    content_type: str
