"""Account domain entities"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict

from retrosnap_gateway.errors import InvalidArgument


def normalize_email(email: str) -> str:
    """Trimmed, lower-cased form used for lookups and admin matching."""
    return (email or "").strip().lower()


@dataclass(frozen=True)
class Identity:
    """Verified caller identity returned by the identity provider."""
    user_id: str
    email: str


@dataclass
class Account:
    """Persisted credit account. Admin status is derived per request, never stored."""
    user_id: str
    email: str
    credits: int
    created_at: datetime
    last_seen_at: datetime

    def to_dict(self) -> Dict:
        created = self.created_at.isoformat()
        last_seen = self.last_seen_at.isoformat()
        return {
            "id": self.user_id,
            "email": self.email,
            "credits": self.credits,
            "createdAt": created,
            "lastSeenAt": last_seen,
            "created_at": created,
            "last_seen_at": last_seen,
        }


def require_lookup_key(email_or_id: str) -> str:
    """Reject a blank email/id before it reaches a store lookup."""
    if not isinstance(email_or_id, str) or not normalize_email(email_or_id):
        raise InvalidArgument("Email is required.")
    return email_or_id
