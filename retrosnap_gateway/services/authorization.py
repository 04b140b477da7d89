"""Admin authorization derived from configured admin identities."""

import logging
from typing import Dict, Iterable, List

from retrosnap_gateway.domain.account import Identity, normalize_email
from retrosnap_gateway.errors import Forbidden
from retrosnap_gateway.utils.masking import mask_email

logger = logging.getLogger(__name__)


def is_admin(email: str, admin_emails: Iterable[str]) -> bool:
    """Case-insensitive, whitespace-trimmed membership test."""
    candidate = normalize_email(email)
    if not candidate:
        return False
    return any(candidate == normalize_email(admin) for admin in admin_emails)


class AuthorizationGate:
    """
    Decides admin status per request.

    Admin status is never persisted; it is recomputed from the configured
    list every time so a configuration change takes effect immediately.
    """

    ENV_VAR_NAME = "ADMIN_EMAIL"

    def __init__(self, admin_emails: Iterable[str]):
        self._admin_emails: List[str] = [e for e in admin_emails if normalize_email(e)]

    def is_admin(self, identity: Identity) -> bool:
        return is_admin(identity.email, self._admin_emails)

    def require_admin(self, identity: Identity) -> Identity:
        """
        Raises:
            Forbidden: caller is authenticated but not an admin (403)
        """
        if not self.is_admin(identity):
            logger.warning(f"Admin access denied for {mask_email(identity.email)}")
            raise Forbidden()
        return identity

    def admin_check_report(self, identity: Identity) -> Dict:
        """Non-secret description of the admin check for the debug page."""
        masked = ", ".join(mask_email(e) for e in self._admin_emails) or "<not set>"
        return {
            "envVarName": self.ENV_VAR_NAME,
            "envVarValueMasked": masked,
            "userValueName": "Your logged-in email",
            "userValue": identity.email,
            "matched": self.is_admin(identity)
        }
