"""Account reads and admin balance adjustments."""

from typing import Dict, List, Optional
import logging

from retrosnap_gateway.domain.account import Account, Identity
from retrosnap_gateway.errors import GatewayError, InvalidArgument
from retrosnap_gateway.interfaces.protocols import IAccountStore
from retrosnap_gateway.middleware.audit_log import log_admin_action
from retrosnap_gateway.services.authorization import AuthorizationGate
from retrosnap_gateway.utils.masking import mask_email

logger = logging.getLogger(__name__)


class AccountService:
    """
    Business logic for account lookups and admin credit operations.

    Depends on the IAccountStore interface, so the DynamoDB and in-memory
    adapters are interchangeable and tests can pass a mock store.
    """

    def __init__(
        self,
        account_store: IAccountStore,
        gate: AuthorizationGate,
        initial_credits: int
    ):
        """
        Initialize account service with dependencies.

        Args:
            account_store: Store interface for account persistence
            gate: Admin authorization gate built from settings
            initial_credits: Balance granted to a first-time account
        """
        self.account_store = account_store
        self.gate = gate
        self.initial_credits = initial_credits

    async def touch(self, identity: Identity) -> Account:
        """Resolve (and lazily create) the caller's account."""
        return await self.account_store.get_or_create(
            identity.user_id,
            identity.email,
            self.initial_credits
        )

    async def get_user_data(self, identity: Identity) -> Dict:
        account = await self.touch(identity)
        admin = self.gate.is_admin(identity)
        logger.info(f"User data for {mask_email(identity.email)}: credits={account.credits}, admin={admin}")
        return {"isAdmin": admin, "credits": account.credits}

    async def list_accounts(self, admin: Identity) -> List[Dict]:
        self.gate.require_admin(admin)
        accounts = await self.account_store.list_all()
        logger.info(f"Admin {mask_email(admin.email)} listed {len(accounts)} accounts")
        return [a.to_dict() for a in accounts]

    async def adjust_credits(
        self,
        admin: Identity,
        email: str,
        credits: Optional[int] = None,
        amount: Optional[int] = None
    ) -> Dict:
        """
        Set (``credits``) or increment (``amount``) an account's balance.

        Exactly one of ``credits`` and ``amount`` must be given.

        Returns:
            dict: {"email": ..., "credits": new balance}
        """
        self.gate.require_admin(admin)

        if (credits is None) == (amount is None):
            raise InvalidArgument("Provide exactly one of 'credits' or 'amount'.")

        admin_user = mask_email(admin.email)
        action = "set_credits" if credits is not None else "add_credits"
        parameters = {
            "email": mask_email(email),
            "credits": credits,
            "amount": amount
        }

        try:
            if credits is not None:
                account = await self.account_store.set_credits(email, credits)
                new_balance = account.credits
            else:
                new_balance = await self.account_store.add_credits(email, amount)

        except GatewayError as e:
            await log_admin_action(
                admin_user=admin_user,
                action=action,
                parameters=parameters,
                result=f"failure: {e.message}"
            )
            raise

        await log_admin_action(
            admin_user=admin_user,
            action=action,
            parameters=parameters,
            result="success"
        )

        logger.info(f"Admin {admin_user} {action} on {mask_email(email)}. New balance: {new_balance}")

        return {"email": email, "credits": new_balance}
