"""
In-memory Account Store

Implementation of IAccountStore backed by a dict. Used for local development
(STORAGE_BACKEND=memory) and tests. Each account row is guarded by its own
asyncio.Lock; creation is guarded by a store-wide lock.
"""

import asyncio
import logging
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from retrosnap_gateway.domain.account import Account, normalize_email, require_lookup_key
from retrosnap_gateway.errors import InvalidArgument, NotFound, OutOfCredits
from retrosnap_gateway.utils.masking import mask_email

logger = logging.getLogger(__name__)


class InMemoryAccountStore:
    """Process-local account store with per-account serialization."""

    def __init__(self):
        self._accounts: Dict[str, Account] = {}
        self._row_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._create_lock = asyncio.Lock()

    def _resolve_id(self, email_or_id: str) -> Optional[str]:
        if email_or_id in self._accounts:
            return email_or_id
        key = normalize_email(email_or_id)
        matches = sorted(
            a.user_id for a in self._accounts.values() if normalize_email(a.email) == key
        )
        return matches[0] if matches else None

    async def get_or_create(self, user_id: str, email: str, initial_credits: int) -> Account:
        now = datetime.now(timezone.utc)

        async with self._create_lock:
            if user_id not in self._accounts:
                self._accounts[user_id] = Account(
                    user_id=user_id,
                    email=email,
                    credits=initial_credits,
                    created_at=now,
                    last_seen_at=now
                )
                logger.info(f"Created account for {mask_email(email)} with {initial_credits} credits")
                return replace(self._accounts[user_id])

        async with self._row_locks[user_id]:
            account = self._accounts[user_id]
            account.email = email
            account.last_seen_at = now
            return replace(account)

    async def try_deduct_one(self, user_id: str) -> int:
        async with self._row_locks[user_id]:
            account = self._accounts.get(user_id)
            if account is None or account.credits <= 0:
                raise OutOfCredits()
            account.credits -= 1
            return account.credits

    async def set_credits(self, email_or_id: str, value: int) -> Account:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidArgument("Credits must be a non-negative integer.")

        require_lookup_key(email_or_id)
        user_id = self._resolve_id(email_or_id)
        if user_id is None:
            raise NotFound("User not found.")

        async with self._row_locks[user_id]:
            account = self._accounts[user_id]
            account.credits = value
            return replace(account)

    async def add_credits(self, email_or_id: str, amount: int) -> int:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidArgument("Amount must be a positive integer.")

        require_lookup_key(email_or_id)
        user_id = self._resolve_id(email_or_id)
        if user_id is None:
            raise NotFound("User not found.")

        async with self._row_locks[user_id]:
            account = self._accounts[user_id]
            account.credits += amount
            return account.credits

    async def list_all(self) -> List[Account]:
        accounts = [replace(a) for a in self._accounts.values()]
        accounts.sort(key=lambda a: (normalize_email(a.email), a.user_id))
        return accounts

    async def find(self, email_or_id: str) -> Optional[Account]:
        user_id = self._resolve_id(email_or_id)
        if user_id is None:
            return None
        return replace(self._accounts[user_id])
