"""
DynamoDB Account Store

Implementation of IAccountStore using DynamoDB for persistence.
All credit mutations are single conditional update_item calls, so DynamoDB
serializes them per item and no read-then-write window exists.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional

import aioboto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from retrosnap_gateway.config import settings
from retrosnap_gateway.domain.account import Account, normalize_email, require_lookup_key
from retrosnap_gateway.errors import InvalidArgument, NotFound, OutOfCredits, StoreUnavailable
from retrosnap_gateway.utils.masking import mask_email

logger = logging.getLogger(__name__)

EMAIL_INDEX_NAME = "email_key-index"


def _is_condition_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def item_to_account(item: Dict) -> Account:
    """Convert a DynamoDB item (numbers come back as Decimal) to an Account."""
    return Account(
        user_id=item["user_id"],
        email=item.get("email", ""),
        credits=int(item.get("credits", 0)),
        created_at=datetime.fromisoformat(item["created_at"]),
        last_seen_at=datetime.fromisoformat(item.get("last_seen_at", item["created_at"]))
    )


class DynamoDBAccountStore:
    """
    DynamoDB implementation of the account store.

    Table layout: hash key ``user_id``; global secondary index
    ``email_key-index`` on the normalized email for admin lookups.
    """

    def __init__(
        self,
        table_name: Optional[str] = None,
        endpoint: Optional[str] = None,
        region: Optional[str] = None,
        session: Optional[aioboto3.Session] = None
    ):
        self.table_name = table_name or settings.ACCOUNTS_TABLE_NAME
        self.endpoint = endpoint or settings.DYNAMODB_ENDPOINT
        self.region = region or settings.DYNAMODB_REGION
        self.access_key = settings.DYNAMODB_ACCESS_KEY
        self.secret_key = settings.DYNAMODB_SECRET_KEY
        self._session = session or aioboto3.Session()

    @asynccontextmanager
    async def _get_table(self):
        """Get table within a context manager to properly manage the session lifecycle."""
        async with self._session.resource(
            'dynamodb',
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key
        ) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            yield table

    async def get_or_create(self, user_id: str, email: str, initial_credits: int) -> Account:
        """
        Upsert the account in one call.

        ``if_not_exists`` seeds credits and created_at only on first sight,
        so concurrent first requests for the same id converge on one item.
        """
        now = datetime.now(timezone.utc).isoformat()

        try:
            async with self._get_table() as table:
                response = await table.update_item(
                    Key={'user_id': user_id},
                    UpdateExpression=(
                        "SET email = :email, email_key = :email_key, last_seen_at = :now, "
                        "credits = if_not_exists(credits, :initial), "
                        "created_at = if_not_exists(created_at, :now)"
                    ),
                    ExpressionAttributeValues={
                        ':email': email,
                        ':email_key': normalize_email(email),
                        ':now': now,
                        ':initial': initial_credits
                    },
                    ReturnValues="ALL_NEW"
                )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upsert account for {mask_email(email)}: {e}")
            raise StoreUnavailable()

        item = response["Attributes"]
        if item.get("created_at") == now:
            logger.info(f"Created account for {mask_email(email)} with {initial_credits} credits")
        return item_to_account(item)

    async def try_deduct_one(self, user_id: str) -> int:
        try:
            async with self._get_table() as table:
                response = await table.update_item(
                    Key={'user_id': user_id},
                    UpdateExpression="SET credits = credits - :one",
                    ConditionExpression="attribute_exists(user_id) AND credits > :zero",
                    ExpressionAttributeValues={':one': 1, ':zero': 0},
                    ReturnValues="UPDATED_NEW"
                )
        except ClientError as e:
            if _is_condition_failure(e):
                raise OutOfCredits()
            logger.error(f"Failed to deduct credit for account {user_id}: {e}")
            raise StoreUnavailable()
        except BotoCoreError as e:
            logger.error(f"Failed to deduct credit for account {user_id}: {e}")
            raise StoreUnavailable()

        return int(response["Attributes"]["credits"])

    async def set_credits(self, email_or_id: str, value: int) -> Account:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidArgument("Credits must be a non-negative integer.")

        require_lookup_key(email_or_id)
        user_id = await self._resolve_id(email_or_id)

        try:
            async with self._get_table() as table:
                response = await table.update_item(
                    Key={'user_id': user_id},
                    UpdateExpression="SET credits = :value",
                    ConditionExpression="attribute_exists(user_id)",
                    ExpressionAttributeValues={':value': value},
                    ReturnValues="ALL_NEW"
                )
        except ClientError as e:
            if _is_condition_failure(e):
                raise NotFound("User not found.")
            logger.error(f"Failed to set credits for account {user_id}: {e}")
            raise StoreUnavailable()
        except BotoCoreError as e:
            logger.error(f"Failed to set credits for account {user_id}: {e}")
            raise StoreUnavailable()

        return item_to_account(response["Attributes"])

    async def add_credits(self, email_or_id: str, amount: int) -> int:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidArgument("Amount must be a positive integer.")

        require_lookup_key(email_or_id)
        user_id = await self._resolve_id(email_or_id)

        try:
            async with self._get_table() as table:
                response = await table.update_item(
                    Key={'user_id': user_id},
                    UpdateExpression="ADD credits :amount",
                    ConditionExpression="attribute_exists(user_id)",
                    ExpressionAttributeValues={':amount': amount},
                    ReturnValues="UPDATED_NEW"
                )
        except ClientError as e:
            if _is_condition_failure(e):
                raise NotFound("User not found.")
            logger.error(f"Failed to add credits for account {user_id}: {e}")
            raise StoreUnavailable()
        except BotoCoreError as e:
            logger.error(f"Failed to add credits for account {user_id}: {e}")
            raise StoreUnavailable()

        return int(response["Attributes"]["credits"])

    async def list_all(self) -> List[Account]:
        items: List[Dict] = []

        try:
            async with self._get_table() as table:
                scan_kwargs: Dict = {}
                while True:
                    response = await table.scan(**scan_kwargs)
                    items.extend(response.get("Items", []))
                    last_key = response.get("LastEvaluatedKey")
                    if not last_key:
                        break
                    scan_kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to list accounts: {e}")
            raise StoreUnavailable()

        accounts = [item_to_account(item) for item in items]
        accounts.sort(key=lambda a: (normalize_email(a.email), a.user_id))
        return accounts

    async def find(self, email_or_id: str) -> Optional[Account]:
        if not normalize_email(email_or_id):
            return None

        try:
            async with self._get_table() as table:
                response = await table.get_item(Key={'user_id': email_or_id})
                if 'Item' in response:
                    return item_to_account(response['Item'])

                response = await table.query(
                    IndexName=EMAIL_INDEX_NAME,
                    KeyConditionExpression=Key('email_key').eq(normalize_email(email_or_id))
                )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to look up account: {e}")
            raise StoreUnavailable()

        items = sorted(response.get("Items", []), key=lambda i: i["user_id"])
        if not items:
            return None
        if len(items) > 1:
            logger.warning(
                f"{len(items)} accounts share {mask_email(email_or_id)}; using {items[0]['user_id']}"
            )
        return item_to_account(items[0])

    async def _resolve_id(self, email_or_id: str) -> str:
        account = await self.find(email_or_id)
        if account is None:
            raise NotFound("User not found.")
        return account.user_id
