"""Unit tests for DynamoDBAccountStore with a mocked aioboto3 table."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from retrosnap_gateway.errors import InvalidArgument, NotFound, OutOfCredits, StoreUnavailable
from retrosnap_gateway.repositories.dynamodb_account_store import (
    EMAIL_INDEX_NAME,
    DynamoDBAccountStore,
    item_to_account,
)

CREATED = "2025-01-01T00:00:00+00:00"
SEEN = "2025-01-02T00:00:00+00:00"


def make_item(user_id="id-1", email="user@example.com", credits=3):
    return {
        "user_id": user_id,
        "email": email,
        "email_key": email.lower(),
        "credits": Decimal(credits),
        "created_at": CREATED,
        "last_seen_at": SEEN
    }


def client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "UpdateItem")


class FakeResource:
    """Async context manager standing in for ``session.resource('dynamodb')``."""

    def __init__(self, dynamodb):
        self.dynamodb = dynamodb

    async def __aenter__(self):
        return self.dynamodb

    async def __aexit__(self, *args):
        return False


@pytest.fixture
def table():
    return MagicMock()


@pytest.fixture
def store(table):
    dynamodb = MagicMock()
    dynamodb.Table = AsyncMock(return_value=table)
    session = MagicMock()
    session.resource = MagicMock(return_value=FakeResource(dynamodb))
    return DynamoDBAccountStore(table_name="accounts-test", session=session)


class TestItemConversion:

    def test_decimal_credits_become_int(self):
        account = item_to_account(make_item(credits=7))

        assert account.credits == 7
        assert isinstance(account.credits, int)
        assert account.created_at.year == 2025


class TestGetOrCreate:

    @pytest.mark.asyncio
    async def test_single_conditional_upsert(self, store, table):
        table.update_item = AsyncMock(return_value={"Attributes": make_item(credits=3)})

        account = await store.get_or_create("id-1", "User@Example.com", 3)

        assert account.credits == 3
        table.update_item.assert_called_once()
        kwargs = table.update_item.call_args.kwargs
        assert kwargs["Key"] == {"user_id": "id-1"}
        assert "if_not_exists(credits, :initial)" in kwargs["UpdateExpression"]
        assert "if_not_exists(created_at, :now)" in kwargs["UpdateExpression"]
        assert kwargs["ExpressionAttributeValues"][":email_key"] == "user@example.com"
        assert kwargs["ReturnValues"] == "ALL_NEW"

    @pytest.mark.asyncio
    async def test_store_failure_is_generic(self, store, table):
        table.update_item = AsyncMock(side_effect=client_error("ProvisionedThroughputExceededException"))

        with pytest.raises(StoreUnavailable) as exc_info:
            await store.get_or_create("id-1", "user@example.com", 3)

        assert "ProvisionedThroughput" not in exc_info.value.message


class TestTryDeductOne:

    @pytest.mark.asyncio
    async def test_conditional_decrement(self, store, table):
        table.update_item = AsyncMock(return_value={"Attributes": {"credits": Decimal(2)}})

        assert await store.try_deduct_one("id-1") == 2

        kwargs = table.update_item.call_args.kwargs
        assert kwargs["UpdateExpression"] == "SET credits = credits - :one"
        assert "credits > :zero" in kwargs["ConditionExpression"]
        assert "attribute_exists(user_id)" in kwargs["ConditionExpression"]

    @pytest.mark.asyncio
    async def test_condition_failure_is_out_of_credits(self, store, table):
        table.update_item = AsyncMock(side_effect=client_error("ConditionalCheckFailedException"))

        with pytest.raises(OutOfCredits):
            await store.try_deduct_one("id-1")

    @pytest.mark.asyncio
    async def test_other_errors_are_store_unavailable(self, store, table):
        table.update_item = AsyncMock(side_effect=client_error("InternalServerError"))

        with pytest.raises(StoreUnavailable):
            await store.try_deduct_one("id-1")


class TestAdminOperations:

    @pytest.mark.asyncio
    async def test_add_credits_uses_atomic_add(self, store, table):
        table.get_item = AsyncMock(return_value={"Item": make_item(credits=2)})
        table.update_item = AsyncMock(return_value={"Attributes": {"credits": Decimal(7)}})

        assert await store.add_credits("id-1", 5) == 7

        kwargs = table.update_item.call_args.kwargs
        assert kwargs["UpdateExpression"] == "ADD credits :amount"
        assert kwargs["ExpressionAttributeValues"] == {":amount": 5}

    @pytest.mark.asyncio
    async def test_set_credits_resolves_email_through_index(self, store, table):
        table.get_item = AsyncMock(return_value={})
        table.query = AsyncMock(return_value={"Items": [make_item(user_id="id-9", email="u@x.com")]})
        table.update_item = AsyncMock(return_value={"Attributes": make_item(user_id="id-9", email="u@x.com", credits=10)})

        account = await store.set_credits("U@x.com", 10)

        assert account.user_id == "id-9"
        assert account.credits == 10
        assert table.query.call_args.kwargs["IndexName"] == EMAIL_INDEX_NAME
        assert table.update_item.call_args.kwargs["Key"] == {"user_id": "id-9"}

    @pytest.mark.asyncio
    async def test_unknown_account_not_found(self, store, table):
        table.get_item = AsyncMock(return_value={})
        table.query = AsyncMock(return_value={"Items": []})
        table.update_item = AsyncMock()

        with pytest.raises(NotFound):
            await store.add_credits("nobody@example.com", 1)

        table.update_item.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_values_never_reach_dynamodb(self, store, table):
        table.update_item = AsyncMock()

        with pytest.raises(InvalidArgument):
            await store.set_credits("id-1", -1)
        with pytest.raises(InvalidArgument):
            await store.add_credits("id-1", 0)

        table.update_item.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["", "   "])
    async def test_blank_email_is_rejected_before_any_lookup(self, store, table, email):
        table.get_item = AsyncMock()
        table.query = AsyncMock()
        table.update_item = AsyncMock()

        with pytest.raises(InvalidArgument):
            await store.add_credits(email, 1)
        with pytest.raises(InvalidArgument):
            await store.set_credits(email, 1)

        assert await store.find(email) is None
        table.get_item.assert_not_called()
        table.query.assert_not_called()
        table.update_item.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_all_paginates_and_sorts(self, store, table):
        table.scan = AsyncMock(side_effect=[
            {"Items": [make_item("id-2", "bob@example.com")], "LastEvaluatedKey": {"user_id": "id-2"}},
            {"Items": [make_item("id-1", "alice@example.com")]}
        ])

        accounts = await store.list_all()

        assert [a.email for a in accounts] == ["alice@example.com", "bob@example.com"]
        assert table.scan.call_count == 2
        assert table.scan.call_args_list[1].kwargs == {"ExclusiveStartKey": {"user_id": "id-2"}}
