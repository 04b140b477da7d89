from .dynamodb_account_store import DynamoDBAccountStore
from .memory_account_store import InMemoryAccountStore

__all__ = ["DynamoDBAccountStore", "InMemoryAccountStore"]
