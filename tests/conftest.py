"""Pytest configuration and shared fixtures for gateway tests."""
import os
from typing import Dict, List, Optional, Tuple

# Set test environment variables BEFORE importing app modules
os.environ["AUTH0_DOMAIN"] = "test-tenant.auth0.com"
os.environ["API_KEY"] = "test-model-api-key"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["CONTEXT"] = "production"
os.environ["INITIAL_CREDITS"] = "3"
os.environ.pop("LOGGING_HOST", None)

import pytest
from dependency_injector import providers

from retrosnap_gateway.clients.model_client import ModelResponse
from retrosnap_gateway.domain.account import Identity
from retrosnap_gateway.errors import Unauthenticated
from retrosnap_gateway.repositories.memory_account_store import InMemoryAccountStore

USER = Identity(user_id="auth0|user-1", email="user@example.com")
OTHER_USER = Identity(user_id="auth0|user-2", email="u@x.com")
ADMIN = Identity(user_id="auth0|admin", email="Admin@Example.com ")

TOKENS = {
    "user-token": USER,
    "other-token": OTHER_USER,
    "admin-token": ADMIN,
}

IMAGE_PAYLOAD = {
    "contents": {
        "parts": [
            {"inlineData": {"mimeType": "image/jpeg", "data": "aGVsbG8gd29ybGQ="}},
            {"text": "Reimagine this photo in the 1950s."}
        ]
    },
    "generationConfig": {"responseModalities": ["IMAGE", "TEXT"]}
}


def auth(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class FakeIdentityResolver:
    """Maps fixed bearer tokens to identities without network calls."""

    def __init__(self, tokens: Dict[str, Identity]):
        self.tokens = tokens
        self.calls: List[Optional[str]] = []

    async def resolve(self, authorization: Optional[str]) -> Identity:
        self.calls.append(authorization)
        if not authorization or not authorization.startswith("Bearer "):
            raise Unauthenticated("Unauthorized: Missing Authorization header.")
        identity = self.tokens.get(authorization[len("Bearer "):])
        if identity is None:
            raise Unauthenticated()
        return identity


class FakeModelClient:
    """Records forwarded payloads and returns a canned upstream response."""

    def __init__(self, response: Optional[ModelResponse] = None):
        self.response = response or ModelResponse(
            status_code=200,
            content=b'{"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "image/png", "data": "iVBORw0KGgo="}}]}}]}',
            content_type="application/json"
        )
        self.calls: List[Tuple[str, Dict]] = []

    async def generate_content(self, model: str, payload: Dict) -> ModelResponse:
        self.calls.append((model, payload))
        return self.response

    async def close(self):
        pass


@pytest.fixture
def memory_store():
    return InMemoryAccountStore()


@pytest.fixture
def identity_resolver():
    return FakeIdentityResolver(TOKENS)


@pytest.fixture
def model_client():
    return FakeModelClient()


@pytest.fixture
def overrides(memory_store, identity_resolver, model_client):
    """Swap container providers for in-memory fakes for the duration of a test."""
    from retrosnap_gateway.container import get_container

    container = get_container()
    container.account_store.override(providers.Object(memory_store))
    container.identity_client.override(providers.Object(identity_resolver))
    container.model_client.override(providers.Object(model_client))

    yield {
        "store": memory_store,
        "resolver": identity_resolver,
        "model": model_client
    }

    container.account_store.reset_override()
    container.identity_client.reset_override()
    container.model_client.reset_override()
