"""
Dependency Injection Container

Central container for dependency injection using dependency-injector library.
Wires the account store, HTTP clients and services together.
"""

from dependency_injector import containers, providers

from retrosnap_gateway.config import settings
from retrosnap_gateway.clients.identity_client import IdentityClient
from retrosnap_gateway.clients.model_client import ModelClient
from retrosnap_gateway.repositories.dynamodb_account_store import DynamoDBAccountStore
from retrosnap_gateway.repositories.memory_account_store import InMemoryAccountStore
from retrosnap_gateway.services.account_service import AccountService
from retrosnap_gateway.services.authorization import AuthorizationGate
from retrosnap_gateway.services.metering_service import MeteringService


class Container(containers.DeclarativeContainer):
    """
    Application dependency injection container.

    Usage:
        container = get_container()
        store = container.account_store()

        # Override for testing
        container.account_store.override(providers.Object(InMemoryAccountStore()))
    """

    # Configuration
    config = providers.Configuration()

    # ========== Clients ==========

    identity_client = providers.Singleton(
        IdentityClient,
        domain=settings.AUTH0_DOMAIN,
        dev_mode=settings.is_dev_context,
        dev_token=settings.DEV_TOKEN,
        timeout=settings.IDENTITY_TIMEOUT_SECONDS
    )

    model_client = providers.Singleton(
        ModelClient,
        base_url=settings.GEMINI_API_BASE_URL,
        api_key=settings.API_KEY,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS
    )

    # ========== Repositories ==========

    account_store = providers.Selector(
        config.storage_backend,
        dynamodb=providers.Singleton(DynamoDBAccountStore),
        memory=providers.Singleton(InMemoryAccountStore)
    )

    # ========== Services ==========

    authorization_gate = providers.Singleton(
        AuthorizationGate,
        admin_emails=settings.admin_emails
    )

    account_service = providers.Factory(
        AccountService,
        account_store=account_store,
        gate=authorization_gate,
        initial_credits=settings.INITIAL_CREDITS
    )

    metering_service = providers.Factory(
        MeteringService,
        account_store=account_store,
        model_client=model_client,
        initial_credits=settings.INITIAL_CREDITS
    )


# Global container instance
container = Container()


def get_container() -> Container:
    """
    Get the global container instance.

    Returns:
        Container: Global DI container
    """
    return container


def init_container() -> Container:
    """
    Initialize the container configuration from settings.

    Returns:
        Container: Initialized container
    """
    container.config.from_dict({
        "storage_backend": settings.STORAGE_BACKEND.strip().lower()
    })
    return container
