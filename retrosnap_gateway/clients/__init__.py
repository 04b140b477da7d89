"""HTTP clients for external services."""

from .identity_client import IdentityClient
from .model_client import ModelClient, ModelResponse

__all__ = ["IdentityClient", "ModelClient", "ModelResponse"]
