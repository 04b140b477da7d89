"""
Interface protocols for dependency inversion.

These protocols define abstract interfaces that services depend on,
enabling easy testing and swapping of implementations.
"""

from .protocols import (
    IAccountStore,
    IIdentityResolver,
    IModelClient,
    UpstreamResponse
)

__all__ = [
    "IAccountStore",
    "IIdentityResolver",
    "IModelClient",
    "UpstreamResponse"
]
