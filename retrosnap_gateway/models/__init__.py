"""Pydantic models for API requests and responses."""

from .requests import AdjustCreditsRequest, AddCreditsRequest
from .responses import (
    AccountResponse,
    AdjustCreditsResponse,
    AdminCheck,
    CreditsResponse,
    DebugInfoResponse,
    UserDataResponse
)

__all__ = [
    "AdjustCreditsRequest",
    "AddCreditsRequest",
    "AccountResponse",
    "AdjustCreditsResponse",
    "AdminCheck",
    "CreditsResponse",
    "DebugInfoResponse",
    "UserDataResponse"
]
