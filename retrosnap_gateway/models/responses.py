"""Pydantic response models for the gateway API."""

from pydantic import BaseModel, Field


class UserDataResponse(BaseModel):
    isAdmin: bool = Field(..., description="Whether the caller is a configured admin")
    credits: int = Field(..., description="Current credit balance")


class CreditsResponse(BaseModel):
    credits: int = Field(..., description="Current credit balance")


class AccountResponse(BaseModel):
    """Admin view of an account."""
    id: str
    email: str
    credits: int
    createdAt: str
    lastSeenAt: str
    created_at: str
    last_seen_at: str


class AdjustCreditsResponse(BaseModel):
    email: str
    credits: int = Field(..., description="Balance after the adjustment")


class AdminCheck(BaseModel):
    envVarName: str
    envVarValueMasked: str
    userValueName: str
    userValue: str
    matched: bool


class DebugInfoResponse(BaseModel):
    adminCheck: AdminCheck
