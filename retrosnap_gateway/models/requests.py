"""Pydantic request models for the gateway API."""

from typing import Optional

from pydantic import BaseModel, Field, StrictInt


class AdjustCreditsRequest(BaseModel):
    """Set (``credits``) or increment (``amount``) an account balance."""
    email: str = Field(..., min_length=1, description="Email or user id of the account")
    credits: Optional[StrictInt] = Field(None, ge=0, description="Absolute balance to set")
    amount: Optional[StrictInt] = Field(None, gt=0, description="Credits to add")


class AddCreditsRequest(BaseModel):
    """Increment an account balance."""
    email: str = Field(..., min_length=1, description="Email or user id of the account")
    amount: StrictInt = Field(..., gt=0, description="Credits to add")
