"""Admin account management endpoints."""

from typing import List

from fastapi import APIRouter, Depends
import logging

from retrosnap_gateway.dependencies import get_account_service
from retrosnap_gateway.domain.account import Identity
from retrosnap_gateway.middleware.auth import require_admin, require_configuration
from retrosnap_gateway.models.requests import AddCreditsRequest, AdjustCreditsRequest
from retrosnap_gateway.models.responses import AccountResponse, AdjustCreditsResponse
from retrosnap_gateway.services.account_service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api-proxy/admin",
    tags=["admin"],
    dependencies=[Depends(require_configuration)]
)


@router.get("/users", response_model=List[AccountResponse])
async def list_users(
    admin: Identity = Depends(require_admin),
    service: AccountService = Depends(get_account_service)
):
    """
    List all accounts ordered by email.

    Requires admin authentication.
    """
    return await service.list_accounts(admin)


@router.post("/credits", response_model=AdjustCreditsResponse)
async def adjust_credits(
    request: AdjustCreditsRequest,
    admin: Identity = Depends(require_admin),
    service: AccountService = Depends(get_account_service)
):
    """
    Set or increment an account's credits.

    Body ``{email, credits}`` sets the balance; ``{email, amount}`` adds to it.

    Requires admin authentication.
    """
    return await service.adjust_credits(
        admin=admin,
        email=request.email,
        credits=request.credits,
        amount=request.amount
    )


@router.post("/users/add-credits", response_model=AdjustCreditsResponse)
async def add_credits(
    request: AddCreditsRequest,
    admin: Identity = Depends(require_admin),
    service: AccountService = Depends(get_account_service)
):
    """
    Add credits to an account.

    Requires admin authentication.
    """
    return await service.adjust_credits(
        admin=admin,
        email=request.email,
        amount=request.amount
    )
