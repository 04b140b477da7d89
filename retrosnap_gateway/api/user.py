"""Per-user read endpoints."""

from fastapi import APIRouter, Depends
import logging

from retrosnap_gateway.dependencies import get_account_service, get_authorization_gate
from retrosnap_gateway.domain.account import Identity
from retrosnap_gateway.middleware.auth import get_current_identity, require_configuration
from retrosnap_gateway.models.responses import CreditsResponse, DebugInfoResponse, UserDataResponse
from retrosnap_gateway.services.account_service import AccountService
from retrosnap_gateway.services.authorization import AuthorizationGate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api-proxy",
    tags=["user"],
    dependencies=[Depends(require_configuration)]
)


@router.get("/user-data", response_model=UserDataResponse)
async def get_user_data(
    identity: Identity = Depends(get_current_identity),
    service: AccountService = Depends(get_account_service)
):
    """
    Return the caller's balance and admin flag.

    Creates the account with the initial grant on first call. Safe to poll.
    """
    return await service.get_user_data(identity)


@router.get("/credits", response_model=CreditsResponse)
async def get_credits(
    identity: Identity = Depends(get_current_identity),
    service: AccountService = Depends(get_account_service)
):
    """Return the caller's balance (older clients)."""
    account = await service.touch(identity)
    return {"credits": account.credits}


@router.get("/debug-info", response_model=DebugInfoResponse)
async def get_debug_info(
    identity: Identity = Depends(get_current_identity),
    gate: AuthorizationGate = Depends(get_authorization_gate)
):
    """Report whether the caller matches the configured admin, with the admin value masked."""
    return {"adminCheck": gate.admin_check_report(identity)}
