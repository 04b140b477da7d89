"""Metered proxy to the image-generation model API."""

from fastapi import APIRouter, Depends, Request, Response
import logging

from retrosnap_gateway.dependencies import get_metering_service
from retrosnap_gateway.domain.account import Identity
from retrosnap_gateway.errors import InvalidArgument
from retrosnap_gateway.middleware.auth import get_current_identity, require_configuration
from retrosnap_gateway.services.metering_service import MeteringService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api-proxy",
    tags=["generation"],
    dependencies=[Depends(require_configuration)]
)


@router.post("/v1beta/models/{model}:generateContent")
async def generate_content(
    model: str,
    request: Request,
    identity: Identity = Depends(get_current_identity),
    service: MeteringService = Depends(get_metering_service)
):
    """
    Spend one credit and relay the model's response.

    Returns 402 when the balance is exhausted. Upstream errors are relayed
    with their own status and body; the credit is not refunded.
    """
    try:
        payload = await request.json()
    except ValueError:
        raise InvalidArgument("Request body must be valid JSON.")

    upstream = await service.generate(
        identity=identity,
        model=model,
        payload=payload,
        is_disconnected=request.is_disconnected
    )

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.content_type
    )
