"""Metered access to the image-generation API."""

import logging
from typing import Any, Awaitable, Callable, Optional

from retrosnap_gateway.clients.model_client import ModelResponse, validate_model_name
from retrosnap_gateway.domain.account import Identity
from retrosnap_gateway.errors import ClientDisconnected, OutOfCredits
from retrosnap_gateway.interfaces.protocols import IAccountStore, IModelClient
from retrosnap_gateway.utils.masking import mask_email
from retrosnap_gateway.utils.payload import validate_generation_payload

logger = logging.getLogger(__name__)

DisconnectCheck = Callable[[], Awaitable[bool]]


class MeteringService:
    """
    Gates the model API on the caller's credit balance.

    Sequence per request: validate payload, reserve one credit atomically,
    call upstream once, relay the response. A reserved credit is never
    refunded, whether upstream fails or the client disconnects.
    """

    def __init__(
        self,
        account_store: IAccountStore,
        model_client: IModelClient,
        initial_credits: int
    ):
        self.account_store = account_store
        self.model_client = model_client
        self.initial_credits = initial_credits

    async def generate(
        self,
        identity: Identity,
        model: str,
        payload: Any,
        is_disconnected: Optional[DisconnectCheck] = None
    ) -> ModelResponse:
        """
        Reserve a credit and forward the request upstream.

        Args:
            identity: Verified caller
            model: Model name from the route
            payload: Parsed JSON body
            is_disconnected: Optional coroutine reporting client cancellation

        Returns:
            ModelResponse: upstream status/body, including non-2xx

        Raises:
            InvalidArgument: bad model name or malformed payload; no credit touched
            OutOfCredits: balance exhausted; no credit touched
            ClientDisconnected: caller left before the upstream call
        """
        user = mask_email(identity.email)
        validate_model_name(model)
        normalized, images = validate_generation_payload(payload)

        if is_disconnected and await is_disconnected():
            logger.info(f"Client {user} disconnected before reservation; nothing charged")
            raise ClientDisconnected()

        # Make sure the row exists so a first-time caller gets the initial grant.
        await self.account_store.get_or_create(identity.user_id, identity.email, self.initial_credits)

        try:
            remaining = await self.account_store.try_deduct_one(identity.user_id)
        except OutOfCredits:
            logger.info(f"Generation refused for {user}: out of credits")
            raise

        logger.info(
            f"Reserved 1 credit for {user} ({remaining} left); "
            f"{len(images)} image(s), ~{sum(i.size_bytes for i in images) // 1024} KiB"
        )

        if is_disconnected and await is_disconnected():
            logger.info(f"Client {user} disconnected after reservation; skipping upstream call")
            raise ClientDisconnected()

        response = await self.model_client.generate_content(model, normalized)

        if response.ok:
            logger.info(f"Generation succeeded for {user} on {model}")
        else:
            logger.warning(
                f"Generation failed upstream for {user} on {model}: HTTP {response.status_code} (credit not refunded)"
            )

        return response
