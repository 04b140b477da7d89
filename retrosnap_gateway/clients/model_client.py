"""HTTP client for the upstream image-generation API (Gemini generateContent)."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from retrosnap_gateway.errors import GatewayTimeout, InvalidArgument, UpstreamUnavailable

logger = logging.getLogger(__name__)

MODEL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


def validate_model_name(model: str) -> str:
    """
    Raises:
        InvalidArgument: name is not a plain model identifier (400)
    """
    if not isinstance(model, str) or not MODEL_NAME_PATTERN.match(model):
        raise InvalidArgument("Unknown model.")
    return model


@dataclass
class ModelResponse:
    """Raw upstream response, relayed to the caller as-is."""
    status_code: int
    content: bytes
    content_type: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ModelClient:
    """
    Forwards generation requests to the model API.

    The API key is attached server-side and never reaches the browser.
    No retries happen here; each call is a single attempt.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize model client.

        Args:
            base_url: API root (e.g., https://generativelanguage.googleapis.com)
            api_key: Server-held API key
            timeout: Seconds before the call is abandoned
            client: Optional pre-built HTTP client (tests inject a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json"
        }

    def generate_url(self, model: str) -> str:
        validate_model_name(model)
        return f"{self.base_url}/v1beta/models/{model}:generateContent"

    async def generate_content(self, model: str, payload: Dict[str, Any]) -> ModelResponse:
        """
        POST the payload to ``models/<model>:generateContent``.

        Returns:
            ModelResponse: upstream status, body bytes and content type,
            for both success and error statuses

        Raises:
            GatewayTimeout: upstream did not answer in time (504)
            UpstreamUnavailable: upstream unreachable (500)
        """
        url = self.generate_url(model)

        try:
            response = await self.client.post(
                url,
                headers=self._get_headers(),
                content=json.dumps(payload)
            )
        except httpx.TimeoutException as e:
            logger.error(f"Model API timed out for {model}: {type(e).__name__}")
            raise GatewayTimeout("The AI model did not respond in time.")
        except httpx.RequestError as e:
            logger.error(f"Model API unreachable for {model}: {type(e).__name__}")
            raise UpstreamUnavailable("An internal error occurred while contacting the AI model.")

        content_type = response.headers.get("content-type", "application/json" if response.is_success else "text/plain")

        if not response.is_success:
            logger.warning(f"Model API error for {model}: HTTP {response.status_code}")

        return ModelResponse(
            status_code=response.status_code,
            content=response.content,
            content_type=content_type
        )

    async def close(self):
        await self.client.aclose()
