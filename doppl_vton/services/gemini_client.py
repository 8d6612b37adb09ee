"""Gemini REST client: one multi-part request in, one multi-part reply out."""

import logging
from typing import Any

import httpx

from ..config import GeminiConfig


logger = logging.getLogger(__name__)


class GeminiClient:
    """Client for the Gemini ``generateContent`` endpoint."""

    def __init__(self, config: GeminiConfig):
        self.config = config
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    async def check_connection(self, api_key: str) -> bool:
        """Verify the endpoint is reachable and accepts the key."""
        try:
            response = await self.client.get(
                f"{self.config.base_url}/{self.config.api_version}/models",
                headers={"x-goog-api-key": api_key},
            )
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def send_model_request(
        self,
        model: str,
        parts: list[dict[str, Any]],
        api_key: str,
    ) -> list[dict[str, Any]]:
        """Send the ordered request parts and return the reply's parts.

        Raises:
            RuntimeError: on any non-200 reply. The message carries the HTTP
                status and the provider's body (e.g. ``PERMISSION_DENIED``).
        """
        # No responseMimeType: mixed image + text output is expected
        payload = {"contents": [{"role": "user", "parts": parts}]}

        logger.info("Sending %d parts to %s", len(parts), model)
        response = await self.client.post(
            self.config.generate_url(model),
            json=payload,
            headers={"x-goog-api-key": api_key},
        )

        if response.status_code != 200:
            error_text = response.text
            raise RuntimeError(
                f"Gemini request failed ({response.status_code}): {error_text[:500]}"
            )

        result = response.json()
        candidates = result.get("candidates") or []
        if not candidates:
            logger.warning("Gemini returned no candidates: %s", result.get("promptFeedback"))
            return []
        content = candidates[0].get("content") or {}
        return content.get("parts") or []

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
