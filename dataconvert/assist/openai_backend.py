"""
Assist backend for OpenAI-compatible chat completions endpoints.
"""

import logging
from typing import Optional

import httpx

from ..config import AssistConfig
from ..exceptions import AssistedPathFailure
from .base import AssistBackend, AssistRequest
from .prompts import build_messages

logger = logging.getLogger(__name__)


class OpenAIAssistBackend(AssistBackend):
    """
    Calls ``{base_url}/chat/completions`` once per request.

    The HTTP client is normally the shared one created in the application
    lifespan; without one, a short-lived client is opened per call.
    """

    name = "openai"

    def __init__(self, config: AssistConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.client = client

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url}/chat/completions"

    def _check_credential(self) -> None:
        api_key = self.config.api_key
        if not api_key or not api_key.strip():
            raise AssistedPathFailure("Assist API key is empty")
        if any(ch.isspace() for ch in api_key) or not api_key.isascii():
            raise AssistedPathFailure("Assist API key is malformed")

    async def try_convert(self, request: AssistRequest) -> str:
        self._check_credential()

        payload = {
            "model": self.config.model,
            "messages": build_messages(request),
        }
        headers = {"Authorization": f"Bearer {self.config.api_key}"}

        logger.debug(f"Calling assist backend for {request!r}")
        try:
            if self.client is not None:
                response = await self.client.post(
                    self.endpoint, json=payload, headers=headers, timeout=self.config.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                    response = await client.post(self.endpoint, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise AssistedPathFailure(
                f"Assist backend timed out after {self.config.timeout}s",
                details={"error": str(e)}
            ) from e
        except httpx.HTTPError as e:
            raise AssistedPathFailure(
                f"Assist backend request failed: {e}",
                details={"error": str(e)}
            ) from e

        if not response.is_success:
            raise AssistedPathFailure(
                f"Assist backend returned HTTP {response.status_code}",
                details={"status_code": response.status_code, "body": response.text[:500]}
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AssistedPathFailure(
                f"Assist backend returned a malformed body: {e}",
                details={"body": response.text[:500]}
            ) from e

        if not isinstance(content, str) or not content.strip():
            raise AssistedPathFailure("Assist backend returned an empty answer")

        return content.strip()
