"""Completion endpoint client - thin wrapper over an OpenAI-compatible chat API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from estrategia_enem.core.config import settings
from estrategia_enem.core.exceptions import ConfigurationError, UpstreamError
from estrategia_enem.core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_UPSTREAM_ERROR = "Erro na API de completions"


class CompletionClient:
    """Send chat-style prompts to the completion endpoint.

    One HTTP call per request, no retries: an upstream failure is surfaced to
    the caller immediately.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout if timeout is not None else settings.OPENAI_TIMEOUT_SECONDS
        # Tests inject httpx.MockTransport here
        self._transport = transport

    async def complete(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the text of the first choice.

        Raises:
            ConfigurationError: If no API key is configured
            UpstreamError: If the endpoint fails or answers with a non-2xx status
        """
        if not self.api_key:
            raise ConfigurationError("OpenAI API key não configurada")

        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        logger.info(f"Calling completion endpoint: model={self.model}, max_tokens={max_tokens}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Completion endpoint unreachable: {e}")
            raise UpstreamError(f"{DEFAULT_UPSTREAM_ERROR}: {e}") from e

        if response.is_error:
            message = _extract_error_message(response)
            logger.error(f"Completion endpoint error ({response.status_code}): {message}")
            raise UpstreamError(message, status_code=response.status_code)

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected completion payload: {response.text[:500]}")
            raise UpstreamError("Resposta inválida da API de completions") from e

        logger.info("Completion endpoint call successful")
        return content or ""


def _extract_error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of an error body, verbatim."""
    try:
        body: Any = response.json()
    except ValueError:
        return response.text or DEFAULT_UPSTREAM_ERROR

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return DEFAULT_UPSTREAM_ERROR


# Global client instance
_completion_client: Optional[CompletionClient] = None


def get_completion_client() -> CompletionClient:
    """Return the shared completion client (FastAPI dependency)."""
    global _completion_client
    if _completion_client is None:
        _completion_client = CompletionClient()
    return _completion_client
