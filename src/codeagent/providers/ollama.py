"""Ollama inference backend.

Talks to the Ollama REST API (POST {endpoint}/api/generate) with streaming
disabled and maps transport failures onto the BackendError family.
"""

import logging
import time
from typing import Any

import httpx

from codeagent.core.config.models import ModelProfile
from codeagent.core.exceptions import (
    BackendConnectionError,
    BackendError,
    BackendTimeoutError,
    ModelNotFoundError,
)
from codeagent.providers.base import HEALTH_CHECK_TIMEOUT, InferenceOptions

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate"


class OllamaBackend:
    """Blocking client for a local or remote Ollama server.

    Args:
        client: Optional shared httpx.Client. When None a short-lived client
            is created per request.

    Example:
        >>> backend = OllamaBackend()
        >>> backend.infer("Say hi", ModelProfile(name="qwen3:latest"))

    """

    def __init__(self, client: httpx.Client | None = None) -> None:
        self._client = client

    @staticmethod
    def build_request(prompt: str, profile: ModelProfile, options: InferenceOptions) -> dict[str, Any]:
        """Request body for /api/generate."""
        return {
            "model": profile.name,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": options.temperature if options.temperature is not None else profile.temperature,
                "num_predict": options.max_tokens if options.max_tokens is not None else profile.max_tokens,
            },
        }

    def _post(self, url: str, body: dict[str, Any], timeout: float) -> httpx.Response:
        if self._client is not None:
            return self._client.post(url, json=body, timeout=timeout)
        with httpx.Client(timeout=timeout) as client:
            return client.post(url, json=body)

    def _send(self, profile: ModelProfile, body: dict[str, Any], timeout: float) -> dict[str, Any]:
        url = f"{profile.endpoint}{GENERATE_PATH}"
        try:
            response = self._post(url, body, timeout)
        except httpx.ConnectError as e:
            raise BackendConnectionError(
                f"Cannot connect to Ollama at {profile.endpoint}. Is Ollama running?",
                model=profile.name,
            ) from e
        except httpx.TimeoutException as e:
            raise BackendTimeoutError(
                f"Ollama did not answer within {timeout:.0f}s for model '{profile.name}'",
                model=profile.name,
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(f"Ollama request failed: {e}", model=profile.name) from e

        if response.status_code == 404:
            raise ModelNotFoundError(
                f"Model '{profile.name}' not found on {profile.endpoint}. Try `ollama pull {profile.name}`.",
                model=profile.name,
            )
        if response.status_code >= 400:
            raise BackendError(
                f"Ollama API error ({response.status_code}): {response.text[:200]}",
                model=profile.name,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise BackendError("Invalid JSON response from Ollama", model=profile.name) from e
        if not isinstance(data, dict):
            raise BackendError("Invalid response from Ollama", model=profile.name)
        return data

    def infer(self, prompt: str, profile: ModelProfile, options: InferenceOptions | None = None) -> str:
        """Generate a completion.

        Args:
            prompt: Full prompt text.
            profile: Model profile supplying name, endpoint and defaults.
            options: Per-call overrides.

        Returns:
            Response text, stripped.

        Raises:
            ModelNotFoundError: HTTP 404 from the server.
            BackendConnectionError: Connection refused or unreachable.
            BackendTimeoutError: Request timed out.
            BackendError: Other HTTP errors or a body without "response".

        """
        options = options or InferenceOptions()
        body = self.build_request(prompt, profile, options)
        logger.debug(
            "Invoking Ollama: model=%s, temperature=%s, num_predict=%s, prompt_len=%d",
            profile.name,
            body["options"]["temperature"],
            body["options"]["num_predict"],
            len(prompt),
        )

        data = self._send(profile, body, options.timeout)
        text = data.get("response")
        if not isinstance(text, str) or not text:
            raise BackendError("Invalid response from Ollama: missing 'response'", model=profile.name)
        return text.strip()

    def health_check(self, profile: ModelProfile) -> int:
        """Probe the model with a one-token request.

        Returns:
            Response time in milliseconds.

        Raises:
            BackendError: Any failure, as for infer().

        """
        body = {"model": profile.name, "prompt": "test", "stream": False, "options": {"num_predict": 1}}
        start = time.perf_counter()
        self._send(profile, body, HEALTH_CHECK_TIMEOUT)
        return int((time.perf_counter() - start) * 1000)
