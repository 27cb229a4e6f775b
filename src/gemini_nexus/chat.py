"""Async Gemini client wrapper: one stateless generate-content call per turn."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
import logging
import os
import time
from typing import Any

from google import genai
from google.genai import errors as genai_errors
import httpx

from .exceptions import (
    ConfigurationError,
    ModelNotFoundError,
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderError,
    ProviderQuotaError,
)
from .models import SYSTEM_INSTRUCTION, Attachment, Message, ModelConfig
from .normalizer import error_message, normalize_response
from .request_builder import GenerationRequest, build_request

LOGGER = logging.getLogger(__name__)

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


def resolve_api_key(
    api_key: str | None = None, env: Mapping[str, str] | None = None
) -> str:
    """Return the credential used to build a client.

    An explicit key wins, then ``GEMINI_API_KEY``, then ``GOOGLE_API_KEY``.
    Raises ConfigurationError when none is set.
    """
    if api_key and api_key.strip():
        return api_key.strip()
    environ = os.environ if env is None else env
    for name in API_KEY_ENV_VARS:
        value = environ.get(name, "").strip()
        if value:
            return value
    raise ConfigurationError(
        "No Gemini API key configured. Set gemini.api_key or the "
        "GEMINI_API_KEY environment variable."
    )


def create_client(
    api_key: str | None = None, *, env: Mapping[str, str] | None = None
) -> genai.Client:
    """Construct a Gemini client from an explicit or environment credential."""
    return genai.Client(api_key=resolve_api_key(api_key, env))


class GeminiChat:
    """Send conversation turns to Gemini and always return a ``Message``."""

    def __init__(
        self,
        client: Any,
        *,
        system_instruction: str = SYSTEM_INSTRUCTION,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self.system_instruction = system_instruction
        self.timeout = timeout if timeout and timeout > 0 else None

        LOGGER.info(
            "chat.sdk.ready",
            extra={
                "event": "chat.sdk.ready",
                "sdk_version": getattr(genai, "__version__", "unknown"),
                "timeout": self.timeout,
            },
        )

    @classmethod
    def from_config(
        cls, config: dict[str, Any], client: Any | None = None
    ) -> GeminiChat:
        """Build a chat wrapper from the loaded configuration."""
        gemini_cfg = config.get("gemini", {})
        if client is None:
            client = create_client(str(gemini_cfg.get("api_key", "")) or None)
        return cls(
            client,
            system_instruction=str(
                gemini_cfg.get("system_instruction") or SYSTEM_INSTRUCTION
            ),
            timeout=gemini_cfg.get("timeout"),
        )

    async def list_models(self) -> list[str]:
        """Return model names that support generateContent."""
        names: list[str] = []
        pager = await self._client.aio.models.list()
        async for model in pager:
            name = getattr(model, "name", None)
            if not isinstance(name, str) or not name.strip():
                continue
            actions = getattr(model, "supported_actions", None)
            if actions is not None and "generateContent" not in actions:
                continue
            names.append(name.strip().removeprefix("models/"))
        return sorted(names)

    def _map_exception(self, exc: Exception, model: str) -> ProviderError:
        if isinstance(exc, ProviderError):
            return exc

        if isinstance(exc, TimeoutError):
            if self.timeout is None:
                return ProviderConnectionError("Gemini request timed out.")
            return ProviderConnectionError(
                f"Gemini request timed out after {self.timeout}s."
            )

        if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
            return ProviderConnectionError(f"Unable to reach the Gemini API: {exc}")

        if isinstance(exc, genai_errors.APIError):
            if exc.code in (401, 403):
                return ProviderAuthenticationError(
                    f"Gemini rejected the API key: {exc}"
                )
            if exc.code == 429:
                return ProviderQuotaError(f"Gemini quota or rate limit hit: {exc}")
            if exc.code == 404:
                return ModelNotFoundError(f"Model {model!r} was not found: {exc}")
            return ProviderError(f"Gemini API error: {exc}")

        detail = str(exc) or exc.__class__.__name__
        return ProviderError(detail)

    async def _generate(self, request: GenerationRequest) -> Any:
        call = self._client.aio.models.generate_content(
            model=request.model,
            contents=request.contents,
            config=request.config,
        )
        if self.timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.timeout)

    async def send(self, request: GenerationRequest) -> Message:
        """Run one request. Failures come back as an error-flagged message."""
        started = time.perf_counter()
        try:
            response = await self._generate(request)
            message = normalize_response(response)
        except Exception as exc:  # noqa: BLE001 - external API can fail in many ways.
            mapped_exc = self._map_exception(exc, request.model)
            LOGGER.warning(
                "chat.request.failed",
                extra={
                    "event": "chat.request.failed",
                    "model": request.model,
                    "error_type": mapped_exc.__class__.__name__,
                    "reason": str(mapped_exc),
                },
            )
            return error_message(mapped_exc)

        usage = message.metadata.usage if message.metadata else None
        LOGGER.info(
            "chat.request.complete",
            extra={
                "event": "chat.request.complete",
                "model": request.model,
                "elapsed_ms": int((time.perf_counter() - started) * 1000),
                "total_tokens": usage.total_tokens if usage else None,
            },
        )
        return message

    async def send_message(
        self,
        history: Sequence[Message],
        text: str,
        attachments: Sequence[Attachment],
        config: ModelConfig,
    ) -> Message:
        """Build the stateless request for a new turn and send it."""
        try:
            request = build_request(
                history,
                text,
                attachments,
                config,
                system_instruction=self.system_instruction,
            )
        except Exception as exc:  # noqa: BLE001 - malformed caller input.
            LOGGER.warning(
                "chat.request.build_failed",
                extra={"event": "chat.request.build_failed", "reason": str(exc)},
            )
            return error_message(exc)

        LOGGER.debug(
            "chat.request.start",
            extra={
                "event": "chat.request.start",
                "model": request.model,
                "turns": len(request.contents),
                "thinking": request.has_thinking,
                "search": request.has_search,
            },
        )
        return await self.send(request)
