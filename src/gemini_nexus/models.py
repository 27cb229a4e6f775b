"""Immutable conversation data model shared by the request and response paths."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
import time
from typing import Any
import uuid

from .exceptions import ConfigurationError


class Role(str, Enum):
    """Author of a conversation turn."""

    USER = "user"
    MODEL = "model"
    SYSTEM = "system"


class GeminiModel(str, Enum):
    """Model identifiers offered by the client."""

    FLASH = "gemini-2.5-flash"
    PRO = "gemini-3-pro-preview"
    FLASH_IMAGE = "gemini-2.5-flash-image"


MODEL_OPTIONS: tuple[tuple[str, str], ...] = (
    (GeminiModel.FLASH.value, "Gemini 2.5 Flash (Fast & Efficient)"),
    (GeminiModel.PRO.value, "Gemini 3.0 Pro (Reasoning & Complex)"),
)

SYSTEM_INSTRUCTION = (
    "You are Gemini Nexus, an advanced AI assistant.\n"
    "Your goal is to provide precise, technically accurate, and visually "
    "structured responses.\n"
    "When explaining code, use markdown code blocks.\n"
    "When analyzing images, be descriptive and focus on details.\n"
    "If the user asks about current events and search is enabled, synthesize "
    "the information clearly."
)


def new_message_id() -> str:
    """Return a short random id; unique within a session in practice."""
    return uuid.uuid4().hex[:12]


def now_ms() -> int:
    """Return the current wall clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Attachment:
    """An encoded image ready to be sent inline.

    ``preview_url`` is a local display handle and never leaves the client.
    """

    mime_type: str
    data: str
    preview_url: str = ""


@dataclass(frozen=True)
class UsageMetadata:
    prompt_tokens: int = 0
    candidates_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class WebSource:
    uri: str
    title: str = ""


@dataclass(frozen=True)
class GroundingChunk:
    web: WebSource | None = None


@dataclass(frozen=True)
class ResponseMetadata:
    """Optional response details; each field is ``None`` when the provider omits it."""

    usage: UsageMetadata | None = None
    grounding_chunks: tuple[GroundingChunk, ...] | None = None

    @property
    def web_sources(self) -> list[WebSource]:
        """Return the web citations in provider order, skipping non-web chunks."""
        if not self.grounding_chunks:
            return []
        return [chunk.web for chunk in self.grounding_chunks if chunk.web is not None]


@dataclass(frozen=True)
class Message:
    """A single conversation turn. Never mutated after creation."""

    id: str
    role: Role
    text: str
    attachments: tuple[Attachment, ...] = ()
    timestamp: int = 0
    is_error: bool = False
    metadata: ResponseMetadata | None = None

    @classmethod
    def create(
        cls,
        role: Role,
        text: str,
        attachments: tuple[Attachment, ...] | list[Attachment] = (),
        *,
        is_error: bool = False,
        metadata: ResponseMetadata | None = None,
    ) -> Message:
        """Build a message with a fresh id and timestamp."""
        return cls(
            id=new_message_id(),
            role=Role(role),
            text=text,
            attachments=tuple(attachments),
            timestamp=now_ms(),
            is_error=is_error,
            metadata=metadata,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly view; preview handles are not included."""
        payload: dict[str, Any] = {
            "id": self.id,
            "role": self.role.value,
            "text": self.text,
            "attachments": [
                {"mime_type": item.mime_type, "data": item.data}
                for item in self.attachments
            ],
            "timestamp": self.timestamp,
        }
        if self.is_error:
            payload["is_error"] = True
        if self.metadata is not None:
            meta: dict[str, Any] = {}
            if self.metadata.usage is not None:
                usage = self.metadata.usage
                meta["usage"] = {
                    "prompt_tokens": usage.prompt_tokens,
                    "candidates_tokens": usage.candidates_tokens,
                    "total_tokens": usage.total_tokens,
                }
            if self.metadata.grounding_chunks is not None:
                meta["grounding_chunks"] = [
                    {"web": {"uri": c.web.uri, "title": c.web.title}} if c.web else {}
                    for c in self.metadata.grounding_chunks
                ]
            payload["metadata"] = meta
        return payload


@dataclass(frozen=True)
class ModelConfig:
    """Per-turn generation settings chosen by the user."""

    model_name: str = GeminiModel.FLASH.value
    temperature: float = 0.7
    use_search: bool = False
    use_thinking: bool = False
    thinking_budget: int = 1024
    max_output_tokens: int | None = None

    @property
    def thinking_enabled(self) -> bool:
        """Return True when a thinking budget should be sent."""
        return self.use_thinking and self.thinking_budget > 0

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ModelConfig:
        """Build a ModelConfig from the [gemini] and [generation] config sections."""
        gemini_cfg = config.get("gemini", {})
        gen_cfg = config.get("generation", {})
        max_output = gen_cfg.get("max_output_tokens")
        return cls(
            model_name=str(gemini_cfg.get("model", GeminiModel.FLASH.value)),
            temperature=float(gen_cfg.get("temperature", 0.7)),
            use_search=bool(gen_cfg.get("use_search", False)),
            use_thinking=bool(gen_cfg.get("use_thinking", False)),
            thinking_budget=int(gen_cfg.get("thinking_budget", 1024)),
            max_output_tokens=int(max_output) if max_output else None,
        )

    def validate(self) -> ModelConfig:
        """Raise ConfigurationError for values the provider would reject."""
        if not self.model_name.strip():
            raise ConfigurationError("model_name must not be empty.")
        if not math.isfinite(self.temperature) or not 0.0 <= self.temperature <= 1.0:
            raise ConfigurationError(
                f"temperature must be within [0, 1], got {self.temperature!r}."
            )
        if isinstance(self.thinking_budget, bool) or not isinstance(
            self.thinking_budget, int
        ):
            raise ConfigurationError("thinking_budget must be an integer.")
        if self.thinking_budget < 0:
            raise ConfigurationError(
                f"thinking_budget must be >= 0, got {self.thinking_budget!r}."
            )
        if self.max_output_tokens is not None and self.max_output_tokens < 1:
            raise ConfigurationError("max_output_tokens must be positive when set.")
        return self


DEFAULT_MODEL_CONFIG = ModelConfig()
