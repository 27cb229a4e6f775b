"""Assemble a stateless generate-content request from history and a new turn."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from google.genai import types

from .models import SYSTEM_INSTRUCTION, Attachment, Message, ModelConfig, Role
from .projection import build_parts, project_history


@dataclass(frozen=True)
class GenerationRequest:
    """Everything needed for one ``generate_content`` call."""

    model: str
    contents: list[types.Content]
    config: types.GenerateContentConfig

    @property
    def has_thinking(self) -> bool:
        return self.config.thinking_config is not None

    @property
    def has_search(self) -> bool:
        return bool(self.config.tools)


def build_generation_config(
    config: ModelConfig, system_instruction: str = SYSTEM_INSTRUCTION
) -> types.GenerateContentConfig:
    """Merge sampling, thinking and search settings into one generation config.

    ``max_output_tokens`` is left unset unless configured, so a thinking model
    can spend the remaining context on reasoning.
    """
    kwargs: dict[str, Any] = {
        "system_instruction": system_instruction,
        "temperature": config.temperature,
    }
    if config.use_thinking and config.thinking_budget > 0:
        kwargs["thinking_config"] = types.ThinkingConfig(
            thinking_budget=config.thinking_budget
        )
    if config.use_search:
        kwargs["tools"] = [types.Tool(google_search=types.GoogleSearch())]
    if config.max_output_tokens is not None:
        kwargs["max_output_tokens"] = config.max_output_tokens
    return types.GenerateContentConfig(**kwargs)


def build_request(
    history: Sequence[Message],
    new_text: str,
    new_attachments: Sequence[Attachment],
    config: ModelConfig,
    *,
    system_instruction: str = SYSTEM_INSTRUCTION,
) -> GenerationRequest:
    """Build the full request for a new user turn.

    The model name is used verbatim; choosing a vision-capable model for
    image turns is the caller's job.
    """
    new_turn = types.Content(
        role=Role.USER.value,
        parts=build_parts(new_text, new_attachments),
    )
    return GenerationRequest(
        model=config.model_name,
        contents=[*project_history(history), new_turn],
        config=build_generation_config(config, system_instruction),
    )
