"""Turn Gemini responses and failures into client ``Message`` objects."""

from __future__ import annotations

from typing import Any

from .models import (
    GroundingChunk,
    Message,
    ResponseMetadata,
    Role,
    UsageMetadata,
    WebSource,
)

EMPTY_RESPONSE_TEXT = "No text response generated."
UNKNOWN_ERROR_TEXT = "Something went wrong with the request."


def _field(payload: Any, *names: str) -> Any:
    """Read the first present field from an SDK object or a REST-style dict.

    ``names`` lists aliases, e.g. the snake_case SDK attribute followed by the
    camelCase JSON key.
    """
    if payload is None:
        return None
    if isinstance(payload, dict):
        for name in names:
            value = payload.get(name)
            if value is not None:
                return value
        return None
    for name in names:
        value = getattr(payload, name, None)
        if value is not None:
            return value
    return None


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def extract_text(response: Any) -> str:
    """Return the response text, or an empty string when there is none."""
    if isinstance(response, dict):
        text = response.get("text")
        if isinstance(text, str):
            return text
        candidates = _field(response, "candidates") or []
        if not candidates:
            return ""
        content = _field(candidates[0], "content")
        pieces: list[str] = []
        for part in _field(content, "parts") or []:
            # Thought summaries are not part of the answer.
            if _field(part, "thought"):
                continue
            part_text = _field(part, "text")
            if isinstance(part_text, str):
                pieces.append(part_text)
        return "".join(pieces)
    text = getattr(response, "text", None)
    return text if isinstance(text, str) else ""


def extract_usage(response: Any) -> UsageMetadata | None:
    """Return token counters, or None when the provider sent no usage block.

    Missing counters inside a present block default to 0.
    """
    usage = _field(response, "usage_metadata", "usageMetadata")
    if usage is None:
        return None
    return UsageMetadata(
        prompt_tokens=_as_int(_field(usage, "prompt_token_count", "promptTokenCount")),
        candidates_tokens=_as_int(
            _field(usage, "candidates_token_count", "candidatesTokenCount")
        ),
        total_tokens=_as_int(_field(usage, "total_token_count", "totalTokenCount")),
    )


def extract_grounding_chunks(response: Any) -> tuple[GroundingChunk, ...] | None:
    """Return the first candidate's grounding citations, or None when absent."""
    candidates = _field(response, "candidates")
    if not candidates:
        return None
    grounding = _field(candidates[0], "grounding_metadata", "groundingMetadata")
    chunks = _field(grounding, "grounding_chunks", "groundingChunks")
    if chunks is None:
        return None

    normalized: list[GroundingChunk] = []
    for chunk in chunks:
        web = _field(chunk, "web")
        uri = _field(web, "uri")
        if isinstance(uri, str) and uri:
            title = _field(web, "title")
            normalized.append(
                GroundingChunk(web=WebSource(uri=uri, title=str(title or "")))
            )
        else:
            normalized.append(GroundingChunk())
    return tuple(normalized)


def normalize_response(response: Any) -> Message:
    """Build a model message from a successful response.

    Raises whatever the response accessors raise on a malformed payload;
    callers at the network boundary turn that into an error message.
    """
    text = extract_text(response) or EMPTY_RESPONSE_TEXT
    usage = extract_usage(response)
    grounding_chunks = extract_grounding_chunks(response)

    metadata: ResponseMetadata | None = None
    if usage is not None or grounding_chunks is not None:
        metadata = ResponseMetadata(usage=usage, grounding_chunks=grounding_chunks)

    return Message.create(Role.MODEL, text, metadata=metadata)


def error_message(reason: BaseException | str | None) -> Message:
    """Build an error-flagged model message embedding the failure reason."""
    detail = str(reason).strip() if reason is not None else ""
    return Message.create(
        Role.MODEL,
        f"Error: {detail or UNKNOWN_ERROR_TEXT}",
        is_error=True,
    )
