"""Map the client's message log onto Gemini content blocks."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from google.genai import types

from .attachments import decode_attachment
from .models import Attachment, Message, Role


def attachment_part(attachment: Attachment) -> types.Part:
    """Build an inline-data part. The preview handle is never included."""
    return types.Part(
        inline_data=types.Blob(
            mime_type=attachment.mime_type,
            data=decode_attachment(attachment),
        )
    )


def build_parts(text: str, attachments: Iterable[Attachment]) -> list[types.Part]:
    """Return attachment parts in order, then a text part when text is non-empty."""
    parts = [attachment_part(attachment) for attachment in attachments]
    if text:
        parts.append(types.Part(text=text))
    return parts


def project_message(message: Message) -> types.Content:
    """Project a single non-system message."""
    return types.Content(
        role=message.role.value,
        parts=build_parts(message.text, message.attachments),
    )


def project_history(messages: Sequence[Message]) -> list[types.Content]:
    """Replay the full history as content blocks.

    System messages are dropped since the system instruction travels in the
    generation config. Messages with neither text nor attachments still yield
    a block with an empty parts list.
    """
    return [
        project_message(message)
        for message in messages
        if message.role is not Role.SYSTEM
    ]
