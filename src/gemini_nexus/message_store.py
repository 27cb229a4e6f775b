"""Append-only in-memory conversation log."""

from __future__ import annotations

import json

from .models import Message


class MessageStore:
    """Ordered conversation history.

    Messages are only ever appended; ``clear`` is the UI-level reset.
    """

    def __init__(self, messages: list[Message] | None = None) -> None:
        self._messages: list[Message] = list(messages or [])

    @property
    def messages(self) -> list[Message]:
        """Return a shallow copy of all stored messages."""
        return list(self._messages)

    @property
    def message_count(self) -> int:
        """Return the number of stored messages."""
        return len(self._messages)

    def snapshot(self) -> tuple[Message, ...]:
        """Return an immutable view of the history at this instant."""
        return tuple(self._messages)

    def append(self, message: Message) -> None:
        """Append a message to the end of the log."""
        if not isinstance(message, Message):
            raise TypeError(f"Expected Message, got {type(message).__name__}.")
        self._messages.append(message)

    def last(self) -> Message | None:
        """Return the newest message, if any."""
        return self._messages[-1] if self._messages else None

    def clear(self) -> None:
        """Drop every message."""
        self._messages = []

    def export_json(self) -> str:
        """Export current history using stable list and field ordering."""
        return json.dumps(
            [message.to_dict() for message in self._messages],
            ensure_ascii=False,
            separators=(",", ":"),
            sort_keys=False,
        )

    def __len__(self) -> int:
        return len(self._messages)
