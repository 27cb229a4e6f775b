"""Inbound turn handling: the seam between a front end and the chat core."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
import logging

from .chat import GeminiChat
from .message_store import MessageStore
from .models import Attachment, Message, ModelConfig, Role

LOGGER = logging.getLogger(__name__)


class ConversationState(str, Enum):
    """Whether a turn is currently outstanding."""

    IDLE = "IDLE"
    AWAITING_RESPONSE = "AWAITING_RESPONSE"


class Conversation:
    """One conversation: a store plus the chat wrapper that answers it.

    Turns are serialized. The projector reads the whole history, so a second
    submission before the first resolves would duplicate or reorder turns.
    """

    def __init__(self, chat: GeminiChat, store: MessageStore | None = None) -> None:
        self.chat = chat
        self.store = store if store is not None else MessageStore()
        self._state = ConversationState.IDLE

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def messages(self) -> list[Message]:
        return self.store.messages

    def can_submit(self) -> bool:
        """Return True when a new turn may be submitted."""
        return self._state is ConversationState.IDLE

    def reset(self) -> None:
        """Clear the conversation. Refused while a turn is outstanding."""
        if not self.can_submit():
            LOGGER.warning(
                "conversation.reset.rejected",
                extra={"event": "conversation.reset.rejected"},
            )
            return
        self.store.clear()

    async def submit_turn(
        self,
        text: str,
        attachments: Sequence[Attachment],
        config: ModelConfig,
    ) -> Message | None:
        """Append the user turn, ask the model, append and return its reply.

        The text is sent as typed; surrounding whitespace only decides whether
        the turn is empty. Returns None without touching the store when the
        turn is empty or another turn is still in flight. ``ConfigurationError``
        from an invalid config propagates before anything is appended.
        """
        if not text.strip() and not attachments:
            return None
        config.validate()

        # No await between the check and the transition, so this is atomic
        # on a single event loop.
        if not self.can_submit():
            LOGGER.warning(
                "conversation.turn.rejected",
                extra={
                    "event": "conversation.turn.rejected",
                    "state": self._state.value,
                },
            )
            return None
        self._state = ConversationState.AWAITING_RESPONSE

        try:
            history = self.store.snapshot()
            self.store.append(Message.create(Role.USER, text, attachments))
            LOGGER.info(
                "conversation.turn.start",
                extra={
                    "event": "conversation.turn.start",
                    "history_length": len(history),
                    "attachments": len(attachments),
                },
            )
            reply = await self.chat.send_message(history, text, attachments, config)
            self.store.append(reply)
        finally:
            self._state = ConversationState.IDLE

        LOGGER.info(
            "conversation.turn.complete",
            extra={"event": "conversation.turn.complete", "is_error": reply.is_error},
        )
        return reply
