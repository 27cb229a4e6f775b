"""Top-level package for gemini-nexus."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .attachments import PendingAttachments, PreviewRegistry, encode_attachment
    from .chat import GeminiChat, create_client
    from .config import ensure_config_dir, load_config
    from .conversation import Conversation
    from .exceptions import (
        ConfigurationError,
        EncodingError,
        NexusChatError,
        ProviderError,
    )
    from .message_store import MessageStore
    from .models import Attachment, Message, ModelConfig, Role
    from .projection import project_history
    from .request_builder import GenerationRequest, build_request

_EXPORTS = {
    "Attachment": "models",
    "Message": "models",
    "ModelConfig": "models",
    "Role": "models",
    "PendingAttachments": "attachments",
    "PreviewRegistry": "attachments",
    "encode_attachment": "attachments",
    "project_history": "projection",
    "GenerationRequest": "request_builder",
    "build_request": "request_builder",
    "GeminiChat": "chat",
    "create_client": "chat",
    "Conversation": "conversation",
    "MessageStore": "message_store",
    "ensure_config_dir": "config",
    "load_config": "config",
    "ConfigurationError": "exceptions",
    "EncodingError": "exceptions",
    "NexusChatError": "exceptions",
    "ProviderError": "exceptions",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> Any:
    """Lazily import symbols so importing the package does not load the SDK."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return getattr(import_module(f".{module_name}", __name__), name)
