"""Domain exception hierarchy for the Gemini chat client."""

from __future__ import annotations


class NexusChatError(RuntimeError):
    """Base class for all domain-level chat errors."""


class EncodingError(NexusChatError):
    """Raised when an attachment cannot be read or encoded."""


class ProviderError(NexusChatError):
    """Raised when the Gemini call fails for any reason."""


class ProviderConnectionError(ProviderError):
    """Raised when the Gemini endpoint cannot be reached or times out."""


class ProviderAuthenticationError(ProviderError):
    """Raised when the API key is rejected."""


class ProviderQuotaError(ProviderError):
    """Raised when the request is refused for rate or quota reasons."""


class ModelNotFoundError(ProviderError):
    """Raised when the configured model is unavailable."""


class ConfigurationError(NexusChatError):
    """Raised when configuration or per-turn model settings are invalid."""
