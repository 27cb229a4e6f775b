"""Image attachment encoding and local preview handle management.

Attachments are encoded once when the user picks them, then carried inside
``Message`` objects. The preview handle is a client-local resource: whoever
holds a pending attachment must release its preview when the attachment is
removed or sent.
"""

from __future__ import annotations

import base64
from collections.abc import Iterator
from contextlib import contextmanager
import logging
import mimetypes
from pathlib import Path
import uuid

from .exceptions import EncodingError
from .models import Attachment

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10 MB

# Image file extensions accepted for vision attachments
IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".bmp",
        ".webp",
        ".tiff",
        ".tif",
        ".heic",
        ".heif",
    }
)

_EXTRA_MIME_TYPES = {
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
}

PREVIEW_SCHEME = "preview://"


class PreviewRegistry:
    """In-memory table of display-only preview handles.

    A handle resolves to the original bytes until it is released.
    """

    def __init__(self) -> None:
        self._previews: dict[str, tuple[str, bytes]] = {}

    def acquire(self, data: bytes, mime_type: str) -> str:
        """Register bytes for display and return a new handle."""
        handle = f"{PREVIEW_SCHEME}{uuid.uuid4().hex}"
        self._previews[handle] = (mime_type, data)
        return handle

    def resolve(self, handle: str) -> tuple[str, bytes] | None:
        """Return ``(mime_type, data)`` for a live handle, or None."""
        return self._previews.get(handle)

    def release(self, handle: str) -> bool:
        """Free a handle. Releasing an unknown handle is a no-op."""
        return self._previews.pop(handle, None) is not None

    @contextmanager
    def scoped(self, data: bytes, mime_type: str) -> Iterator[str]:
        """Acquire a handle that is released when the block exits."""
        handle = self.acquire(data, mime_type)
        try:
            yield handle
        finally:
            self.release(handle)

    def __len__(self) -> int:
        return len(self._previews)

    def __contains__(self, handle: object) -> bool:
        return handle in self._previews


def guess_image_mime_type(path: str | Path) -> str | None:
    """Return the image mime type for a path based on its suffix."""
    suffix = Path(path).suffix.lower()
    if suffix not in IMAGE_EXTENSIONS:
        return None
    if suffix in _EXTRA_MIME_TYPES:
        return _EXTRA_MIME_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(f"file{suffix}")
    return guessed


def _read_source(source: bytes | str | Path, max_bytes: int) -> bytes:
    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
    else:
        resolved = Path(source).expanduser()
        try:
            if not resolved.is_file():
                raise EncodingError(f"Image not found: {source}")
            size = resolved.stat().st_size
            if size > max_bytes:
                raise EncodingError(
                    f"Image too large (max {max_bytes / (1024 * 1024):.1f}MB)"
                )
            data = resolved.read_bytes()
        except OSError as exc:
            raise EncodingError(f"Unable to read image {source}: {exc}") from exc

    if not data:
        raise EncodingError("Image is empty.")
    if len(data) > max_bytes:
        raise EncodingError(f"Image too large (max {max_bytes / (1024 * 1024):.1f}MB)")
    return data


def encode_attachment(
    source: bytes | str | Path,
    *,
    mime_type: str | None = None,
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
    previews: PreviewRegistry | None = None,
) -> Attachment:
    """Encode an image into an Attachment.

    Args:
        source: Raw bytes or a path to an image file
        mime_type: Explicit mime type; guessed from the file suffix when omitted
        max_bytes: Size ceiling for the raw image
        previews: Registry that owns the preview handle; no handle when None

    Raises:
        EncodingError: when the image cannot be read, is empty, has an
            unsupported type, or exceeds ``max_bytes``.
    """
    resolved_mime = mime_type
    if resolved_mime is None and not isinstance(source, (bytes, bytearray, memoryview)):
        resolved_mime = guess_image_mime_type(source)
    if not resolved_mime:
        raise EncodingError(
            "Unsupported image type. Allowed: " + ", ".join(sorted(IMAGE_EXTENSIONS))
        )
    resolved_mime = resolved_mime.strip().lower()
    if not resolved_mime.startswith("image/"):
        raise EncodingError(f"Not an image mime type: {resolved_mime}")

    data = _read_source(source, max_bytes)
    preview_url = previews.acquire(data, resolved_mime) if previews is not None else ""
    return Attachment(
        mime_type=resolved_mime,
        data=base64.b64encode(data).decode("ascii"),
        preview_url=preview_url,
    )


def decode_attachment(attachment: Attachment) -> bytes:
    """Return the raw bytes carried by an attachment.

    Raises ``binascii.Error`` for data that is not strict base64.
    """
    return base64.b64decode(attachment.data, validate=True)


class PendingAttachments:
    """Attachments picked by the user and not yet sent."""

    def __init__(
        self,
        previews: PreviewRegistry | None = None,
        *,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
    ) -> None:
        self.previews = previews if previews is not None else PreviewRegistry()
        self.max_image_bytes = max_image_bytes
        self._items: list[Attachment] = []

    @property
    def items(self) -> list[Attachment]:
        return list(self._items)

    def add(
        self, source: bytes | str | Path, mime_type: str | None = None
    ) -> Attachment | None:
        """Encode and queue an image; a failed encode is logged and skipped."""
        try:
            attachment = encode_attachment(
                source,
                mime_type=mime_type,
                max_bytes=self.max_image_bytes,
                previews=self.previews,
            )
        except EncodingError as exc:
            LOGGER.warning(
                "attachment.encode.failed",
                extra={"event": "attachment.encode.failed", "reason": str(exc)},
            )
            return None
        self._items.append(attachment)
        return attachment

    def remove(self, index: int) -> Attachment:
        """Drop one pending attachment and release its preview."""
        attachment = self._items.pop(index)
        self.previews.release(attachment.preview_url)
        return attachment

    def take(self) -> list[Attachment]:
        """Hand over all pending attachments for sending and release their previews."""
        taken = list(self._items)
        self.clear()
        return taken

    def clear(self) -> None:
        """Discard all pending attachments."""
        for attachment in self._items:
            self.previews.release(attachment.preview_url)
        self._items.clear()

    def has_any(self) -> bool:
        """Return True when at least one attachment is pending."""
        return bool(self._items)

    def __len__(self) -> int:
        return len(self._items)
