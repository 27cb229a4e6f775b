"""Tests for replaying message history as Gemini content blocks."""

from __future__ import annotations

import base64
import unittest

from gemini_nexus.models import Attachment, Message, Role
from gemini_nexus.projection import project_history, project_message


def _attachment(payload: bytes, mime_type: str = "image/png") -> Attachment:
    return Attachment(
        mime_type=mime_type,
        data=base64.b64encode(payload).decode("ascii"),
        preview_url="preview://local",
    )


class ProjectionTests(unittest.TestCase):
    """History projection order and part layout."""

    def test_system_messages_are_dropped_and_order_is_kept(self) -> None:
        history = [
            Message.create(Role.SYSTEM, "be terse"),
            Message.create(Role.USER, "first"),
            Message.create(Role.MODEL, "second"),
            Message.create(Role.SYSTEM, "ignored"),
            Message.create(Role.USER, "third"),
        ]

        blocks = project_history(history)

        self.assertEqual([b.role for b in blocks], ["user", "model", "user"])
        self.assertEqual(
            [b.parts[0].text for b in blocks], ["first", "second", "third"]
        )

    def test_attachment_parts_precede_text(self) -> None:
        message = Message.create(
            Role.USER,
            "what is this?",
            [_attachment(b"one"), _attachment(b"two", "image/jpeg")],
        )

        block = project_message(message)

        self.assertEqual(len(block.parts), 3)
        self.assertEqual(block.parts[0].inline_data.data, b"one")
        self.assertEqual(block.parts[0].inline_data.mime_type, "image/png")
        self.assertEqual(block.parts[1].inline_data.data, b"two")
        self.assertEqual(block.parts[1].inline_data.mime_type, "image/jpeg")
        self.assertEqual(block.parts[2].text, "what is this?")

    def test_preview_url_is_never_projected(self) -> None:
        message = Message.create(Role.USER, "", [_attachment(b"img")])

        dumped = project_message(message).model_dump(exclude_none=True)

        self.assertNotIn("preview://local", repr(dumped))

    def test_empty_message_yields_empty_parts(self) -> None:
        blocks = project_history([Message.create(Role.MODEL, "")])

        self.assertEqual(len(blocks), 1)
        self.assertEqual(blocks[0].role, "model")
        self.assertEqual(blocks[0].parts, [])

    def test_empty_history_projects_to_nothing(self) -> None:
        self.assertEqual(project_history([]), [])


if __name__ == "__main__":
    unittest.main()
