"""Tests for converting Gemini responses into messages."""

from __future__ import annotations

import unittest

from google.genai import types

from gemini_nexus.models import Role, UsageMetadata, WebSource
from gemini_nexus.normalizer import (
    EMPTY_RESPONSE_TEXT,
    error_message,
    normalize_response,
)


def _sdk_response(
    text: str | None = "Answer",
    usage: types.GenerateContentResponseUsageMetadata | None = None,
    grounding: types.GroundingMetadata | None = None,
) -> types.GenerateContentResponse:
    parts = [types.Part(text=text)] if text is not None else []
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=parts),
                grounding_metadata=grounding,
            )
        ],
        usage_metadata=usage,
    )


class NormalizeResponseTests(unittest.TestCase):
    """Success-path extraction from SDK objects and REST dicts."""

    def test_text_usage_and_grounding_from_sdk_response(self) -> None:
        response = _sdk_response(
            usage=types.GenerateContentResponseUsageMetadata(
                prompt_token_count=12,
                candidates_token_count=30,
                total_token_count=42,
            ),
            grounding=types.GroundingMetadata(
                grounding_chunks=[
                    types.GroundingChunk(
                        web=types.GroundingChunkWeb(
                            uri="https://example.com/a", title="Example A"
                        )
                    ),
                    types.GroundingChunk(
                        web=types.GroundingChunkWeb(uri="https://example.com/b")
                    ),
                ]
            ),
        )

        message = normalize_response(response)

        self.assertEqual(message.role, Role.MODEL)
        self.assertEqual(message.text, "Answer")
        self.assertFalse(message.is_error)
        self.assertEqual(message.metadata.usage, UsageMetadata(12, 30, 42))
        self.assertEqual(
            message.metadata.web_sources,
            [
                WebSource(uri="https://example.com/a", title="Example A"),
                WebSource(uri="https://example.com/b", title=""),
            ],
        )

    def test_missing_usage_is_omitted_not_zero_filled(self) -> None:
        message = normalize_response(_sdk_response(usage=None))

        self.assertIsNone(message.metadata)

        dict_message = normalize_response({"text": "hi"})
        self.assertIsNone(dict_message.metadata)

    def test_partial_usage_defaults_missing_counters_to_zero(self) -> None:
        message = normalize_response(
            {"text": "hi", "usageMetadata": {"promptTokenCount": 7}}
        )

        self.assertEqual(message.metadata.usage, UsageMetadata(7, 0, 0))
        self.assertIsNone(message.metadata.grounding_chunks)

    def test_empty_text_uses_placeholder(self) -> None:
        self.assertEqual(
            normalize_response(_sdk_response(text=None)).text, EMPTY_RESPONSE_TEXT
        )
        self.assertEqual(normalize_response({}).text, EMPTY_RESPONSE_TEXT)

    def test_rest_dict_candidates_skip_thought_parts(self) -> None:
        response = {
            "candidates": [
                {
                    "content": {
                        "parts": [
                            {"text": "pondering", "thought": True},
                            {"text": "Final "},
                            {"text": "answer"},
                        ]
                    },
                    "groundingMetadata": {
                        "groundingChunks": [
                            {"web": {"uri": "https://a.test", "title": "A"}},
                            {"retrievedContext": {"uri": "gs://x"}},
                        ]
                    },
                }
            ]
        }

        message = normalize_response(response)

        self.assertEqual(message.text, "Final answer")
        chunks = message.metadata.grounding_chunks
        self.assertEqual(len(chunks), 2)
        self.assertEqual(chunks[0].web, WebSource("https://a.test", "A"))
        self.assertIsNone(chunks[1].web)
        self.assertEqual(message.metadata.web_sources, [WebSource("https://a.test", "A")])

    def test_fresh_ids_for_each_message(self) -> None:
        first = normalize_response({"text": "a"})
        second = normalize_response({"text": "a"})
        self.assertNotEqual(first.id, second.id)
        self.assertGreater(first.timestamp, 0)


class ErrorMessageTests(unittest.TestCase):
    """Failure-path message synthesis."""

    def test_error_message_embeds_reason(self) -> None:
        message = error_message(RuntimeError("quota exceeded"))

        self.assertTrue(message.is_error)
        self.assertEqual(message.role, Role.MODEL)
        self.assertEqual(message.text, "Error: quota exceeded")
        self.assertIsNone(message.metadata)

    def test_error_message_without_reason_has_fallback_text(self) -> None:
        message = error_message(RuntimeError())

        self.assertTrue(message.is_error)
        self.assertTrue(message.text.startswith("Error: "))
        self.assertGreater(len(message.text), len("Error: "))


if __name__ == "__main__":
    unittest.main()
