"""Tests for top-level package lazy exports."""

from __future__ import annotations

import unittest

import gemini_nexus


class PackageExportTests(unittest.TestCase):
    """Ensure __getattr__ and exported symbols behave as expected."""

    def test_lazy_exports_resolve_known_symbols(self) -> None:
        self.assertTrue(callable(gemini_nexus.load_config))
        self.assertTrue(callable(gemini_nexus.build_request))
        self.assertTrue(callable(gemini_nexus.project_history))
        self.assertTrue(callable(gemini_nexus.encode_attachment))
        self.assertTrue(callable(gemini_nexus.create_client))
        self.assertIsNotNone(gemini_nexus.GeminiChat)
        self.assertIsNotNone(gemini_nexus.Conversation)
        self.assertIsNotNone(gemini_nexus.MessageStore)
        self.assertIsNotNone(gemini_nexus.ModelConfig)
        self.assertIsNotNone(gemini_nexus.NexusChatError)
        self.assertIsNotNone(gemini_nexus.ProviderError)
        self.assertIsNotNone(gemini_nexus.EncodingError)
        self.assertIsNotNone(gemini_nexus.ConfigurationError)

    def test_all_lists_every_export(self) -> None:
        for name in gemini_nexus.__all__:
            with self.subTest(name=name):
                self.assertIsNotNone(getattr(gemini_nexus, name))

    def test_unknown_symbol_raises_attribute_error(self) -> None:
        with self.assertRaises(AttributeError):
            getattr(gemini_nexus, "THIS_DOES_NOT_EXIST")


if __name__ == "__main__":
    unittest.main()
