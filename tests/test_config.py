"""Tests for configuration loading and validation."""

from __future__ import annotations

import tempfile
from pathlib import Path
import unittest

from gemini_nexus.config import DEFAULT_CONFIG, load_config
from gemini_nexus.models import SYSTEM_INSTRUCTION, ModelConfig


class ConfigTests(unittest.TestCase):
    """Validate config merge and fallback behavior."""

    def test_missing_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config = load_config(config_path=Path(temp_dir) / "config.toml")

        self.assertEqual(config, DEFAULT_CONFIG)
        self.assertEqual(config["gemini"]["model"], "gemini-2.5-flash")
        self.assertEqual(config["gemini"]["timeout"], 120.0)
        self.assertEqual(config["gemini"]["system_instruction"], SYSTEM_INSTRUCTION)
        self.assertEqual(config["generation"]["temperature"], 0.7)
        self.assertFalse(config["generation"]["use_search"])
        self.assertFalse(config["generation"]["use_thinking"])
        self.assertEqual(config["generation"]["thinking_budget"], 1024)
        self.assertEqual(config["logging"]["level"], "INFO")

    def test_partial_config_overrides_selected_values(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                """
[gemini]
model = "gemini-3-pro-preview"

[generation]
use_search = true
thinking_budget = 4096
                """.strip(),
                encoding="utf-8",
            )
            config = load_config(config_path=config_path)

        self.assertEqual(config["gemini"]["model"], "gemini-3-pro-preview")
        self.assertTrue(config["generation"]["use_search"])
        self.assertEqual(config["generation"]["thinking_budget"], 4096)
        self.assertEqual(config["generation"]["temperature"], 0.7)

        model_config = ModelConfig.from_config(config)
        self.assertEqual(model_config.model_name, "gemini-3-pro-preview")
        self.assertTrue(model_config.use_search)

    def test_unknown_keys_are_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                '[app]\ntitle = "Old"\n\n[gemini]\nmodel = "gemini-exp"\n',
                encoding="utf-8",
            )
            config = load_config(config_path=config_path)

        self.assertNotIn("app", config)
        self.assertEqual(config["gemini"]["model"], "gemini-exp")

    def test_invalid_values_fallback_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                """
[generation]
temperature = 3.5

[logging]
level = "LOUD"
                """.strip(),
                encoding="utf-8",
            )
            with self.assertLogs("gemini_nexus.config", level="WARNING"):
                config = load_config(config_path=config_path)

        self.assertEqual(config["generation"]["temperature"], 0.7)
        self.assertEqual(config["logging"]["level"], "INFO")

    def test_unparseable_toml_falls_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text("[gemini\nmodel = ", encoding="utf-8")
            with self.assertLogs("gemini_nexus.config", level="WARNING"):
                config = load_config(config_path=config_path)

        self.assertEqual(config["gemini"]["model"], "gemini-2.5-flash")


if __name__ == "__main__":
    unittest.main()
