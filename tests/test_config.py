"""Tests for codewhisper.config and codewhisper.providers."""

import logging
import os
import unittest
from unittest import mock

from codewhisper import config
from codewhisper.providers import (
    CEREBRAS,
    ProviderConfig,
    get_provider,
    provider_names,
    register_provider,
)


class TestConfig(unittest.TestCase):

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_defaults(self) -> None:
        self.assertEqual(config.default_provider(), "cerebras")
        self.assertEqual(config.request_timeout(), config.DEFAULT_TIMEOUT)
        self.assertEqual(config.log_level(), logging.WARNING)
        self.assertIsNone(config.env_api_key("openai"))
        self.assertIsNone(config.base_url_override("openai"))

    @mock.patch.dict(os.environ, {
        "CODEWHISPER_PROVIDER": "OpenAI",
        "CODEWHISPER_TIMEOUT": "15",
        "CODEWHISPER_LOG_LEVEL": "info",
        "OPENAI_API_KEY": " sk-env ",
    }, clear=True)
    def test_overrides(self) -> None:
        self.assertEqual(config.default_provider(), "openai")
        self.assertEqual(config.request_timeout(), 15.0)
        self.assertEqual(config.log_level(), logging.INFO)
        self.assertEqual(config.env_api_key("openai"), "sk-env")

    @mock.patch.dict(os.environ, {"CODEWHISPER_TIMEOUT": "soon"}, clear=True)
    def test_invalid_timeout(self) -> None:
        with self.assertLogs("codewhisper", level="WARNING"):
            self.assertEqual(config.request_timeout(), config.DEFAULT_TIMEOUT)

    @mock.patch.dict(os.environ, {"CODEWHISPER_LOG_LEVEL": "chatty"}, clear=True)
    def test_invalid_log_level(self) -> None:
        self.assertEqual(config.log_level(), logging.WARNING)

    def test_debug_flag(self) -> None:
        self.assertEqual(config.log_level(debug=True), logging.DEBUG)


class TestProviders(unittest.TestCase):

    def test_builtins(self) -> None:
        self.assertIn("cerebras", provider_names())
        self.assertIn("openai", provider_names())
        self.assertTrue(get_provider("cerebras").streaming)
        self.assertFalse(get_provider("OPENAI").streaming)

    def test_slots(self) -> None:
        self.assertEqual(CEREBRAS.key_slot, "cerebras_api_key")
        self.assertEqual(CEREBRAS.model_slot, "cerebras_selected_model")

    def test_unknown(self) -> None:
        with self.assertRaises(KeyError):
            get_provider("nope")

    @mock.patch.dict(os.environ, {"CODEWHISPER_CEREBRAS_BASE_URL": "http://localhost:8080/v1/"})
    def test_base_url_override(self) -> None:
        provider = get_provider("cerebras")
        self.assertEqual(provider.chat_url, "http://localhost:8080/v1/chat/completions")
        self.assertEqual(CEREBRAS.base_url, "https://api.cerebras.ai/v1")

    def test_register(self) -> None:
        custom = ProviderConfig(
            name="groq", display_name="Groq",
            base_url="https://api.groq.com/openai/v1",
            default_model="llama-3.1-8b-instant", streaming=True,
        )
        register_provider(custom)
        self.assertEqual(get_provider("groq").display_name, "Groq")

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_usable_as_dict_key(self) -> None:
        seen = {CEREBRAS: "a", get_provider("openai"): "b"}
        self.assertEqual(seen[get_provider("cerebras")], "a")
        self.assertEqual(hash(CEREBRAS), hash(get_provider("cerebras")))


if __name__ == "__main__":
    unittest.main()
