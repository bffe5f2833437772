"""Tests for codewhisper.client.  No real HTTP requests are made."""

import unittest
from unittest import mock

import requests

from codewhisper.client import ClientBinding, ProviderClient
from codewhisper.errors import TransportError
from codewhisper.providers import CEREBRAS, OPENAI, ProviderConfig


def _response(status: int = 200, body=None, text: str = "") -> mock.MagicMock:
    resp = mock.MagicMock(spec=requests.Response)
    resp.status_code = status
    resp.ok = status < 400
    resp.text = text
    resp.json.return_value = body if body is not None else {}
    return resp


class TestClientBinding(unittest.TestCase):

    def test_starts_unbound(self) -> None:
        binding = ClientBinding(CEREBRAS)
        self.assertEqual(binding.state, "unbound")
        self.assertIsNone(binding.bound_key)

    def test_get_binds_and_reuses(self) -> None:
        binding = ClientBinding(CEREBRAS)
        first = binding.get("k1")
        self.assertEqual(binding.state, "bound")
        self.assertEqual(binding.bound_key, "k1")
        self.assertIs(binding.get("k1"), first)

    def test_different_key_rebuilds(self) -> None:
        binding = ClientBinding(CEREBRAS)
        first = binding.get("k1")
        second = binding.get("k2")
        self.assertIsNot(first, second)
        self.assertEqual(second.api_key, "k2")

    def test_reset(self) -> None:
        binding = ClientBinding(CEREBRAS)
        first = binding.get("k1")
        binding.reset()
        self.assertEqual(binding.state, "unbound")
        self.assertIsNot(binding.get("k1"), first)


class TestProviderClient(unittest.TestCase):

    def test_headers(self) -> None:
        headers = ProviderClient(OPENAI, "sk-test").headers()
        self.assertEqual(headers["Authorization"], "Bearer sk-test")
        self.assertEqual(headers["Content-Type"], "application/json")

    def test_custom_auth_header(self) -> None:
        provider = ProviderConfig(
            name="azure", display_name="Azure", base_url="https://x.example/v1",
            default_model="m", auth_header="api-key", auth_scheme="",
        )
        headers = ProviderClient(provider, "secret").headers()
        self.assertEqual(headers["api-key"], "secret")
        self.assertNotIn("Authorization", headers)

    def test_endpoint(self) -> None:
        client = ProviderClient(CEREBRAS, "k")
        self.assertEqual(client.endpoint, "https://api.cerebras.ai/v1/chat/completions")

    @mock.patch("codewhisper.client.requests.post")
    def test_post_success(self, post: mock.MagicMock) -> None:
        post.return_value = _response(200)
        client = ProviderClient(CEREBRAS, "csk", timeout=30)
        payload = {"model": "llama3.1-8b", "messages": []}
        resp = client.chat_completions(payload, stream=True)
        self.assertIs(resp, post.return_value)
        _, kwargs = post.call_args
        self.assertEqual(post.call_args[0][0], "https://api.cerebras.ai/v1/chat/completions")
        self.assertEqual(kwargs["json"], payload)
        self.assertTrue(kwargs["stream"])
        self.assertEqual(kwargs["timeout"], 30)
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer csk")

    @mock.patch("codewhisper.client.requests.post")
    def test_non_2xx_is_transport_error(self, post: mock.MagicMock) -> None:
        post.return_value = _response(
            401, {"error": {"message": "Incorrect API key provided"}}, text="{...}",
        )
        client = ProviderClient(OPENAI, "bad")
        with self.assertRaises(TransportError) as ctx:
            client.chat_completions({"model": "gpt-4o-mini", "messages": []}, stream=False)
        err = ctx.exception
        self.assertEqual(err.status_code, 401)
        self.assertIn("Incorrect API key provided", err.message)
        self.assertTrue(err.message.startswith("OpenAI API error"))
        self.assertEqual(err.model, "gpt-4o-mini")
        post.return_value.raise_for_status.assert_not_called()

    @mock.patch("codewhisper.client.requests.post")
    def test_connection_failure(self, post: mock.MagicMock) -> None:
        post.side_effect = requests.ConnectionError("DNS failure")
        client = ProviderClient(CEREBRAS, "k")
        with self.assertRaises(TransportError) as ctx:
            client.chat_completions({"model": "m", "messages": []}, stream=True)
        self.assertIn("DNS failure", ctx.exception.message)
        self.assertIsNone(ctx.exception.status_code)

    @mock.patch("codewhisper.client.requests.post")
    def test_timeout(self, post: mock.MagicMock) -> None:
        post.side_effect = requests.Timeout("read timed out")
        with self.assertRaises(TransportError):
            ProviderClient(CEREBRAS, "k").chat_completions({"messages": []}, stream=True)


if __name__ == "__main__":
    unittest.main()
