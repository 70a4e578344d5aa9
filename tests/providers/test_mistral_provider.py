"""
Tests for the Mistral SDK provider using a stub client.
"""

import unittest
from types import SimpleNamespace
from unittest.mock import patch

import httpx

from clai.ai.providers.mistral import DEFAULT_MISTRAL_MODEL, MistralProvider
from clai.ai.types import ChatMessage, ChatRequest
from clai.core.errors import ErrorCategory, ProviderError


class FakeSDKError(Exception):
    def __init__(self, status_code, body=""):
        super().__init__(f"API error occurred: Status {status_code}")
        self.status_code = status_code
        self.body = body


class StubChat:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def complete(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def sdk_response(content, model="codestral-2501"):
    return SimpleNamespace(
        model=model,
        choices=[SimpleNamespace(message=SimpleNamespace(role="assistant", content=content))],
        usage=SimpleNamespace(prompt_tokens=7, completion_tokens=3, total_tokens=10),
    )


class TestMistralProvider(unittest.TestCase):

    def setUp(self):
        self.sleeps = []
        self.request = ChatRequest.new([ChatMessage.system("sys"), ChatMessage.user("list files")])

    def _provider(self, outcomes, **kwargs):
        self.chat = StubChat(outcomes)
        client = SimpleNamespace(chat=self.chat)
        return MistralProvider(client=client, sleep=self.sleeps.append, **kwargs)

    def test_successful_completion(self):
        response = self._provider([sdk_response("ls -la")]).complete(self.request)

        self.assertEqual(response.content, "ls -la")
        self.assertEqual(response.model, "codestral-2501")
        self.assertEqual(response.usage.total_tokens, 10)

        call = self.chat.calls[0]
        self.assertEqual(call["model"], DEFAULT_MISTRAL_MODEL)
        self.assertEqual(call["messages"][0], {"role": "system", "content": "sys"})
        self.assertNotIn("max_tokens", call)

    def test_model_precedence(self):
        provider = self._provider([sdk_response("a"), sdk_response("b")], default_model="mistral-small-latest")
        provider.complete(self.request)
        provider.complete(self.request.with_model("devstral-medium-latest").with_max_tokens(64))

        self.assertEqual(self.chat.calls[0]["model"], "mistral-small-latest")
        self.assertEqual(self.chat.calls[1]["model"], "devstral-medium-latest")
        self.assertEqual(self.chat.calls[1]["max_tokens"], 64)

    def test_rate_limit_retried(self):
        provider = self._provider([FakeSDKError(429), sdk_response("pwd")])

        self.assertEqual(provider.complete(self.request).content, "pwd")
        self.assertEqual(self.sleeps, [1.0])

    def test_auth_error_not_retried(self):
        provider = self._provider([FakeSDKError(401, '{"message": "Unauthorized"}')])

        with self.assertRaises(ProviderError) as ctx:
            provider.complete(self.request)
        self.assertEqual(ctx.exception.category, ErrorCategory.AUTHENTICATION)
        self.assertEqual(len(self.chat.calls), 1)
        self.assertEqual(self.sleeps, [])

    def test_transport_errors(self):
        with self.assertRaises(ProviderError) as ctx:
            self._provider([httpx.ConnectError("refused")]).complete(self.request)
        self.assertEqual(ctx.exception.category, ErrorCategory.NETWORK)

        with self.assertRaises(ProviderError) as ctx:
            self._provider([httpx.ReadTimeout("slow")]).complete(self.request)
        self.assertEqual(ctx.exception.category, ErrorCategory.TIMEOUT)

    def test_unclassified_sdk_failure(self):
        with self.assertRaises(ProviderError) as ctx:
            self._provider([RuntimeError("weird")]).complete(self.request)
        self.assertEqual(ctx.exception.category, ErrorCategory.API)
        self.assertIsNone(ctx.exception.status_code)

    def test_response_without_choices(self):
        empty = SimpleNamespace(model="m", choices=[], usage=None)
        with self.assertRaises(ProviderError) as ctx:
            self._provider([empty]).complete(self.request)
        self.assertEqual(ctx.exception.category, ErrorCategory.PARSE)

    def test_requires_key_or_client(self):
        with self.assertRaises(ValueError):
            MistralProvider()

    def test_key_uses_cached_client_for_endpoint(self):
        with patch("clai.ai.providers.mistral.get_cached_client") as cached:
            provider = MistralProvider(api_key="k", server_url="http://localhost:8080")
        cached.assert_called_once_with("k", "http://localhost:8080")
        self.assertIs(provider.client, cached.return_value)
        self.assertTrue(provider.is_available())


if __name__ == "__main__":
    unittest.main()
