"""
Tests for ProviderChain ordering, lazy initialisation and fallback.
"""

import itertools
import unittest

from clai.ai.chain import ProviderChain, ProviderSpec
from clai.ai.provider import Provider
from clai.ai.types import ChatMessage, ChatRequest, ChatResponse
from clai.core.configs import FileConfig, ProviderConfig, ProviderSettings
from clai.core.errors import ApiError, ErrorCategory, ProviderError, ProviderUnavailable


class FakeProvider(Provider):
    def __init__(self, name, reply=None, available=True):
        self.name = name
        self.reply = reply
        self.available = available
        self.calls = []

    def is_available(self):
        return self.available

    def complete(self, request):
        self.calls.append(request)
        if self.reply is None:
            raise ProviderError(ErrorCategory.API, f"{self.name} broke", status_code=500)
        return ChatResponse(self.reply, model=self.name)


def make_registry(providers, builds=None):
    def builder_for(provider):
        def build(settings, api_key, file_logger, sleep):
            if builds is not None:
                builds.append(provider.name)
            return provider
        return build

    return {
        p.name: ProviderSpec(builder_for(p), f"{p.name.upper()}_TEST_KEY", p.name)
        for p in providers
    }


def make_config(default, fallback=(), keys=None):
    keys = keys if keys is not None else [default, *fallback]
    return FileConfig(
        provider=ProviderConfig(default=default, fallback=list(fallback)),
        providers={name: ProviderSettings(api_key="k") for name in keys},
    )


REQUEST = ChatRequest.new([ChatMessage.user("list files")])


class TestProviderChain(unittest.TestCase):

    def test_order_default_first_without_duplicates(self):
        chain = ProviderChain(make_config("a", ["b", "a", "c", "b"]), registry={})
        self.assertEqual(chain.providers(), ["a", "b", "c"])

    def test_single_working_provider_found_in_any_position(self):
        for position in range(3):
            providers = [
                FakeProvider("p0", reply=None),
                FakeProvider("p1", available=False, reply="never"),
                FakeProvider("p2", reply=None),
            ]
            names = [p.name for p in providers]
            providers[position] = FakeProvider(names[position], reply="ls -la")

            for order in itertools.permutations(names):
                chain = ProviderChain(
                    make_config(order[0], order[1:]), registry=make_registry(providers)
                )
                response = chain.complete(REQUEST)
                self.assertEqual(response.content, "ls -la")
                self.assertEqual(response.model, names[position])

    def test_stops_at_first_success(self):
        first, second = FakeProvider("a", reply="one"), FakeProvider("b", reply="two")
        chain = ProviderChain(make_config("a", ["b"]), registry=make_registry([first, second]))

        self.assertEqual(chain.complete(REQUEST).content, "one")
        self.assertEqual(len(second.calls), 0)

    def test_all_failing_surfaces_last_error(self):
        providers = [FakeProvider("a"), FakeProvider("b")]
        chain = ProviderChain(make_config("a", ["b"]), registry=make_registry(providers))

        with self.assertRaises(ApiError) as ctx:
            chain.complete(REQUEST)
        self.assertIn("Provider b failed", str(ctx.exception))
        self.assertEqual(ctx.exception.status_code, 500)

    def test_unavailable_provider_skipped(self):
        providers = [FakeProvider("a", reply="x", available=False)]
        chain = ProviderChain(make_config("a"), registry=make_registry(providers))

        with self.assertRaises(ProviderUnavailable) as ctx:
            chain.complete(REQUEST)
        self.assertIn("Provider a is not available", str(ctx.exception))
        self.assertEqual(providers[0].calls, [])

    def test_empty_chain(self):
        chain = ProviderChain(make_config("", keys=[]), registry={})
        with self.assertRaises(ApiError) as ctx:
            chain.complete(REQUEST)
        self.assertIn("All providers in chain failed", str(ctx.exception))

    def test_unknown_provider_recorded_then_next_tried(self):
        good = FakeProvider("good", reply="pwd")
        chain = ProviderChain(make_config("mystery", ["good"]), registry=make_registry([good]))
        self.assertEqual(chain.complete(REQUEST).content, "pwd")

        chain = ProviderChain(make_config("mystery"), registry=make_registry([good]))
        with self.assertRaises(ProviderUnavailable) as ctx:
            chain.complete(REQUEST)
        self.assertIn("Unknown provider: mystery", str(ctx.exception))

    def test_missing_credential_falls_through(self):
        good = FakeProvider("good", reply="pwd")
        keyless = FakeProvider("keyless", reply="never")
        config = make_config("keyless", ["good"], keys=["good"])
        chain = ProviderChain(config, registry=make_registry([keyless, good]))

        self.assertEqual(chain.complete(REQUEST).content, "pwd")
        self.assertEqual(keyless.calls, [])

    def test_provider_initialised_once(self):
        builds = []
        provider = FakeProvider("a", reply="ls")
        chain = ProviderChain(make_config("a"), registry=make_registry([provider], builds))

        chain.complete(REQUEST)
        chain.complete(REQUEST)
        self.assertEqual(builds, ["a"])
        self.assertEqual(len(provider.calls), 2)

    def test_parse_model(self):
        chain = ProviderChain(make_config("openrouter"), registry={})
        self.assertEqual(chain.parse_model("openrouter/gpt-4o"), ("openrouter", "gpt-4o"))
        self.assertEqual(chain.parse_model("gpt-4o"), ("openrouter", "gpt-4o"))
        self.assertEqual(chain.parse_model("openrouter/openai/gpt-4o"), ("openrouter", "openai/gpt-4o"))

    def test_is_available_checks_credentials_only(self):
        provider = FakeProvider("a", reply="ls")
        with_key = ProviderChain(make_config("a"), registry=make_registry([provider]))
        without_key = ProviderChain(make_config("a", keys=[]), registry=make_registry([provider]))

        self.assertTrue(with_key.is_available())
        self.assertFalse(without_key.is_available())
        self.assertEqual(provider.calls, [])


if __name__ == "__main__":
    unittest.main()
