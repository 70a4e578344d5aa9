"""
Tests for the shared rate-limit retry policy.
"""

import unittest

from clai.ai.provider import call_with_retry
from clai.core.errors import ErrorCategory, ProviderError


class ScriptedCall:
    """Raises the scripted errors in order, then returns `result`."""

    def __init__(self, errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.attempts = 0

    def __call__(self):
        self.attempts += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class TestCallWithRetry(unittest.TestCase):

    def setUp(self):
        self.sleeps = []

    def test_success_after_two_rate_limits(self):
        call = ScriptedCall([ProviderError.from_status(429, ""), ProviderError.from_status(429, "")])

        self.assertEqual(call_with_retry(call, sleep=self.sleeps.append), "ok")
        self.assertEqual(call.attempts, 3)
        self.assertEqual(self.sleeps, [1.0, 2.0])

    def test_auth_error_not_retried(self):
        call = ScriptedCall([ProviderError.from_status(401, "bad key")])

        with self.assertRaises(ProviderError) as ctx:
            call_with_retry(call, sleep=self.sleeps.append)
        self.assertEqual(ctx.exception.category, ErrorCategory.AUTHENTICATION)
        self.assertEqual(call.attempts, 1)
        self.assertEqual(self.sleeps, [])

    def test_other_errors_not_retried(self):
        for error in [
            ProviderError.from_status(500, ""),
            ProviderError.from_status(504, ""),
            ProviderError(ErrorCategory.NETWORK, "connection refused"),
            ProviderError(ErrorCategory.PARSE, "not json"),
        ]:
            call = ScriptedCall([error])
            with self.assertRaises(ProviderError):
                call_with_retry(call, sleep=self.sleeps.append)
            self.assertEqual(call.attempts, 1)
        self.assertEqual(self.sleeps, [])

    def test_gives_up_after_three_retries(self):
        call = ScriptedCall([ProviderError.from_status(429, "")] * 5)

        with self.assertRaises(ProviderError) as ctx:
            call_with_retry(call, sleep=self.sleeps.append)
        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(call.attempts, 4)
        self.assertEqual(self.sleeps, [1.0, 2.0, 4.0])

    def test_message_mentioning_429_is_not_rate_limit(self):
        call = ScriptedCall([ProviderError(ErrorCategory.API, "upstream said 429", status_code=502)])
        with self.assertRaises(ProviderError):
            call_with_retry(call, sleep=self.sleeps.append)
        self.assertEqual(call.attempts, 1)


if __name__ == "__main__":
    unittest.main()
