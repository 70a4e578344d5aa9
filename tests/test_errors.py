"""
Tests for the error taxonomy and exit codes.
"""

import unittest

from clai.core.errors import (
    ApiError,
    ConfigError,
    ErrorCategory,
    GeneralError,
    Interrupted,
    ProviderError,
    ResponseParseError,
    SafetyError,
    UsageError,
)


class TestExitCodes(unittest.TestCase):

    def test_exit_codes(self):
        self.assertEqual(GeneralError("x").exit_code, 1)
        self.assertEqual(UsageError("x").exit_code, 2)
        self.assertEqual(ConfigError("x").exit_code, 3)
        self.assertEqual(ApiError("x").exit_code, 4)
        self.assertEqual(SafetyError("x").exit_code, 5)
        self.assertEqual(Interrupted().exit_code, 130)

    def test_provider_and_parse_errors_are_api_errors(self):
        self.assertIsInstance(ProviderError(ErrorCategory.NETWORK, "down"), ApiError)
        self.assertIsInstance(ResponseParseError("bad", "raw"), ApiError)

    def test_cause_chain(self):
        try:
            try:
                raise ValueError("root cause")
            except ValueError as e:
                raise ConfigError("could not load") from e
        except ConfigError as error:
            chain = error.cause_chain()

        self.assertEqual(chain[0], "Configuration error: could not load")
        self.assertEqual(chain[1], "root cause")


class TestProviderError(unittest.TestCase):

    def test_from_status_classification(self):
        cases = {
            401: ErrorCategory.AUTHENTICATION,
            403: ErrorCategory.AUTHENTICATION,
            429: ErrorCategory.RATE_LIMIT,
            408: ErrorCategory.TIMEOUT,
            504: ErrorCategory.TIMEOUT,
            500: ErrorCategory.API,
            404: ErrorCategory.API,
        }
        for status, category in cases.items():
            error = ProviderError.from_status(status, "body")
            self.assertEqual(error.category, category, status)
            self.assertEqual(error.status_code, status)

    def test_only_429_is_retryable(self):
        self.assertTrue(ProviderError.from_status(429, "").retryable)
        self.assertFalse(ProviderError.from_status(500, "").retryable)
        self.assertFalse(ProviderError(ErrorCategory.NETWORK, "down").retryable)

    def test_message_carries_status_and_body(self):
        error = ProviderError.from_status(401, '{"error": "bad key"}', provider="openrouter")
        self.assertIn("Authentication error (401)", str(error))
        self.assertIn("bad key", str(error))
        self.assertEqual(error.provider, "openrouter")

    def test_parse_error_keeps_raw_text(self):
        error = ResponseParseError("Failed", "garbage")
        self.assertEqual(error.raw, "garbage")
        self.assertIn("Response: garbage", str(error))


if __name__ == "__main__":
    unittest.main()
