"""
Tests for the chat value types shared by all providers.
"""

import unittest
from dataclasses import FrozenInstanceError

from clai.ai.types import ChatMessage, ChatRequest, ChatResponse, Role, Usage


class TestChatTypes(unittest.TestCase):

    def test_message_constructors(self):
        self.assertEqual(ChatMessage.system("s"), ChatMessage(Role.SYSTEM, "s"))
        self.assertEqual(ChatMessage.user("u").role, Role.USER)
        self.assertEqual(ChatMessage.assistant("a").to_dict(), {"role": "assistant", "content": "a"})

    def test_request_builders_return_new_values(self):
        base = ChatRequest.new([ChatMessage.user("hi")])
        tuned = base.with_model("m").with_temperature(0.2).with_max_tokens(50)

        self.assertIsNone(base.model)
        self.assertIsNone(base.temperature)
        self.assertEqual(tuned.model, "m")
        self.assertEqual(tuned.temperature, 0.2)
        self.assertEqual(tuned.max_tokens, 50)
        self.assertEqual(tuned.messages, base.messages)

    def test_request_is_immutable(self):
        request = ChatRequest.new([ChatMessage.user("hi")])
        with self.assertRaises(FrozenInstanceError):
            request.model = "other"
        self.assertIsInstance(request.messages, tuple)

    def test_response_builders(self):
        usage = Usage(1, 2, 3)
        response = ChatResponse("ls").with_model("m").with_usage(usage)
        self.assertEqual(response.model, "m")
        self.assertEqual(response.usage.to_dict(), {"prompt_tokens": 1, "completion_tokens": 2, "total_tokens": 3})


if __name__ == "__main__":
    unittest.main()
