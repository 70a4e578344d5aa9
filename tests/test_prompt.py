"""
Tests for prompt assembly and chat-request construction.
"""

import unittest

from clai.ai.handler import build_context_prompt
from clai.ai.prompt import build_chat_request, build_multi_chat_request, build_prompt
from clai.ai.types import Role
from clai.context import ContextData


class TestBuildPrompt(unittest.TestCase):

    def test_sections_in_order(self):
        prompt = build_prompt('{"os": "Linux"}', "Current directory: /tmp", ["ls", "cd src"], "list files")

        self.assertLess(prompt.index("System Context:"), prompt.index("Directory Context:"))
        self.assertLess(prompt.index("Directory Context:"), prompt.index("Recent Shell History:"))
        self.assertLess(prompt.index("Recent Shell History:"), prompt.index("User Instruction: list files"))
        self.assertIn("  1. ls\n  2. cd src", prompt)
        self.assertTrue(prompt.endswith("Just the command itself."))

    def test_history_section_omitted_when_empty(self):
        prompt = build_prompt("{}", "dir", [], "x")
        self.assertNotIn("Recent Shell History", prompt)

    def test_stdin_appended(self):
        context = ContextData(system={"os": "Linux"}, cwd="/tmp", stdin="line one")
        prompt = build_context_prompt(context, "count lines")
        self.assertTrue(prompt.endswith("Stdin input: line one"))
        self.assertIn("Current directory: /tmp", prompt)


class TestChatRequests(unittest.TestCase):

    def test_single_request(self):
        request = build_chat_request("prompt", "gpt-4o")
        self.assertEqual([m.role for m in request.messages], [Role.SYSTEM, Role.USER])
        self.assertEqual(request.messages[1].content, "prompt")
        self.assertEqual(request.model, "gpt-4o")

    def test_single_request_without_model(self):
        self.assertIsNone(build_chat_request("prompt").model)

    def test_multi_request_names_count(self):
        request = build_multi_chat_request("prompt", 4)
        system = request.messages[0].content
        self.assertIn("Generate exactly 4 different command options", system)
        self.assertIn('{"commands": ["command1", "command2", "command3"]}', system)
        self.assertIsNone(request.model)


if __name__ == "__main__":
    unittest.main()
