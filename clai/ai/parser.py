"""Extraction of shell commands from raw model replies."""

import json
import re
from re import DOTALL
from typing import Any, List, Optional

from clai.core.errors import ResponseParseError

# ```bash / ```sh / ```shell / bare ``` fences; group 1 is the body.
COMMAND_FENCE_RE = re.compile(r"```(?:bash|sh|shell)?\s*\n(.*?)\n?```", DOTALL)


class ResponseParser:
    """
    Turns model output into one or more commands.

    Single-command extraction never fails. Multi-command extraction walks
    through progressively looser strategies and only raises when none of
    them yields a non-empty command.
    """

    @staticmethod
    def extract_command(response_text: str) -> str:
        """
        Return the body of the first shell code fence, or the whole reply.

        Args:
            response_text: Raw response text from the model

        Returns:
            The trimmed command ("" for an empty reply)
        """
        match = COMMAND_FENCE_RE.search(response_text)
        if match:
            return match.group(1).strip()
        return response_text.strip()

    @staticmethod
    def extract_commands(response_text: str) -> List[str]:
        """
        Parse a reply expected to be {"commands": [...]}.

        Strategies, in order:
            1. the (unfenced) text as a {"commands": [...]} object
            2. the text as a bare JSON array of strings
            3. the first "{" .. last "}" substring as the object shape
            4. single-command extraction, as a one-element list

        Raises:
            ResponseParseError: No strategy produced a command, or the model
                explicitly returned an empty command list
        """
        response = response_text.strip()
        json_text = ResponseParser._strip_json_fence(response)
        empty_list_seen = False
        decode_error: Optional[str] = None

        try:
            parsed = json.loads(json_text)
        except ValueError as e:
            parsed = None
            decode_error = str(e)

        commands = ResponseParser._commands_from_object(parsed)
        if commands:
            return commands
        empty_list_seen = empty_list_seen or commands == []

        commands = ResponseParser._commands_from_array(parsed)
        if commands:
            return commands
        empty_list_seen = empty_list_seen or commands == []

        start, end = json_text.find("{"), json_text.rfind("}")
        if start != -1 and end > start:
            try:
                embedded = json.loads(json_text[start:end + 1])
            except ValueError:
                embedded = None
            commands = ResponseParser._commands_from_object(embedded)
            if commands:
                return commands
            empty_list_seen = empty_list_seen or commands == []

        if empty_list_seen:
            raise ResponseParseError("AI returned no commands", response)

        single = ResponseParser.extract_command(response)
        if single:
            return [single]

        reason = decode_error or "empty response"
        raise ResponseParseError(f"Failed to parse AI response as JSON: {reason}", response)

    @staticmethod
    def _strip_json_fence(response: str) -> str:
        if not response.startswith("```"):
            return response
        if response.startswith("```json"):
            body = response[len("```json"):]
        else:
            body = response[len("```"):]
        if body.endswith("```"):
            body = body[:-len("```")]
        return body.strip()

    @staticmethod
    def _clean(items: List[str]) -> List[str]:
        return [item.strip() for item in items if item.strip()]

    @staticmethod
    def _commands_from_object(parsed: Any) -> Optional[List[str]]:
        """None when the shape does not match, a (possibly empty) list otherwise."""
        if not isinstance(parsed, dict):
            return None
        items = parsed.get("commands")
        if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
            return None
        return ResponseParser._clean(items)

    @staticmethod
    def _commands_from_array(parsed: Any) -> Optional[List[str]]:
        if not isinstance(parsed, list) or not all(isinstance(i, str) for i in parsed):
            return None
        return ResponseParser._clean(parsed)


def extract_command(response_text: str) -> str:
    return ResponseParser.extract_command(response_text)


def extract_commands(response_text: str) -> List[str]:
    return ResponseParser.extract_commands(response_text)
