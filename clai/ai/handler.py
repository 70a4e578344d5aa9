"""Turns gathered context and an instruction into candidate commands."""

import logging
from typing import List, Optional

from rich.console import Console

from clai.ai.chain import ProviderChain
from clai.ai.parser import extract_command, extract_commands
from clai.ai.prompt import build_chat_request, build_multi_chat_request, build_prompt
from clai.context import ContextData
from clai.core.errors import ResponseParseError
from clai.ui.output import print_debug_request

logger = logging.getLogger(__name__)


def build_context_prompt(context: ContextData, instruction: str) -> str:
    prompt = build_prompt(
        context.system_context(), context.dir_context(), context.history, instruction
    )
    if context.stdin:
        prompt = f"{prompt}\n\nStdin input: {context.stdin}"
    return prompt


class CommandGenerator:
    """
    Sends prompts through a provider chain and parses the replies.

    Args:
        chain: Provider chain used for every request
        console: stderr console for --debug output
        debug: Print each outgoing request before it is sent
    """

    def __init__(self, chain: ProviderChain, console: Optional[Console] = None, debug: bool = False):
        self.chain = chain
        self.console = console
        self.debug = debug

    def resolve_model(self, model: Optional[str]) -> Optional[str]:
        """
        Strip the provider prefix when it names the first provider in the chain.

        "openrouter/gpt-4o" becomes "gpt-4o" for an openrouter-first chain;
        any other "vendor/model" id is passed through unchanged.
        """
        if not model:
            return None
        provider, model_name = self.chain.parse_model(model)
        providers = self.chain.providers()
        if providers and provider == providers[0]:
            return model_name
        return model

    def generate_command(self, prompt: str, model: Optional[str] = None) -> str:
        request = build_chat_request(prompt, self.resolve_model(model))
        if self.debug and self.console:
            print_debug_request(request, self.console)

        response = self.chain.complete(request)
        logger.debug("Model %s replied: %r", response.model, response.content)

        command = extract_command(response.content)
        if not command:
            raise ResponseParseError("AI returned an empty command", response.content)
        return command

    def generate_commands(self, prompt: str, num_options: int, model: Optional[str] = None) -> List[str]:
        request = build_multi_chat_request(prompt, num_options, self.resolve_model(model))
        if self.debug and self.console:
            print_debug_request(request, self.console, num_options=num_options)

        response = self.chain.complete(request)
        logger.debug("Model %s replied: %r", response.model, response.content)

        return extract_commands(response.content)
