"""Prompt and chat-request construction."""

from typing import Iterable, Optional

from clai.ai.types import ChatMessage, ChatRequest

SINGLE_COMMAND_SYSTEM_PROMPT = (
    "You are a helpful assistant that converts natural language instructions into "
    "executable shell commands. Respond with ONLY the command, no explanations or markdown."
)

MULTI_COMMAND_SYSTEM_PROMPT = """You are a helpful assistant that converts natural language instructions into executable shell commands.

Generate exactly {count} different command options that accomplish the user's goal.
Each command should be a valid, executable shell command.
Provide alternatives that vary in approach, verbosity, or options used.

IMPORTANT: Respond ONLY with a valid JSON object in this exact format:
{{"commands": ["command1", "command2", "command3"]}}

Rules:
- Return exactly {count} commands in the "commands" array
- Each command must be a single string (escape quotes properly)
- No explanations, comments, or markdown - just the JSON object
- Commands should be practical alternatives, not duplicates
- Order from simplest/most common to more advanced/specific"""

CLOSING_INSTRUCTION = (
    "Respond ONLY with the executable command. Do not include markdown code fences, "
    "explanations, or any other text. Just the command itself."
)


def build_prompt(
    system_context: str,
    dir_context: str,
    history: Iterable[str],
    instruction: str,
) -> str:
    """
    Assemble the user prompt from the gathered context.

    Args:
        system_context: Serialized system information
        dir_context: Working directory summary
        history: Recent shell commands, oldest first
        instruction: The user's natural language request

    Returns:
        The complete prompt text
    """
    sections = [
        f"System Context:\n{system_context}",
        f"Directory Context:\n{dir_context}",
    ]

    history = list(history)
    if history:
        lines = "\n".join(f"  {i}. {cmd}" for i, cmd in enumerate(history, 1))
        sections.append(f"Recent Shell History:\n{lines}")

    sections.append(f"User Instruction: {instruction}")
    sections.append(CLOSING_INSTRUCTION)
    return "\n\n".join(sections)


def build_chat_request(prompt: str, model: Optional[str] = None) -> ChatRequest:
    request = ChatRequest.new(
        [ChatMessage.system(SINGLE_COMMAND_SYSTEM_PROMPT), ChatMessage.user(prompt)]
    )
    return request.with_model(model) if model else request


def build_multi_chat_request(
    prompt: str, num_options: int, model: Optional[str] = None
) -> ChatRequest:
    """Request `num_options` alternatives as a {"commands": [...]} JSON object."""
    system_prompt = MULTI_COMMAND_SYSTEM_PROMPT.format(count=num_options)
    request = ChatRequest.new([ChatMessage.system(system_prompt), ChatMessage.user(prompt)])
    return request.with_model(model) if model else request
