"""Chat request/response value types shared by every provider.

All types are frozen dataclasses. Builder-style helpers return new values
instead of mutating, so a request can be handed to several providers in turn
without any of them affecting what the next one sees.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Tuple


class Role(Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(Role.ASSISTANT, content)

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class ChatRequest:
    """
    A chat completion request.

    Attributes:
        messages: Ordered conversation (system prompt first)
        model: Model id; None lets the provider pick its default
        temperature: Sampling temperature; None lets the provider decide
        max_tokens: Completion token cap; None lets the provider decide
    """

    messages: Tuple[ChatMessage, ...] = field(default_factory=tuple)
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    @classmethod
    def new(cls, messages: Iterable[ChatMessage]) -> "ChatRequest":
        return cls(messages=tuple(messages))

    def with_model(self, model: str) -> "ChatRequest":
        return replace(self, model=model)

    def with_temperature(self, temperature: float) -> "ChatRequest":
        return replace(self, temperature=temperature)

    def with_max_tokens(self, max_tokens: int) -> "ChatRequest":
        return replace(self, max_tokens=max_tokens)


@dataclass(frozen=True)
class Usage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    def to_dict(self) -> dict:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class ChatResponse:
    content: str
    model: Optional[str] = None
    usage: Optional[Usage] = None

    def with_model(self, model: str) -> "ChatResponse":
        return replace(self, model=model)

    def with_usage(self, usage: Usage) -> "ChatResponse":
        return replace(self, usage=usage)
