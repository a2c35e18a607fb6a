"""Shared request-scoped data types."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RetrievedDocument:
    """A payload returned by the vector store"""
    label: str
    text: str

    def render(self) -> str:
        return f"Location: {self.label}\n{self.text}"


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool declared by the query executor"""
    name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolInvocationRequest:
    """A tool call requested by the generative backend"""
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    call_id: str = ""


@dataclass(frozen=True)
class ToolResult:
    call_id: str
    name: str
    text: str
    is_error: bool = False


@dataclass(frozen=True)
class ChatMessage:
    """
    Provider-neutral conversation entry.

    Exactly one of ``text``, ``tool_call`` or ``tool_result`` is set.
    ``role`` is "user" or "assistant"; tool calls are always assistant
    messages and tool results are always user messages.
    """
    role: str
    text: Optional[str] = None
    tool_call: Optional[ToolInvocationRequest] = None
    tool_result: Optional[ToolResult] = None

    @classmethod
    def user(cls, text: str) -> "ChatMessage":
        return cls(role="user", text=text)

    @classmethod
    def assistant_tool_call(cls, call: ToolInvocationRequest) -> "ChatMessage":
        return cls(role="assistant", tool_call=call)

    @classmethod
    def tool_output(cls, result: ToolResult) -> "ChatMessage":
        return cls(role="user", tool_result=result)


@dataclass
class LLMResponse:
    """One backend response: plain text, tool calls, or both."""
    text: str = ""
    tool_calls: List[ToolInvocationRequest] = field(default_factory=list)

    @property
    def wants_tool(self) -> bool:
        return bool(self.tool_calls)
