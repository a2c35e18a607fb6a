"""
Error taxonomy for askdesk.

Every failure carries a stable machine-readable ``kind`` plus a human
message. Tool-bridge failures reach the caller of the orchestrator as
``DatabaseQueryFailed`` with the original error chained as ``__cause__``.
"""

from typing import Any, Dict


class AskdeskError(Exception):
    """Base class for all askdesk errors."""

    kind = "internal_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": self.message}


class InvalidInput(AskdeskError):
    """A required field is missing, empty or malformed. Never retried."""

    kind = "invalid_input"


class RetriesExhausted(AskdeskError):
    """The embedding backend kept rate-limiting past the retry limit."""

    kind = "retries_exhausted"


class BackendError(AskdeskError):
    """Embedding or generative backend failed for a non-rate-limit reason."""

    kind = "backend_error"


class StoreUnavailable(AskdeskError):
    """Vector store search failed. Recovered locally by the retriever."""

    kind = "store_unavailable"


class ToolBridgeError(AskdeskError):
    """Base class for failures on the query-executor path."""

    kind = "tool_bridge_error"


class ConnectFailed(ToolBridgeError):
    kind = "connect_failed"


class NoToolsAvailable(ToolBridgeError):
    kind = "no_tools_available"


class ToolTimeout(ToolBridgeError):
    kind = "tool_timeout"


class ToolExecutionError(ToolBridgeError):
    """The remote tool answered with an error payload (``isError: true``)."""

    kind = "tool_execution_error"


class UnsupportedMultiHopToolCall(ToolBridgeError):
    """The backend asked for more than one tool call in a single question."""

    kind = "unsupported_multi_hop_tool_call"


class DatabaseQueryFailed(AskdeskError):
    kind = "database_query_failed"
