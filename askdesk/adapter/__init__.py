from .tool_bridge import ToolBridge, ToolSession

__all__ = [
    "ToolBridge",
    "ToolSession",
]
