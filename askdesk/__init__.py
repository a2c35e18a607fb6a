"""
askdesk

Retrieval-augmented FAQ assistant with a read-only SQL side channel.

Philosophy:
- Answers are grounded on retrieved FAQ passages or on database rows
- Database access only through a separate, short-lived executor process
- Vector store failures degrade to an ungrounded answer; tool failures do not

Usage:
    from askdesk.service import create_orchestrator
    from askdesk.common import load_config, HistoryStore
    from askdesk.retriever import AnswerOrchestrator, Searcher, GenerationClient
    from askdesk.adapter import ToolBridge
"""

__version__ = "0.1.0"
