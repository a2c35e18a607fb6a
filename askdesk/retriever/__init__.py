"""
Retriever - Question Answering Pipeline

Key Components:
- KeywordIntentClassifier: Routes questions to the database or document path
- Searcher: Embeds questions and retrieves FAQ passages from the vector store
- GenerationClient: Plain and tool-augmented generation
- AnswerOrchestrator: Ties routing, retrieval, generation and history together

Pipeline:
1. Render the user's previous turns
2. Classify the question
3. Query the database through the Tool Bridge, or retrieve context and generate
4. Record the turn
"""

from .router import Intent, IntentClassifier, KeywordIntentClassifier
from .searcher import Searcher
from .generator import FlowState, GenerationClient, ToolCallFlow
from .orchestrator import AnswerOrchestrator, AnswerResult

__all__ = [
    "Intent",
    "IntentClassifier",
    "KeywordIntentClassifier",
    "Searcher",
    "FlowState",
    "GenerationClient",
    "ToolCallFlow",
    "AnswerOrchestrator",
    "AnswerResult",
]
