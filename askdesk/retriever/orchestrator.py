"""
Answer Orchestrator

Top-level coordinator for one question:

1. Render the user's prior turns
2. Classify the question (database vs. document)
3. Database: run the question through the query executor via the Tool Bridge
   Document: retrieve context, build the grounded prompt, generate
4. Record the turn in history (only after a successful answer)
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..adapter.tool_bridge import ToolBridge
from ..common.errors import AskdeskError, DatabaseQueryFailed, InvalidInput
from ..common.history import ConversationTurn, HistoryStore
from ..common.schemas import RetrievedDocument
from .generator import GenerationClient
from .router import Intent, IntentClassifier, KeywordIntentClassifier
from .searcher import Searcher

logger = logging.getLogger("askdesk.retriever.orchestrator")

NO_HISTORY = "No previous conversation history"
NO_DOCUMENTS = "No relevant documents found"
DATABASE_CONTEXT = "Database query executed"
DATABASE_TOOL = "query_database"

ANSWER_PROMPT = """{persona}

Conversation History:
{history}

Context:
{context}

Question:
{question}"""

DATABASE_PROMPT = """You answer questions about the business database using the {tool} tool.
Write a single SQL SELECT statement for the question, call the tool with it,
then answer from the returned rows. Only SELECT statements are accepted.

Conversation History:
{history}

Question:
{question}"""


@dataclass
class AnswerResult:
    """Answer plus the context it was grounded on"""
    answer: str
    context: str


def render_history(turns: Sequence[ConversationTurn]) -> str:
    """Oldest first, numbered from 1."""
    if not turns:
        return NO_HISTORY
    return "\n\n".join(
        f"Previous Q{i}: {turn.question}\nPrevious A{i}: {turn.answer}"
        for i, turn in enumerate(turns, start=1)
    )


def render_context(documents: Sequence[RetrievedDocument]) -> str:
    if not documents:
        return NO_DOCUMENTS
    return "\n\n".join(doc.render() for doc in documents)


def build_prompt(persona: str, history: str, context: str, question: str) -> str:
    return ANSWER_PROMPT.format(
        persona=persona,
        history=history,
        context=context,
        question=question,
    )


class AnswerOrchestrator:
    """
    Answers one question for one user.

    Dependencies are injected; the history store in particular is passed in
    by the caller and shared across requests.
    """

    def __init__(
        self,
        history: HistoryStore,
        searcher: Searcher,
        generator: GenerationClient,
        tool_bridge: ToolBridge,
        classifier: Optional[IntentClassifier] = None,
        persona: str = "",
        default_language: str = "Amharic",
        database_mode: str = "tools",
    ):
        if database_mode not in ("tools", "direct"):
            raise ValueError(f"Unknown database_mode: {database_mode}")
        self._history = history
        self._searcher = searcher
        self._generator = generator
        self._tool_bridge = tool_bridge
        self._classifier = classifier or KeywordIntentClassifier()
        self._persona = persona.replace("{language}", default_language) if persona else (
            f"You are a helpful assistant. Respond in {default_language} "
            f"unless the user asks otherwise."
        )
        self.database_mode = database_mode

    async def answer(self, question: str, user_id: str) -> AnswerResult:
        if not isinstance(question, str) or not question.strip():
            raise InvalidInput("Question must be a non-empty string")
        if not isinstance(user_id, str) or not user_id.strip():
            raise InvalidInput("User ID must be a non-empty string")

        question = question.strip()
        history_context = render_history(self._history.get(user_id))
        intent = self._classifier.classify(question)
        logger.info("Routing question for %s as %s", user_id, intent.value)

        if intent == Intent.DATABASE:
            answer = await self._answer_from_database(question, history_context)
            context = DATABASE_CONTEXT
        else:
            documents = await self._searcher.retrieve(question)
            context = render_context(documents)
            prompt = build_prompt(self._persona, history_context, context, question)
            answer = await self._generator.complete(prompt)

        self._history.append(user_id, ConversationTurn(question=question, answer=answer))
        return AnswerResult(answer=answer, context=context)

    async def _answer_from_database(self, question: str, history_context: str) -> str:
        """Database path. Any failure becomes DatabaseQueryFailed; no document fallback."""
        try:
            async with self._tool_bridge.session() as session:
                tools = await session.list_tools()
                if self.database_mode == "direct":
                    return await session.invoke(DATABASE_TOOL, {"sql": question})

                prompt = DATABASE_PROMPT.format(
                    tool=DATABASE_TOOL,
                    history=history_context,
                    question=question,
                )
                return await self._generator.complete_with_tools(prompt, tools, session.invoke)
        except AskdeskError as e:
            logger.error("Error querying database (%s): %s", e.kind, e.message)
            raise DatabaseQueryFailed(f"Failed to query database: {e.message}") from e
        except Exception as e:
            logger.error("Error querying database: %s", e)
            raise DatabaseQueryFailed(f"Failed to query database: {e}") from e
