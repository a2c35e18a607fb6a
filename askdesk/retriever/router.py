"""
Query Router

Decides whether a question goes to the database tool path or to document
retrieval. The default classifier is a substring heuristic: it misroutes
questions such as "What's your favorite query for pasta?" to the database
path. Swap in a stronger ``IntentClassifier`` rather than editing the
keyword rule.
"""

from enum import Enum
from typing import Iterable, Protocol


class Intent(str, Enum):
    DATABASE = "database"
    DOCUMENT = "document"


class IntentClassifier(Protocol):
    def classify(self, question: str) -> Intent: ...


class KeywordIntentClassifier:
    """DATABASE if the lowercased question contains any keyword."""

    DEFAULT_KEYWORDS = ("database", "query")

    def __init__(self, keywords: Iterable[str] = DEFAULT_KEYWORDS) -> None:
        self.keywords = tuple(k.lower() for k in keywords)

    def classify(self, question: str) -> Intent:
        lowered = question.lower()
        if any(keyword in lowered for keyword in self.keywords):
            return Intent.DATABASE
        return Intent.DOCUMENT
