"""
Conversation History Store

Per-user bounded log of question/answer turns, kept in memory for the
lifetime of the process.

Known race: the orchestrator reads a user's history before answering and
appends only afterwards. Two concurrent requests for the same user both
read the same snapshot, so neither prompt sees the other's turn. Both turns
are still appended. This is accepted for a best-effort chat log.
"""

import time
from collections import deque
from dataclasses import dataclass, replace
from typing import Callable, Deque, Dict, Tuple


@dataclass(frozen=True)
class ConversationTurn:
    """One answered question. Immutable once created."""
    question: str
    answer: str
    created_at: float = 0.0


class HistoryStore:
    """Maps user id to its most recent ``max_turns`` turns, oldest first."""

    def __init__(self, max_turns: int = 5, clock: Callable[[], float] = time.time) -> None:
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.max_turns = max_turns
        self._clock = clock
        self._turns: Dict[str, Deque[ConversationTurn]] = {}

    def append(self, user_id: str, turn: ConversationTurn) -> None:
        """Append a turn, evicting the oldest one past ``max_turns``."""
        if not turn.created_at:
            turn = replace(turn, created_at=self._clock())
        log = self._turns.get(user_id)
        if log is None:
            log = deque(maxlen=self.max_turns)
            self._turns[user_id] = log
        log.append(turn)

    def get(self, user_id: str) -> Tuple[ConversationTurn, ...]:
        """Snapshot of the user's turns in chronological order."""
        return tuple(self._turns.get(user_id, ()))

    def user_count(self) -> int:
        """Number of users with at least one recorded turn."""
        return len(self._turns)
