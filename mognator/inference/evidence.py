from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Protocol

from ..catalog.models import QuestionAnswer

logger = logging.getLogger(__name__)

# counts[genre_id][question_id][answer_id] = number of observations
CountsMap = dict[str, dict[str, dict[str, int]]]


class EvidenceStore(Protocol):
    def get_counts(self) -> CountsMap: ...


class InMemoryEvidenceStore:
    """Counts (genre, question, answer) observations from finished sessions.

    ``get_counts`` returns a deep copy, so a running session keeps the
    snapshot it started with while other sessions keep recording.
    """

    def __init__(self, counts: CountsMap | None = None) -> None:
        self._counts: CountsMap = {}
        self._records = 0
        self._lock = threading.Lock()
        for genre_id, questions in (counts or {}).items():
            for question_id, answers in questions.items():
                for answer_id, n in answers.items():
                    self._add(genre_id, question_id, answer_id, n)

    def _add(self, genre_id: str, question_id: str, answer_id: str, n: int = 1) -> None:
        by_answer = self._counts.setdefault(genre_id, {}).setdefault(question_id, {})
        by_answer[answer_id] = by_answer.get(answer_id, 0) + n
        self._records += n

    def record(self, genre_id: str, question_id: str, answer_id: str) -> None:
        with self._lock:
            self._add(genre_id, question_id, answer_id)

    def record_session(self, genre_id: str, answers: Iterable[QuestionAnswer]) -> int:
        """Record every answer of a session against the genre the user picked."""
        recorded = 0
        with self._lock:
            for answer in answers:
                self._add(genre_id, answer.question_id, answer.answer_id.value)
                recorded += 1
        logger.info("Recorded %d observations for genre %s", recorded, genre_id)
        return recorded

    def get_counts(self) -> CountsMap:
        with self._lock:
            return {
                genre_id: {qid: dict(answers) for qid, answers in questions.items()}
                for genre_id, questions in self._counts.items()
            }

    def record_count(self) -> int:
        return self._records

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
            self._records = 0
        logger.info("Evidence store cleared")
