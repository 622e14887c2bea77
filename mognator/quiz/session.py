from __future__ import annotations

import logging
import random
import threading
import time
import uuid

from ..catalog.data_store import Catalog
from ..catalog.models import AnswerId, GenreResult, Question, QuestionAnswer
from ..inference.config import DEFAULT_INFERENCE_CONFIG, InferenceConfig
from ..inference.engine import InferenceEngine
from ..inference.evidence import CountsMap
from .config import DEFAULT_QUIZ_CONFIG, QuizConfig
from .selector import QuestionSelector

logger = logging.getLogger(__name__)


class QuizError(Exception):
    """Base class for misuse of a quiz session."""


class UnknownQuestionError(QuizError):
    pass


class QuestionAlreadyAnsweredError(QuizError):
    pass


class QuizFinishedError(QuizError):
    pass


class QuestionExcludedError(QuizError):
    pass


class NothingToUndoError(QuizError):
    pass


class QuizSession:
    """One user's run through the questionnaire.

    Owns its own engine and selector; nothing here is shared with other
    sessions apart from the read-only catalog.
    """

    def __init__(
        self,
        catalog: Catalog,
        counts: CountsMap | None = None,
        config: QuizConfig = DEFAULT_QUIZ_CONFIG,
        inference_config: InferenceConfig = DEFAULT_INFERENCE_CONFIG,
        rng: random.Random | None = None,
    ) -> None:
        rng = rng or random.Random()
        self.catalog = catalog
        self.config = config
        # Reason templates get their own stream, independent of question selection.
        reason_rng = random.Random(rng.getrandbits(64))
        self.engine = InferenceEngine(catalog, counts, inference_config, rng=reason_rng)
        self.selector = QuestionSelector(catalog, config, rng=rng)
        self.answers: list[QuestionAnswer] = []
        self.current_question: Question | None = None
        self.finish_recorded = False
        self._exhausted = False
        self._reopened = False
        self.last_active = time.time()

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    def start(self) -> Question | None:
        self.engine.reset()
        self.selector.reset()
        self.answers = []
        self._exhausted = False
        self._reopened = False
        self.finish_recorded = False
        self._advance()
        return self.current_question

    def _advance(self) -> None:
        if self.is_finished():
            self.current_question = None
            return
        self.current_question = self.selector.next_question(self.answers, self.engine)
        if self.current_question is None:
            self._exhausted = True

    def answer(self, question_id: str, answer_id: AnswerId | str) -> Question | None:
        """Record an answer, update the distribution and propose the next question."""
        if self.is_finished():
            raise QuizFinishedError("Quiz is already finished")

        question = self.selector.get_question(question_id)
        if question is None or not question.enabled:
            raise UnknownQuestionError(f"Unknown question: {question_id}")
        if question_id in self.selector.answered:
            raise QuestionAlreadyAnsweredError(f"Question already answered: {question_id}")
        if question_id in self.selector.excluded:
            raise QuestionExcludedError(f"Question excluded by an earlier answer: {question_id}")

        record = QuestionAnswer(question_id=question_id, answer_id=AnswerId(answer_id))
        self.answers.append(record)
        self.selector.mark_answered(question_id)
        self._reopened = False
        self.engine.update(question, record.answer_id.value)
        self.last_active = time.time()

        self._advance()
        return self.current_question

    def undo(self) -> Question:
        """Drop the last answer and rebuild the distribution from the remaining ones."""
        if not self.answers:
            raise NothingToUndoError("No answer to undo")

        last = self.answers.pop()
        self.selector.unmark_answered(last.question_id)
        self.engine.reset()
        for answer in self.answers:
            question = self.selector.get_question(answer.question_id)
            if question is not None:
                self.engine.update(question, answer.answer_id.value)

        self._exhausted = False
        # The undone question is open again until it is re-answered.
        self._reopened = True
        self.current_question = self.selector.get_question(last.question_id)
        self.last_active = time.time()
        return self.current_question

    def is_finished(self) -> bool:
        if self._reopened:
            return False
        n = self.answered_count
        if not self.selector.should_continue(n) or self._exhausted:
            return True
        return n >= self.config.min_questions and self.engine.can_terminate_early()

    def results(self, n: int = 3) -> list[GenreResult]:
        return self.engine.top_n(n)


class QuizSessionRegistry:
    """Maps opaque session ids to independent quiz sessions."""

    def __init__(self, ttl_seconds: float = 3600.0) -> None:
        self.ttl_seconds = ttl_seconds
        self._sessions: dict[str, QuizSession] = {}
        self._lock = threading.Lock()

    def _purge_expired(self) -> None:
        cutoff = time.time() - self.ttl_seconds
        expired = [sid for sid, s in self._sessions.items() if s.last_active < cutoff]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.debug("Dropped %d idle quiz sessions", len(expired))

    def create(
        self,
        catalog: Catalog,
        counts: CountsMap | None = None,
        config: QuizConfig = DEFAULT_QUIZ_CONFIG,
    ) -> tuple[str, QuizSession]:
        session = QuizSession(catalog, counts, config)
        session_id = uuid.uuid4().hex
        with self._lock:
            self._purge_expired()
            self._sessions[session_id] = session
        return session_id, session

    def get(self, session_id: str | None) -> QuizSession | None:
        if not session_id:
            return None
        with self._lock:
            return self._sessions.get(session_id)

    def discard(self, session_id: str | None) -> None:
        if not session_id:
            return
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
