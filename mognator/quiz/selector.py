from __future__ import annotations

import logging
import random
from collections.abc import Sequence

from ..catalog.data_store import Catalog
from ..catalog.models import AFFIRMATIVE_ANSWERS, Question, QuestionAnswer
from ..inference.engine import InferenceEngine
from .config import DEFAULT_QUIZ_CONFIG, QuizConfig

logger = logging.getLogger(__name__)


class QuestionSelector:
    """Chooses the next question for one quiz session."""

    def __init__(
        self,
        catalog: Catalog,
        config: QuizConfig = DEFAULT_QUIZ_CONFIG,
        rng: random.Random | None = None,
    ) -> None:
        self.catalog = catalog
        self.config = config
        self._rng = rng or random.Random()
        self._questions: dict[str, Question] = {q.id: q for q in catalog.questions}
        self.answered: set[str] = set()
        self.excluded: set[str] = set()
        self.recent_groups: list[str] = []

    def get_question(self, question_id: str) -> Question | None:
        return self._questions.get(question_id)

    def available_questions(self) -> list[Question]:
        return [
            q for q in self.catalog.enabled_questions
            if q.id not in self.answered and q.id not in self.excluded
        ]

    def mark_answered(self, question_id: str) -> None:
        self.answered.add(question_id)

    def unmark_answered(self, question_id: str) -> None:
        # Exclusions caused by this answer stay in place.
        self.answered.discard(question_id)

    def reset(self) -> None:
        self.answered.clear()
        self.excluded.clear()
        self.recent_groups = []

    def should_continue(self, answered_count: int) -> bool:
        return answered_count < self.config.max_questions

    def apply_conflicts(self, answers: Sequence[QuestionAnswer]) -> None:
        """Exclude questions that conflict with a confident yes to the latest answer."""
        if not answers:
            return
        latest = answers[-1]
        if latest.answer_id.value not in AFFIRMATIVE_ANSWERS:
            return
        targets = self.catalog.conflicts.get(latest.question_id, ())
        new = [t for t in targets if t not in self.excluded]
        if new:
            self.excluded.update(new)
            logger.debug("%s excluded %s", latest.question_id, ", ".join(new))

    def _update_recent_groups(self, answers: Sequence[QuestionAnswer]) -> None:
        window = answers[-self.config.recent_group_avoid:] if self.config.recent_group_avoid > 0 else []
        groups = []
        for answer in window:
            question = self._questions.get(answer.question_id)
            if question is not None:
                groups.append(question.group)
        self.recent_groups = groups

    def next_question(
        self,
        answers: Sequence[QuestionAnswer],
        engine: InferenceEngine | None = None,
    ) -> Question | None:
        self.apply_conflicts(answers)

        available = self.available_questions()
        if not available:
            return None

        self._update_recent_groups(answers)
        preferred = [q for q in available if q.group not in self.recent_groups]
        candidates = preferred or available

        if engine is not None and answers:
            top_genres = engine.top_genres()
            scored = sorted(
                candidates,
                key=lambda q: engine.question_information_score(q, top_genres),
                reverse=True,
            )
            return self._rng.choice(scored[: self.config.top_candidates])

        return self._rng.choice(candidates)
