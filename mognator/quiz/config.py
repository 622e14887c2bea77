from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class QuizConfig:
    max_questions: int = 12
    min_questions: int = 3
    recent_group_avoid: int = 2
    top_candidates: int = 3  # random pick among this many best-scoring questions


DEFAULT_QUIZ_CONFIG = QuizConfig()
