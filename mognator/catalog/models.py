from __future__ import annotations

import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AnswerId(str, Enum):
    YES = "YES"
    PROB_YES = "PROB_YES"
    UNKNOWN = "UNKNOWN"
    PROB_NO = "PROB_NO"
    NO = "NO"


# Scoring value of each answer on the same [-2, 2] scale as the trait matrix.
ANSWER_VALUES: dict[str, int] = {
    AnswerId.YES.value: 2,
    AnswerId.PROB_YES.value: 1,
    AnswerId.UNKNOWN.value: 0,
    AnswerId.PROB_NO.value: -1,
    AnswerId.NO.value: -2,
}

AFFIRMATIVE_ANSWERS = frozenset({AnswerId.YES.value, AnswerId.PROB_YES.value})


class Genre(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    enabled: bool = True


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    group: str
    enabled: bool = True


class QuestionAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: str
    answer_id: AnswerId
    timestamp: float = Field(default_factory=time.time)


class GenreResult(BaseModel):
    genre: Genre
    probability: float = Field(ge=0.0)
    reason: str
