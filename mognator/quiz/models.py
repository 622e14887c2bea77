from __future__ import annotations

from pydantic import BaseModel, Field

from ..catalog.models import AnswerId, GenreResult, Question


class AnswerRequest(BaseModel):
    question_id: str = Field(..., min_length=1)
    answer_id: AnswerId


class SelectRequest(BaseModel):
    genre_id: str = Field(..., min_length=1)


class QuizStateResponse(BaseModel):
    question: Question | None
    answered_count: int
    max_questions: int
    min_questions: int
    finished: bool
    can_undo: bool
    top_confidence: float


class GenreResultsResponse(BaseModel):
    results: list[GenreResult]
    answered_count: int
    finished: bool
    top_confidence: float
    top1_top2_gap: float


class SelectResponse(BaseModel):
    status: str
    genre_id: str
    recorded: int
    total_records: int
