from __future__ import annotations

import os
import time

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import (
    GENRE_SELECTED,
    PLACES_SEARCH,
    QUIZ_ANSWER,
    QUIZ_FINISH,
    QUIZ_START,
    QUIZ_UNDO,
    get_events,
    record_event,
)
from .catalog.data_store import get_catalog
from .catalog.models import ANSWER_VALUES
from .inference.config import DEFAULT_INFERENCE_CONFIG
from .inference.evidence import InMemoryEvidenceStore
from .llm.reasons import explain_results
from .places.client import PlacesClient
from .places.config import DEFAULT_PLACES_CONFIG
from .places.location import resolve_search_location
from .places.models import PlacesSearchResponse, ScoringSettings
from .places.scoring import rank_venues
from .quiz.config import DEFAULT_QUIZ_CONFIG
from .quiz.models import (
    AnswerRequest,
    GenreResultsResponse,
    QuizStateResponse,
    SelectRequest,
    SelectResponse,
)
from .quiz.session import (
    NothingToUndoError,
    QuestionAlreadyAnsweredError,
    QuestionExcludedError,
    QuizFinishedError,
    QuizSession,
    QuizSessionRegistry,
    UnknownQuestionError,
)

app = FastAPI(title="Mognator API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "mognator-secret-change-in-production"),
)

app.state.sessions = QuizSessionRegistry()
app.state.evidence = InMemoryEvidenceStore()
app.state.places = PlacesClient()

_QUIZ_KEY = "quiz_id"
_SETTINGS_KEY = "scoring_settings"


def require_quiz(request: Request) -> QuizSession:
    """Raise 404 if the caller has no active quiz session."""
    session = request.app.state.sessions.get(request.session.get(_QUIZ_KEY))
    if session is None:
        raise HTTPException(status_code=404, detail="No active quiz; call /quiz/start first")
    return session


def _quiz_state(session: QuizSession) -> QuizStateResponse:
    return QuizStateResponse(
        question=session.current_question,
        answered_count=session.answered_count,
        max_questions=session.config.max_questions,
        min_questions=session.config.min_questions,
        finished=session.is_finished(),
        can_undo=session.answered_count > 0,
        top_confidence=round(session.engine.top_confidence(), 4),
    )


def _scoring_settings(request: Request) -> ScoringSettings:
    raw = request.session.get(_SETTINGS_KEY)
    if not raw:
        return ScoringSettings()
    try:
        return ScoringSettings(**raw)
    except (TypeError, ValueError):
        return ScoringSettings()


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    catalog = get_catalog()
    return {
        "genres": [g.model_dump() for g in catalog.enabled_genres],
        "question_groups": catalog.groups,
        "question_count": len(catalog.enabled_questions),
        "answer_options": [{"id": a, "value": v} for a, v in ANSWER_VALUES.items()],
        "config": {
            "max_questions": DEFAULT_QUIZ_CONFIG.max_questions,
            "min_questions": DEFAULT_QUIZ_CONFIG.min_questions,
            "recent_group_avoid": DEFAULT_QUIZ_CONFIG.recent_group_avoid,
            "confidence_threshold": DEFAULT_INFERENCE_CONFIG.confidence_threshold,
            "gap_threshold": DEFAULT_INFERENCE_CONFIG.gap_threshold,
        },
    }


@app.get("/genres")
def list_genres(q: str | None = Query(default=None, max_length=100)) -> dict:
    """Enabled genres, optionally filtered by a case-insensitive name substring."""
    genres = get_catalog().enabled_genres
    if q and q.strip():
        needle = q.strip().lower()
        genres = [g for g in genres if needle in g.name.lower()]
    return {"genres": [g.model_dump() for g in genres], "total": len(genres)}


# ── Quiz endpoints ───────────────────────────────────────────────────────


@app.post("/quiz/start", response_model=QuizStateResponse)
def quiz_start(request: Request) -> QuizStateResponse:
    registry: QuizSessionRegistry = request.app.state.sessions
    registry.discard(request.session.get(_QUIZ_KEY))

    # Each session gets its own snapshot of the learned counts.
    counts = request.app.state.evidence.get_counts()
    quiz_id, session = registry.create(get_catalog(), counts)
    session.start()
    request.session[_QUIZ_KEY] = quiz_id

    record_event(QUIZ_START, {"learned_genres": len(counts)})
    return _quiz_state(session)


@app.post("/quiz/answer", response_model=QuizStateResponse)
def quiz_answer(
    body: AnswerRequest,
    session: QuizSession = Depends(require_quiz),
) -> QuizStateResponse:
    try:
        session.answer(body.question_id, body.answer_id)
    except UnknownQuestionError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except (QuestionAlreadyAnsweredError, QuestionExcludedError, QuizFinishedError) as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    record_event(QUIZ_ANSWER, {
        "question_id": body.question_id,
        "answer_id": body.answer_id.value,
    })

    state = _quiz_state(session)
    # One finish per quiz, even when an undo reopens it.
    if state.finished and not session.finish_recorded:
        session.finish_recorded = True
        record_event(QUIZ_FINISH, {
            "answered_count": session.answered_count,
            "early_termination": session.answered_count < session.config.max_questions,
            "top_confidence": state.top_confidence,
        })
    return state


@app.post("/quiz/back", response_model=QuizStateResponse)
def quiz_back(session: QuizSession = Depends(require_quiz)) -> QuizStateResponse:
    undone = session.answers[-1] if session.answers else None
    try:
        session.undo()
    except NothingToUndoError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    record_event(QUIZ_UNDO, {
        "question_id": undone.question_id,
        "answer_id": undone.answer_id.value,
    })
    return _quiz_state(session)


@app.get("/quiz/results", response_model=GenreResultsResponse)
def quiz_results(
    limit: int = Query(default=3, ge=1, le=10),
    session: QuizSession = Depends(require_quiz),
) -> GenreResultsResponse:
    results = session.results(limit)

    reasons = explain_results(get_catalog(), session.answers, results)
    if reasons:
        results = [
            r.model_copy(update={"reason": reasons[r.genre.id]}) if r.genre.id in reasons else r
            for r in results
        ]

    return GenreResultsResponse(
        results=results,
        answered_count=session.answered_count,
        finished=session.is_finished(),
        top_confidence=round(session.engine.top_confidence(), 4),
        top1_top2_gap=round(session.engine.top1_top2_gap(), 4),
    )


@app.post("/quiz/select", response_model=SelectResponse)
def quiz_select(
    body: SelectRequest,
    request: Request,
    session: QuizSession = Depends(require_quiz),
) -> SelectResponse:
    catalog = get_catalog()
    genre = catalog.genre(body.genre_id)
    if genre is None or not genre.enabled:
        raise HTTPException(status_code=404, detail=f"Unknown genre: {body.genre_id}")

    evidence: InMemoryEvidenceStore = request.app.state.evidence
    recorded = evidence.record_session(genre.id, session.answers)

    ranking = [g.id for g in session.engine.top_genres(len(session.engine.genres))]
    record_event(GENRE_SELECTED, {
        "genre_id": genre.id,
        "rank": ranking.index(genre.id) + 1,
        "answered_count": session.answered_count,
    })

    request.app.state.sessions.discard(request.session.pop(_QUIZ_KEY, None))
    return SelectResponse(
        status="recorded",
        genre_id=genre.id,
        recorded=recorded,
        total_records=evidence.record_count(),
    )


# ── Settings ─────────────────────────────────────────────────────────────


@app.get("/settings/scoring", response_model=ScoringSettings)
def get_scoring_settings(request: Request) -> ScoringSettings:
    return _scoring_settings(request)


@app.put("/settings/scoring", response_model=ScoringSettings)
def put_scoring_settings(body: ScoringSettings, request: Request) -> ScoringSettings:
    request.session[_SETTINGS_KEY] = body.model_dump(mode="json")
    return body


# ── Places ───────────────────────────────────────────────────────────────


@app.get("/places/search", response_model=PlacesSearchResponse)
async def places_search(
    request: Request,
    genre: str = Query(..., min_length=1),
    lat: float | None = Query(default=None, ge=-90.0, le=90.0),
    lng: float | None = Query(default=None, ge=-180.0, le=180.0),
    radius: int = Query(default=DEFAULT_PLACES_CONFIG.default_radius, ge=100, le=50000),
) -> PlacesSearchResponse:
    start_time = time.time()
    location = resolve_search_location(lat, lng)
    settings = _scoring_settings(request)

    client: PlacesClient = request.app.state.places
    result = await client.search_nearby(genre, location.latitude, location.longitude, radius)

    ranked = rank_venues(
        result.places,
        location,
        radius,
        settings.weights,
        settings.preferred_price_level,
        limit=client.config.max_results,
    )

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event(PLACES_SEARCH, {
        "genre_id": genre,
        "radius": radius,
        "total_candidates": len(result.places),
        "results_returned": len(ranked),
        "response_time_ms": elapsed_ms,
        "location_fallback": location.is_fallback,
        "error": result.error,
    })

    return PlacesSearchResponse(
        genre_id=genre,
        location=location,
        radius=radius,
        results=ranked,
        total_candidates=len(result.places),
        error=result.error,
    )


@app.get("/places/health")
async def places_health(request: Request) -> dict:
    client: PlacesClient = request.app.state.places
    return {"available": await client.health_check()}


@app.get("/places/cache/stats")
def places_cache_stats(request: Request) -> dict:
    return request.app.state.places.cache.stats()


# ── Learning data & analytics ────────────────────────────────────────────


@app.get("/learning/stats")
def learning_stats(request: Request) -> dict:
    evidence: InMemoryEvidenceStore = request.app.state.evidence
    counts = evidence.get_counts()
    return {
        "total_records": evidence.record_count(),
        "genres_with_data": len(counts),
    }


@app.delete("/learning")
def learning_reset(request: Request) -> dict:
    request.app.state.evidence.reset()
    return {"status": "cleared"}


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())
