from __future__ import annotations

from collections import Counter
from typing import Any

from .store import GENRE_SELECTED, PLACES_SEARCH, QUIZ_ANSWER, QUIZ_FINISH, QUIZ_START, QUIZ_UNDO


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total else 0.0


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    starts = [e for e in events if e["type"] == QUIZ_START]
    answers = [e for e in events if e["type"] == QUIZ_ANSWER]
    undos = [e for e in events if e["type"] == QUIZ_UNDO]
    finishes = [e for e in events if e["type"] == QUIZ_FINISH]
    selections = [e for e in events if e["type"] == GENRE_SELECTED]
    searches = [e for e in events if e["type"] == PLACES_SEARCH]

    # Questions per finished quiz
    counts = [f["answered_count"] for f in finishes if "answered_count" in f]
    avg_questions = round(sum(counts) / len(counts), 1) if counts else 0.0
    early = sum(1 for f in finishes if f.get("early_termination"))

    # Answer distribution, net of undone answers
    answer_counter: Counter[str] = Counter()
    for a in answers:
        answer_counter[a.get("answer_id", "unknown")] += 1
    for u in undos:
        answer_counter[u.get("answer_id", "unknown")] -= 1
    answer_counter = +answer_counter

    # Top selected genres
    genre_counter: Counter[str] = Counter()
    for s in selections:
        genre_counter[s.get("genre_id", "unknown")] += 1
    top_genres = [{"id": g, "count": c} for g, c in genre_counter.most_common(10)]

    # Top-1 hit rate: user picked the genre we ranked first
    top1_hits = sum(1 for s in selections if s.get("rank") == 1)

    # Places search stats
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0
    errors = sum(1 for s in searches if s.get("error"))
    fallbacks = sum(1 for s in searches if s.get("location_fallback"))

    return {
        "quiz": {
            "sessions_started": len(starts),
            "sessions_finished": len(finishes),
            "completion_rate": _rate(len(finishes), len(starts)),
            "avg_questions": avg_questions,
            "early_termination_rate": _rate(early, len(finishes)),
            "answer_distribution": dict(answer_counter),
            "answers_undone": len(undos),
        },
        "selections": {
            "total": len(selections),
            "top_genres": top_genres,
            "top1_hit_rate": _rate(top1_hits, len(selections)),
        },
        "places": {
            "total_searches": len(searches),
            "avg_response_time_ms": avg_time,
            "errors": errors,
            "location_fallbacks": fallbacks,
        },
    }
