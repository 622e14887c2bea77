from mognator.analytics.aggregator import compute_analytics
from mognator.analytics.store import clear_events, get_events, record_event


def _sample_events():
    return [
        {"type": "quiz_start", "timestamp": 1.0},
        {"type": "quiz_start", "timestamp": 2.0},
        {"type": "quiz_start", "timestamp": 3.0},
        {"type": "quiz_start", "timestamp": 4.0},
        {"type": "quiz_answer", "timestamp": 5.0, "question_id": "q_warm", "answer_id": "YES"},
        {"type": "quiz_answer", "timestamp": 6.0, "question_id": "q_rice", "answer_id": "YES"},
        {"type": "quiz_answer", "timestamp": 7.0, "question_id": "q_raw", "answer_id": "NO"},
        {"type": "quiz_finish", "timestamp": 8.0, "answered_count": 4, "early_termination": True},
        {"type": "quiz_finish", "timestamp": 9.0, "answered_count": 12, "early_termination": False},
        {"type": "genre_selected", "timestamp": 10.0, "genre_id": "ramen_tonkotsu", "rank": 1},
        {"type": "genre_selected", "timestamp": 11.0, "genre_id": "ramen_tonkotsu", "rank": 2},
        {"type": "genre_selected", "timestamp": 12.0, "genre_id": "sushi", "rank": 1},
        {"type": "places_search", "timestamp": 13.0, "genre_id": "sushi", "response_time_ms": 120.0,
         "error": None, "location_fallback": True},
        {"type": "places_search", "timestamp": 14.0, "genre_id": "sushi", "response_time_ms": 80.0,
         "error": "Network error", "location_fallback": False},
    ]


def test_quiz_metrics():
    result = compute_analytics(_sample_events())["quiz"]
    assert result["sessions_started"] == 4
    assert result["sessions_finished"] == 2
    assert result["completion_rate"] == 50.0
    assert result["avg_questions"] == 8.0
    assert result["early_termination_rate"] == 50.0
    assert result["answer_distribution"] == {"YES": 2, "NO": 1}


def test_selection_metrics():
    result = compute_analytics(_sample_events())["selections"]
    assert result["total"] == 3
    assert result["top_genres"][0] == {"id": "ramen_tonkotsu", "count": 2}
    assert result["top1_hit_rate"] == 66.7


def test_places_metrics():
    result = compute_analytics(_sample_events())["places"]
    assert result["total_searches"] == 2
    assert result["avg_response_time_ms"] == 100.0
    assert result["errors"] == 1
    assert result["location_fallbacks"] == 1


def test_empty_events():
    result = compute_analytics([])
    assert result["quiz"]["completion_rate"] == 0.0
    assert result["quiz"]["avg_questions"] == 0.0
    assert result["selections"]["top_genres"] == []
    assert result["places"]["avg_response_time_ms"] == 0.0


def test_event_store_roundtrip():
    clear_events()
    record_event("quiz_start", {"quiz_id": "abc"})
    events = get_events()
    assert len(events) == 1
    assert events[0]["type"] == "quiz_start"
    assert events[0]["quiz_id"] == "abc"
    assert "timestamp" in events[0]
    clear_events()
    assert get_events() == []


def test_get_events_filters_by_type():
    clear_events()
    record_event("quiz_start", {})
    record_event("places_search", {"genre_id": "sushi"})
    record_event("places_search", {"genre_id": "ramen_tonkotsu"})

    searches = get_events("places_search")
    assert [e["genre_id"] for e in searches] == ["sushi", "ramen_tonkotsu"]
    assert len(get_events()) == 3

    # Callers get a snapshot, not the live log.
    get_events().clear()
    assert len(get_events()) == 3
    clear_events()


def test_undone_answers_leave_the_distribution():
    events = _sample_events() + [
        {"type": "quiz_undo", "timestamp": 15.0, "question_id": "q_raw", "answer_id": "NO"},
    ]
    result = compute_analytics(events)["quiz"]
    assert result["answer_distribution"] == {"YES": 2}
    assert result["answers_undone"] == 1
