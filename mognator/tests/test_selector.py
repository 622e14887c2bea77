import random

import pytest

from mognator.catalog.data_store import get_catalog
from mognator.catalog.models import QuestionAnswer
from mognator.inference.engine import InferenceEngine
from mognator.quiz.config import QuizConfig
from mognator.quiz.selector import QuestionSelector


def _answer(question_id, answer_id="UNKNOWN"):
    return QuestionAnswer(question_id=question_id, answer_id=answer_id)


def _run(selector, answers):
    for a in answers:
        selector.mark_answered(a.question_id)
    return selector.next_question(answers)


def test_same_seed_same_sequence():
    catalog = get_catalog()

    def sequence(seed):
        selector = QuestionSelector(catalog, rng=random.Random(seed))
        answers = []
        picked = []
        for _ in range(6):
            question = selector.next_question(answers)
            picked.append(question.id)
            selector.mark_answered(question.id)
            answers.append(_answer(question.id))
        return picked

    assert sequence(123) == sequence(123)


def test_first_question_without_answers_is_random_pick(small_catalog):
    selector = QuestionSelector(small_catalog, rng=random.Random(1))
    question = selector.next_question([])
    assert question is not None
    assert question.id in {q.id for q in small_catalog.questions}


@pytest.mark.parametrize("seed", range(10))
def test_avoids_recently_asked_groups(small_catalog, seed):
    selector = QuestionSelector(small_catalog, rng=random.Random(seed))
    answers = [_answer("q_warm", "NO"), _answer("q_soup", "NO")]
    question = _run(selector, answers)
    assert question.group not in {"temperature", "soupiness"}
    assert selector.recent_groups == ["temperature", "soupiness"]


def test_only_the_last_two_groups_are_avoided(small_catalog):
    selector = QuestionSelector(small_catalog, rng=random.Random(0))
    answers = [_answer("q_spicy"), _answer("q_warm", "NO"), _answer("q_soup", "NO")]
    _run(selector, answers)
    assert "spice_level" not in selector.recent_groups


def test_falls_back_when_all_remaining_share_recent_groups(make_catalog):
    catalog = make_catalog(
        genres=[("a", "A")],
        questions=[("q1", "g"), ("q2", "g"), ("q3", "g")],
    )
    selector = QuestionSelector(catalog, rng=random.Random(0))
    question = _run(selector, [_answer("q1"), _answer("q2")])
    assert question.id == "q3"


@pytest.mark.parametrize("answer_id", ["YES", "PROB_YES"])
def test_affirmative_answer_excludes_conflicts(small_catalog, answer_id):
    selector = QuestionSelector(small_catalog)
    selector.apply_conflicts([_answer("q_rice", answer_id)])
    assert "q_noodles" in selector.excluded
    assert "q_noodles" not in {q.id for q in selector.available_questions()}


@pytest.mark.parametrize("answer_id", ["UNKNOWN", "PROB_NO", "NO"])
def test_non_affirmative_answer_keeps_conflicts(small_catalog, answer_id):
    selector = QuestionSelector(small_catalog)
    selector.apply_conflicts([_answer("q_rice", answer_id)])
    assert selector.excluded == set()


def test_only_latest_answer_triggers_conflicts(small_catalog):
    selector = QuestionSelector(small_catalog)
    selector.apply_conflicts([_answer("q_rice", "YES"), _answer("q_soup", "NO")])
    assert "q_noodles" not in selector.excluded


def test_excluded_question_never_selected(small_catalog):
    for seed in range(20):
        selector = QuestionSelector(small_catalog, rng=random.Random(seed))
        answers = [_answer("q_warm", "YES")]
        selected = set()
        for _ in range(len(small_catalog.questions)):
            question = _run(selector, answers)
            if question is None:
                break
            selected.add(question.id)
            answers.append(_answer(question.id))
        assert "q_cold" not in selected


def test_exclusions_do_not_depend_on_seed(small_catalog):
    excluded = []
    for seed in (1, 2, 3):
        selector = QuestionSelector(small_catalog, rng=random.Random(seed))
        _run(selector, [_answer("q_noodles", "YES")])
        excluded.append(frozenset(selector.excluded))
    assert len(set(excluded)) == 1
    assert excluded[0] == {"q_rice"}


def test_unmark_keeps_exclusions(small_catalog):
    selector = QuestionSelector(small_catalog)
    _run(selector, [_answer("q_rice", "YES")])
    selector.unmark_answered("q_rice")
    assert "q_rice" not in selector.answered
    assert "q_noodles" in selector.excluded


def test_returns_none_when_pool_is_empty(make_catalog):
    catalog = make_catalog(genres=[("a", "A")], questions=[("q1", "g"), ("q2", "h")])
    selector = QuestionSelector(catalog)
    assert _run(selector, [_answer("q1"), _answer("q2")]) is None


@pytest.mark.parametrize("count, expected", [(0, True), (11, True), (12, False), (13, False)])
def test_should_continue(small_catalog, count, expected):
    selector = QuestionSelector(small_catalog)
    assert selector.should_continue(count) is expected


def test_should_continue_respects_config(small_catalog):
    selector = QuestionSelector(small_catalog, QuizConfig(max_questions=5))
    assert selector.should_continue(4) is True
    assert selector.should_continue(5) is False


def test_reset_clears_state(small_catalog):
    selector = QuestionSelector(small_catalog)
    _run(selector, [_answer("q_warm", "YES"), _answer("q_rice", "YES")])
    selector.reset()
    assert selector.answered == set()
    assert selector.excluded == set()
    assert selector.recent_groups == []
    assert len(selector.available_questions()) == len(small_catalog.questions)


def test_disabled_questions_are_not_offered():
    catalog = get_catalog()
    selector = QuestionSelector(catalog)
    available = {q.id for q in selector.available_questions()}
    assert available == {q.id for q in catalog.enabled_questions}


def test_engine_guided_pick_is_among_top_scored(small_catalog):
    for seed in range(10):
        engine = InferenceEngine(small_catalog)
        engine.update(small_catalog.question("q_spicy"), "NO")
        selector = QuestionSelector(small_catalog, rng=random.Random(seed))
        answers = [_answer("q_spicy", "NO")]
        selector.mark_answered("q_spicy")

        question = selector.next_question(answers, engine)

        top_genres = engine.top_genres()
        candidates = [
            q for q in selector.available_questions() if q.group not in selector.recent_groups
        ]
        ranked = sorted(
            candidates,
            key=lambda q: engine.question_information_score(q, top_genres),
            reverse=True,
        )
        assert question.id in {q.id for q in ranked[:3]}
        assert question.id != "q_neutral"


def test_bundled_session_rotates_groups():
    catalog = get_catalog()
    rng = random.Random(5)
    engine = InferenceEngine(catalog, rng=rng)
    selector = QuestionSelector(catalog, rng=rng)
    answers = []
    groups = []

    for _ in range(12):
        question = selector.next_question(answers, engine)
        assert question is not None
        assert question.id not in selector.answered
        assert question.id not in selector.excluded
        assert question.group not in groups[-2:]
        groups.append(question.group)

        selector.mark_answered(question.id)
        answers.append(_answer(question.id, "UNKNOWN"))
        engine.update(question, "UNKNOWN")
