import pytest

from mognator.catalog.models import ANSWER_VALUES
from mognator.inference.likelihood import LikelihoodModel


def test_heuristic_values_by_distance(small_catalog):
    model = LikelihoodModel(small_catalog)
    # ramen q_warm trait = 2
    assert model.likelihood("ramen", "q_warm", "YES") == pytest.approx(0.90)
    assert model.likelihood("ramen", "q_warm", "PROB_YES") == pytest.approx(0.60)
    assert model.likelihood("ramen", "q_warm", "UNKNOWN") == pytest.approx(0.30)
    assert model.likelihood("ramen", "q_warm", "PROB_NO") == pytest.approx(0.10)
    assert model.likelihood("ramen", "q_warm", "NO") == pytest.approx(0.10)


def test_absent_trait_treated_as_neutral(small_catalog):
    model = LikelihoodModel(small_catalog)
    assert model.likelihood("ramen", "q_neutral", "UNKNOWN") == pytest.approx(0.90)
    assert model.likelihood("ramen", "q_neutral", "YES") == pytest.approx(0.30)


@pytest.mark.parametrize("genre_id", ["ramen", "sushi", "curry"])
@pytest.mark.parametrize("question_id", ["q_warm", "q_cold", "q_rice", "q_neutral"])
def test_likelihood_non_increasing_in_distance(small_catalog, genre_id, question_id):
    model = LikelihoodModel(small_catalog)
    trait = small_catalog.trait(genre_id, question_id)
    by_diff = sorted(
        (abs(value - trait), model.likelihood(genre_id, question_id, answer_id))
        for answer_id, value in ANSWER_VALUES.items()
    )
    for (d1, l1), (d2, l2) in zip(by_diff, by_diff[1:]):
        if d2 > d1:
            assert l2 <= l1


def test_unknown_answer_returns_low_default(small_catalog):
    model = LikelihoodModel(small_catalog)
    assert model.likelihood("ramen", "q_warm", "MAYBE") == pytest.approx(0.2)
    assert model.heuristic("ramen", "q_warm", "MAYBE") == pytest.approx(0.2)


def test_learned_counts_use_dirichlet_smoothing(small_catalog):
    counts = {"sushi": {"q_warm": {"YES": 3, "NO": 1}}}
    model = LikelihoodModel(small_catalog, counts)
    # (3 + 1) / (4 + 5)
    assert model.likelihood("sushi", "q_warm", "YES") == pytest.approx(4 / 9)
    # (0 + 1) / (4 + 5)
    assert model.likelihood("sushi", "q_warm", "UNKNOWN") == pytest.approx(1 / 9)


def test_learned_counts_sum_to_one_over_answers(small_catalog):
    counts = {"curry": {"q_spicy": {"YES": 7, "PROB_YES": 2, "NO": 1}}}
    model = LikelihoodModel(small_catalog, counts)
    total = sum(model.likelihood("curry", "q_spicy", a) for a in ANSWER_VALUES)
    assert total == pytest.approx(1.0)


def test_heuristic_used_without_observations_for_pair(small_catalog):
    counts = {"sushi": {"q_warm": {"YES": 3}}}
    model = LikelihoodModel(small_catalog, counts)
    assert model.likelihood("sushi", "q_rice", "YES") == pytest.approx(0.90)
    assert model.likelihood("ramen", "q_warm", "YES") == pytest.approx(0.90)


def test_zero_counts_fall_back_to_heuristic(small_catalog):
    counts = {"ramen": {"q_warm": {"YES": 0}}}
    model = LikelihoodModel(small_catalog, counts)
    assert model.empirical("ramen", "q_warm", "YES") is None
    assert model.likelihood("ramen", "q_warm", "YES") == pytest.approx(0.90)


def test_likelihoods_strictly_between_zero_and_one(small_catalog):
    model = LikelihoodModel(small_catalog, {"ramen": {"q_soup": {"YES": 1000}}})
    for genre in small_catalog.genres:
        for question in small_catalog.questions:
            for answer_id in ANSWER_VALUES:
                value = model.likelihood(genre.id, question.id, answer_id)
                assert 0.0 < value < 1.0
