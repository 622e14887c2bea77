from __future__ import annotations

from ..catalog.data_store import Catalog
from ..catalog.models import ANSWER_VALUES
from .config import DEFAULT_INFERENCE_CONFIG, InferenceConfig
from .evidence import CountsMap


class LikelihoodModel:
    """P(answer | genre, question).

    Uses Dirichlet-smoothed learned counts when the evidence snapshot has any
    observation for the (genre, question) pair, and otherwise a coarse score
    of how far the answer sits from the genre's trait value.
    """

    def __init__(
        self,
        catalog: Catalog,
        counts: CountsMap | None = None,
        config: InferenceConfig = DEFAULT_INFERENCE_CONFIG,
    ) -> None:
        self.catalog = catalog
        self.counts: CountsMap = counts or {}
        self.config = config

    def heuristic(self, genre_id: str, question_id: str, answer_id: str) -> float:
        value = ANSWER_VALUES.get(answer_id)
        if value is None:
            return self.config.unknown_answer_likelihood

        diff = abs(value - self.catalog.trait(genre_id, question_id))
        table = self.config.alignment_likelihoods
        return table[min(diff, len(table) - 1)]

    def empirical(self, genre_id: str, question_id: str, answer_id: str) -> float | None:
        """Smoothed empirical probability, or None with no observations."""
        by_answer = self.counts.get(genre_id, {}).get(question_id)
        if not by_answer:
            return None
        total = sum(by_answer.get(a, 0) for a in ANSWER_VALUES)
        if total <= 0:
            return None

        alpha = self.config.smoothing_alpha
        return (by_answer.get(answer_id, 0) + alpha) / (total + alpha * len(ANSWER_VALUES))

    def likelihood(self, genre_id: str, question_id: str, answer_id: str) -> float:
        if answer_id not in ANSWER_VALUES:
            return self.config.unknown_answer_likelihood

        learned = self.empirical(genre_id, question_id, answer_id)
        if learned is not None:
            return learned
        return self.heuristic(genre_id, question_id, answer_id)
