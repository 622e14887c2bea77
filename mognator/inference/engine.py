"""
Per-session genre inference engine.

The distribution over genres is kept as log-probabilities. Each answer adds
ln P(answer | genre, question) to every genre's score, clamps at a floor and
renormalises with log-sum-exp so that sum(exp(score)) == 1 even with
hundreds of genres and many near-zero likelihoods.
"""
from __future__ import annotations

import logging
import math
import random

import numpy as np

from ..catalog.data_store import Catalog, ConfigurationError
from ..catalog.models import ANSWER_VALUES, Genre, GenreResult, Question
from .config import DEFAULT_INFERENCE_CONFIG, InferenceConfig
from .evidence import CountsMap
from .likelihood import LikelihoodModel

logger = logging.getLogger(__name__)

_REASON_TEMPLATES = [
    "Sounds like {name}",
    "Fits your mood right now",
    "Looks like a good match",
]


class InferenceEngine:
    def __init__(
        self,
        catalog: Catalog,
        counts: CountsMap | None = None,
        config: InferenceConfig = DEFAULT_INFERENCE_CONFIG,
        rng: random.Random | None = None,
    ) -> None:
        self.genres: list[Genre] = catalog.enabled_genres
        if not self.genres:
            raise ConfigurationError("Inference engine needs at least one enabled genre")

        self.config = config
        self.model = LikelihoodModel(catalog, counts, config)
        self._rng = rng or random.Random()
        self._log_scores = np.empty(len(self.genres), dtype=float)
        self.reset()

    def reset(self) -> None:
        """Back to the uniform prior ln(1/N)."""
        self._log_scores.fill(math.log(1.0 / len(self.genres)))

    def update(self, question: Question, answer_id: str) -> None:
        likelihoods = np.array(
            [self.model.likelihood(g.id, question.id, answer_id) for g in self.genres],
            dtype=float,
        )
        self._log_scores = np.maximum(
            self._log_scores + np.log(likelihoods), self.config.min_log_prob
        )
        self._normalize()

    def _normalize(self) -> None:
        max_log = float(np.max(self._log_scores))
        log_sum_exp = max_log + math.log(float(np.sum(np.exp(self._log_scores - max_log))))
        self._log_scores = self._log_scores - log_sum_exp

    def log_scores(self) -> dict[str, float]:
        return {g.id: float(s) for g, s in zip(self.genres, self._log_scores)}

    def probabilities(self) -> dict[str, float]:
        return {g.id: float(p) for g, p in zip(self.genres, np.exp(self._log_scores))}

    def _ranked(self) -> list[tuple[Genre, float]]:
        probs = np.exp(self._log_scores)
        # Stable sort keeps catalog order among ties.
        order = np.argsort(-probs, kind="stable")
        return [(self.genres[i], float(probs[i])) for i in order]

    def _reason(self, genre: Genre) -> str:
        return self._rng.choice(_REASON_TEMPLATES).format(name=genre.name)

    def top_n(self, n: int) -> list[GenreResult]:
        return [
            GenreResult(genre=genre, probability=prob, reason=self._reason(genre))
            for genre, prob in self._ranked()[:n]
        ]

    def top3(self) -> list[GenreResult]:
        return self.top_n(3)

    def top_confidence(self) -> float:
        return float(np.max(np.exp(self._log_scores)))

    def top1_top2_gap(self) -> float:
        if len(self.genres) < 2:
            return 1.0
        ranked = self._ranked()
        return ranked[0][1] - ranked[1][1]

    def can_terminate_early(self) -> bool:
        return (
            self.top_confidence() >= self.config.confidence_threshold
            or self.top1_top2_gap() >= self.config.gap_threshold
        )

    def top_genres(self, k: int | None = None) -> list[Genre]:
        k = self.config.top_k_genres if k is None else k
        return [genre for genre, _ in self._ranked()[:k]]

    def question_information_score(
        self, question: Question, candidate_genres: list[Genre]
    ) -> float:
        """Mean (over answers) of the variance of heuristic likelihoods across genres.

        A cheap stand-in for expected information gain: a question whose
        likelihoods differ a lot between the current front-runners splits
        them well. It is not an entropy-reduction calculation.
        """
        if not candidate_genres:
            return 0.0
        variances = [
            float(np.var([
                self.model.heuristic(g.id, question.id, answer_id) for g in candidate_genres
            ]))
            for answer_id in ANSWER_VALUES
        ]
        return sum(variances) / len(variances)
