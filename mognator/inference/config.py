from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InferenceConfig:
    smoothing_alpha: float = 1.0  # Dirichlet prior
    min_log_prob: float = -100.0
    confidence_threshold: float = 0.65
    gap_threshold: float = 0.15
    top_k_genres: int = 30
    unknown_answer_likelihood: float = 0.2
    # Heuristic P(answer | genre) by |answer_value - trait_value|; >= 3 uses the last entry.
    alignment_likelihoods: tuple[float, ...] = (0.90, 0.60, 0.30, 0.10)


DEFAULT_INFERENCE_CONFIG = InferenceConfig()
