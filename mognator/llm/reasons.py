from __future__ import annotations

import json
import logging

from groq import Groq

from ..catalog.data_store import Catalog
from ..catalog.models import GenreResult, QuestionAnswer
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a friendly food guide. "
    "A user answered a short yes/no questionnaire about what they feel like "
    "eating, and a model ranked the food genres below. "
    "For each genre, write a short, warm, one-sentence reason that ties it to "
    "the user's answers.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"reasons": [{"id": "<genre_id>", "reason": "<one sentence>"}]}\n'
    "Include only genres from the provided list."
)

_ANSWER_LABELS = {
    "YES": "yes",
    "PROB_YES": "probably yes",
    "UNKNOWN": "don't know",
    "PROB_NO": "probably not",
    "NO": "no",
}


def _build_user_message(
    catalog: Catalog,
    answers: list[QuestionAnswer],
    results: list[GenreResult],
) -> str:
    lines = ["## Answers"]
    for a in answers:
        question = catalog.question(a.question_id)
        text = question.text if question else a.question_id
        lines.append(f"- {text} -> {_ANSWER_LABELS.get(a.answer_id.value, a.answer_id.value)}")

    lines.append("\n## Ranked Genres")
    lines.append("| ID | Name | Probability |")
    lines.append("|---|---|---|")
    for r in results:
        lines.append(f"| {r.genre.id} | {r.genre.name} | {r.probability:.0%} |")

    return "\n".join(lines)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    cut = text[:limit].rsplit(" ", 1)[0].rstrip(",;:")
    return cut + "..."


def explain_results(
    catalog: Catalog,
    answers: list[QuestionAnswer],
    results: list[GenreResult],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> dict[str, str]:
    """
    Call Groq LLM to explain why each genre fits the user's answers.

    Returns a dict mapping genre id -> reason string.
    Returns empty dict on any failure (timeout, bad JSON, API error).
    """
    if not config.enabled or not config.api_key:
        return {}

    if not results or not answers:
        return {}

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": _build_user_message(catalog, answers, results)},
            ],
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        parsed = json.loads(content)

        wanted = {r.genre.id for r in results}
        reasons: dict[str, str] = {}
        for item in parsed.get("reasons", []):
            gid = str(item.get("id", ""))
            reason = str(item.get("reason", "")).strip()
            if gid in wanted and reason:
                reasons[gid] = _truncate(reason, config.max_reason_chars)

        return reasons

    except Exception:
        logger.warning("Groq LLM call failed, keeping template reasons", exc_info=True)
        return {}
