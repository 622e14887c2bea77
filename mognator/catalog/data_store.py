from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from .models import Genre, Question

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

TRAIT_MIN = -2
TRAIT_MAX = 2


class ConfigurationError(ValueError):
    """Static reference data is missing or malformed."""


@dataclass(frozen=True)
class Catalog:
    genres: tuple[Genre, ...]
    questions: tuple[Question, ...]
    traits: dict[str, dict[str, int]] = field(default_factory=dict)
    conflicts: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def genre(self, genre_id: str) -> Genre | None:
        for g in self.genres:
            if g.id == genre_id:
                return g
        return None

    def question(self, question_id: str) -> Question | None:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def trait(self, genre_id: str, question_id: str) -> int:
        """Trait value for a (genre, question) pair; absent entries are neutral."""
        return self.traits.get(genre_id, {}).get(question_id, 0)

    @property
    def enabled_genres(self) -> list[Genre]:
        return [g for g in self.genres if g.enabled]

    @property
    def enabled_questions(self) -> list[Question]:
        return [q for q in self.questions if q.enabled]

    @property
    def groups(self) -> list[str]:
        return sorted({q.group for q in self.questions})


def _read_csv(path: Path) -> pd.DataFrame:
    if not path.is_file():
        raise ConfigurationError(f"Seed file not found: {path}")
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def _require_columns(df: pd.DataFrame, columns: list[str], name: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ConfigurationError(f"{name} is missing columns: {', '.join(missing)}")


def _parse_enabled(value: str) -> bool:
    return value.strip().lower() not in ("false", "0", "no")


def _load_genres(path: Path) -> tuple[Genre, ...]:
    df = _read_csv(path)
    _require_columns(df, ["id", "name"], "genres")
    if df.empty:
        raise ConfigurationError("Genre catalog is empty")
    if df["id"].duplicated().any():
        dupes = sorted(df.loc[df["id"].duplicated(), "id"].unique())
        raise ConfigurationError(f"Duplicate genre ids: {', '.join(dupes)}")

    enabled = df["enabled"] if "enabled" in df.columns else pd.Series("true", index=df.index)
    return tuple(
        Genre(id=row_id.strip(), name=name.strip(), enabled=_parse_enabled(flag))
        for row_id, name, flag in zip(df["id"], df["name"], enabled)
    )


def _load_questions(path: Path) -> tuple[Question, ...]:
    df = _read_csv(path)
    _require_columns(df, ["id", "text", "group"], "questions")
    if df.empty:
        raise ConfigurationError("Question catalog is empty")
    if df["id"].duplicated().any():
        dupes = sorted(df.loc[df["id"].duplicated(), "id"].unique())
        raise ConfigurationError(f"Duplicate question ids: {', '.join(dupes)}")

    enabled = df["enabled"] if "enabled" in df.columns else pd.Series("true", index=df.index)
    return tuple(
        Question(id=qid.strip(), text=text.strip(), group=group.strip(), enabled=_parse_enabled(flag))
        for qid, text, group, flag in zip(df["id"], df["text"], df["group"], enabled)
    )


def _load_traits(
    path: Path,
    genre_ids: set[str],
    question_ids: set[str],
) -> dict[str, dict[str, int]]:
    df = _read_csv(path)
    _require_columns(df, ["genre_id", "question_id", "value"], "traits")

    values = pd.to_numeric(df["value"], errors="coerce")
    bad = df[values.isna() | (values % 1 != 0) | (values < TRAIT_MIN) | (values > TRAIT_MAX)]
    if not bad.empty:
        first = bad.iloc[0]
        raise ConfigurationError(
            f"Trait value out of range [{TRAIT_MIN}, {TRAIT_MAX}] for "
            f"({first['genre_id']}, {first['question_id']}): {first['value']!r}"
        )

    traits: dict[str, dict[str, int]] = {}
    for genre_id, question_id, value in zip(df["genre_id"], df["question_id"], values):
        if genre_id not in genre_ids:
            raise ConfigurationError(f"Trait references unknown genre: {genre_id}")
        if question_id not in question_ids:
            raise ConfigurationError(f"Trait references unknown question: {question_id}")
        row = traits.setdefault(genre_id, {})
        if question_id in row:
            raise ConfigurationError(f"Duplicate trait entry: ({genre_id}, {question_id})")
        row[question_id] = int(value)
    return traits


def _load_conflicts(path: Path, question_ids: set[str]) -> dict[str, tuple[str, ...]]:
    if not path.is_file():
        return {}
    df = _read_csv(path)
    _require_columns(df, ["question_id", "excluded_question_id"], "conflicts")

    conflicts: dict[str, list[str]] = {}
    for source, target in zip(df["question_id"], df["excluded_question_id"]):
        for qid in (source, target):
            if qid not in question_ids:
                raise ConfigurationError(f"Conflict rule references unknown question: {qid}")
        if source == target:
            raise ConfigurationError(f"Question {source} cannot exclude itself")
        targets = conflicts.setdefault(source, [])
        if target not in targets:
            targets.append(target)
    return {k: tuple(v) for k, v in conflicts.items()}


def load_catalog(data_dir: Path = _DATA_DIR) -> Catalog:
    """Load and validate every seed table under *data_dir*.

    Raises ``ConfigurationError`` on empty catalogs, duplicate ids, trait
    values outside [-2, 2], or references to unknown genres/questions.
    """
    genres = _load_genres(data_dir / "genres.csv")
    questions = _load_questions(data_dir / "questions.csv")
    genre_ids = {g.id for g in genres}
    question_ids = {q.id for q in questions}

    catalog = Catalog(
        genres=genres,
        questions=questions,
        traits=_load_traits(data_dir / "traits.csv", genre_ids, question_ids),
        conflicts=_load_conflicts(data_dir / "conflicts.csv", question_ids),
    )
    logger.info(
        "Loaded catalog: %d genres, %d questions, %d trait entries",
        len(genres),
        len(questions),
        sum(len(row) for row in catalog.traits.values()),
    )
    return catalog


_catalog: Catalog | None = None


def get_catalog() -> Catalog:
    """Return the bundled catalog, loading it on first call."""
    global _catalog
    if _catalog is None:
        _catalog = load_catalog()
    return _catalog
