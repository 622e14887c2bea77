from __future__ import annotations

import pytest

from mognator.catalog.data_store import Catalog
from mognator.catalog.models import Genre, Question


def build_catalog(
    genres: list[tuple[str, str]],
    questions: list[tuple[str, str]],
    traits: dict[str, dict[str, int]] | None = None,
    conflicts: dict[str, tuple[str, ...]] | None = None,
) -> Catalog:
    return Catalog(
        genres=tuple(Genre(id=gid, name=name) for gid, name in genres),
        questions=tuple(Question(id=qid, text=qid, group=group) for qid, group in questions),
        traits=traits or {},
        conflicts=conflicts or {},
    )


@pytest.fixture
def small_catalog() -> Catalog:
    return build_catalog(
        genres=[("ramen", "Ramen"), ("sushi", "Sushi"), ("curry", "Curry")],
        questions=[
            ("q_warm", "temperature"),
            ("q_cold", "temperature"),
            ("q_soup", "soupiness"),
            ("q_spicy", "spice_level"),
            ("q_rice", "staple"),
            ("q_noodles", "staple"),
            ("q_raw", "seafood"),
            ("q_neutral", "flavor"),
        ],
        traits={
            "ramen": {"q_warm": 2, "q_soup": 2, "q_noodles": 2, "q_rice": -2, "q_raw": -2},
            "sushi": {"q_warm": -1, "q_cold": 1, "q_rice": 2, "q_raw": 2, "q_soup": -2},
            "curry": {"q_warm": 2, "q_spicy": 2, "q_rice": 2, "q_soup": -1},
        },
        conflicts={
            "q_rice": ("q_noodles",),
            "q_noodles": ("q_rice",),
            "q_warm": ("q_cold",),
        },
    )


@pytest.fixture
def make_catalog():
    return build_catalog
