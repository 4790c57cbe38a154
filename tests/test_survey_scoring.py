"""
Tests — survey scoring.

Covers:
    - Weighted per-dimension means, one decimal
    - Unanswered dimensions score 0 and still count toward overall
    - Maturity level validation (1-5, integers only)
    - Client-supplied score normalisation
"""

import pytest

from catalyst.core.exceptions import ValidationError
from catalyst.services.survey_scoring import (
    compute_dimension_scores,
    has_scores,
    normalize_dimension_scores,
    parse_maturity_level,
    question_index,
)

TEMPLATES = [
    {"dimension": "skills", "questions": [
        {"id": "S-001", "question": "ML engineering depth?", "weight": 2},
        {"id": "S-002", "question": "AI literacy programme?"},
    ]},
    {"dimension": "data", "questions": [{"id": "D-001", "question": "Invoice data digitised?"}]},
    {"dimension": "governance", "questions": [{"id": 7, "question": "AI policy approved?"}]},
]


def test_question_index_maps_ids_to_dimension_and_weight():
    index = question_index(TEMPLATES)
    assert index["S-001"] == ("skills", 2.0)
    assert index["S-002"] == ("skills", 1.0)
    assert index["7"] == ("governance", 1.0)


def test_weighted_scores_and_overall():
    answers = [
        {"questionId": "S-001", "maturityLevel": 4},
        {"questionId": "S-002", "maturityLevel": 1},
        {"questionId": "D-001", "maturityLevel": 3},
        {"questionId": 7, "maturityLevel": "2"},
    ]

    scores = compute_dimension_scores(TEMPLATES, answers)

    # skills: (4*2 + 1*1) / 3 = 3.0
    assert scores == {
        "skills": 3.0,
        "data": 3.0,
        "infrastructure": 0.0,
        "governance": 2.0,
        "overall": 2.0,
    }


def test_unknown_question_counts_only_with_its_own_dimension():
    answers = [
        {"questionId": "X-1", "maturityLevel": 5, "dimension": "infrastructure"},
        {"questionId": "X-2", "maturityLevel": 5},
    ]
    scores = compute_dimension_scores(TEMPLATES, answers)
    assert scores["infrastructure"] == 5.0
    assert scores["skills"] == 0.0


def test_no_answers_scores_zero():
    scores = compute_dimension_scores(TEMPLATES, [])
    assert set(scores.values()) == {0.0}
    assert not has_scores(scores)


@pytest.mark.parametrize("scores,expected", [
    (None, False),
    ({}, False),
    ({"skills": 0.0, "data": 0.0, "infrastructure": 0.0, "governance": 0.0, "overall": 0.0}, False),
    ({"skills": 0.0, "data": 2.0, "infrastructure": 0.0, "governance": 0.0, "overall": 0.5}, True),
])
def test_has_scores(scores, expected):
    assert has_scores(scores) is expected


@pytest.mark.parametrize("value,expected", [(1, 1), (5.0, 5), (" 3 ", 3)])
def test_parse_maturity_level_accepts_integers(value, expected):
    assert parse_maturity_level(value, "S-001") == expected


@pytest.mark.parametrize("value", [0, 6, 2.5, "high", None, True])
def test_parse_maturity_level_rejects(value):
    with pytest.raises(ValidationError) as exc:
        parse_maturity_level(value, "S-001")
    assert "S-001" in exc.value.details


def test_normalize_fills_overall():
    result = normalize_dimension_scores({"skills": 3, "data": 2, "infrastructure": 4, "governance": 1})
    assert result["overall"] == 2.5
    assert result["skills"] == 3.0


def test_normalize_keeps_supplied_overall():
    result = normalize_dimension_scores({"skills": 3, "data": 3, "infrastructure": 3,
                                         "governance": 3, "overall": 2.2})
    assert result["overall"] == 2.2


@pytest.mark.parametrize("scores", [{"skills": 7}, {"data": "high"}, ["skills", 3]])
def test_normalize_rejects_bad_scores(scores):
    with pytest.raises(ValidationError):
        normalize_dimension_scores(scores)
