"""Tests — 2x2 matrix placement."""

import pytest

from catalyst.models.workshop import QUADRANT_LABELS, QUADRANTS, UseCasePriority, quadrant_for


@pytest.mark.parametrize(
    "impact,feasibility,expected",
    [
        (6, 6, "quick_win"),
        (10, 10, "quick_win"),
        (6, 5.999, "strategic"),
        (9.5, 0, "strategic"),
        (5.999, 6, "fill_in"),
        (0, 10, "fill_in"),
        (5.999, 5.999, "deprioritize"),
        (0, 0, "deprioritize"),
    ],
)
def test_quadrant_boundaries(impact, feasibility, expected):
    assert quadrant_for(impact, feasibility) == expected


def test_every_quadrant_has_a_label():
    assert set(QUADRANT_LABELS) == set(QUADRANTS)


def test_apply_scores_keeps_quadrant_in_step():
    row = UseCasePriority(workshop_id="ws-1", use_case_id="UC-001")
    row.apply_scores(7.5, 6.5)
    assert row.quadrant == "quick_win"
    row.apply_scores(7.5, 3)
    assert (row.impact_score, row.feasibility_score, row.quadrant) == (7.5, 3, "strategic")
