"""Survey scoring: maturity answers → per-dimension readiness scores.

Each answer carries a maturity level 1-5. A dimension's score is the
weighted mean of its answered questions (weight defaults to 1), rounded
to one decimal; an unanswered dimension scores 0. ``overall`` is the
mean of the four dimension scores, rounded to one decimal.
A response in which every dimension scores 0 is treated as no survey
(see ``has_scores``).
"""
import logging

from catalyst.core.exceptions import ValidationError
from catalyst.models.workshop import MATURITY_LEVELS, SURVEY_DIMENSIONS

logger = logging.getLogger(__name__)


def _get(obj, key):
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def question_index(templates) -> dict:
    """questionId -> (dimension, weight) over SurveyTemplate rows or their dicts."""
    index = {}
    for template in templates:
        dimension = _get(template, "dimension")
        for question in _get(template, "questions") or []:
            qid = question.get("id")
            if qid is None:
                continue
            weight = question.get("weight") or 1
            index[str(qid)] = (dimension, float(weight))
    return index


def parse_maturity_level(value, question_id) -> int:
    if isinstance(value, bool) or value is None:
        raise ValidationError(
            f"maturityLevel is required for question {question_id}",
            details={str(question_id): "required"},
        )
    level = None
    if isinstance(value, int):
        level = value
    elif isinstance(value, float) and value.is_integer():
        level = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        level = int(value.strip())
    if level is None:
        raise ValidationError(
            f"maturityLevel for question {question_id} must be an integer",
            details={str(question_id): "not an integer"},
        )
    if level not in MATURITY_LEVELS:
        raise ValidationError(
            f"maturityLevel for question {question_id} must be between 1 and 5",
            details={str(question_id): "out of range [1, 5]"},
        )
    return level


def compute_dimension_scores(templates, answers) -> dict:
    """Weighted per-dimension maturity plus overall.

    Answers for questions that are not in any template are counted only
    when they name their own ``dimension``.
    """
    index = question_index(templates)
    totals = {dim: 0.0 for dim in SURVEY_DIMENSIONS}
    weights = {dim: 0.0 for dim in SURVEY_DIMENSIONS}

    for answer in answers or []:
        qid = str(answer.get("questionId", ""))
        level = parse_maturity_level(answer.get("maturityLevel"), qid)
        dimension, weight = index.get(qid, (answer.get("dimension"), 1.0))
        if dimension not in totals:
            logger.debug("Skipping answer for unknown question %s", qid)
            continue
        totals[dimension] += level * weight
        weights[dimension] += weight

    scores = {
        dim: round(totals[dim] / weights[dim], 1) if weights[dim] else 0.0
        for dim in SURVEY_DIMENSIONS
    }
    scores["overall"] = round(sum(scores[dim] for dim in SURVEY_DIMENSIONS) / len(SURVEY_DIMENSIONS), 1)
    return scores


def normalize_dimension_scores(scores: dict) -> dict:
    """Validate client-supplied scores; fills ``overall`` when it is missing."""
    if not isinstance(scores, dict):
        raise ValidationError("dimensionScores must be an object")
    result = {}
    for dim in SURVEY_DIMENSIONS:
        value = scores.get(dim, 0)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(
                f"dimensionScores.{dim} must be a number", details={dim: "not a number"},
            )
        if not 0 <= value <= 5:
            raise ValidationError(
                f"dimensionScores.{dim} must be between 0 and 5", details={dim: "out of range [0, 5]"},
            )
        result[dim] = float(value)
    overall = scores.get("overall")
    if isinstance(overall, (int, float)) and not isinstance(overall, bool):
        result["overall"] = float(overall)
    else:
        result["overall"] = round(sum(result[dim] for dim in SURVEY_DIMENSIONS) / len(SURVEY_DIMENSIONS), 1)
    return result


def has_scores(scores) -> bool:
    """True when at least one dimension carries a maturity score (levels start at 1)."""
    if not scores:
        return False
    return any((scores.get(dim) or 0) > 0 for dim in SURVEY_DIMENSIONS)
