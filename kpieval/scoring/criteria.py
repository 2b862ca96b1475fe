"""Range-based scoring criteria: classification, builders and validation."""

from __future__ import annotations

import math
from typing import Any, Mapping

from ..errors import InvalidScoringCriteriaError, InvalidVariableTypeError
from ..models.scoring import MAX_SCORE, MIN_SCORE, ScoringCriteria, ScoringRange


# Number of ranges produced by the linear and inverse builders
RANGE_COUNT = MAX_SCORE - MIN_SCORE + 1

# Canonical percentage buckets shared by all percentage-style KPIs
PERCENTAGE_CRITERIA = ScoringCriteria(
    ranges=[
        ScoringRange(min=0, max=50, score=1),
        ScoringRange(min=50, max=70, score=2),
        ScoringRange(min=70, max=85, score=3),
        ScoringRange(min=85, max=95, score=4),
        ScoringRange(min=95, max=100, score=5),
    ]
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce_ranges(data: Mapping[str, Any], errors: list[str]) -> list[tuple[int, ScoringRange]]:
    """Turn raw range mappings into models, reporting malformed entries."""
    raw_ranges = data.get("ranges")
    if not isinstance(raw_ranges, list):
        errors.append("Scoring criteria must have a ranges list")
        return []

    ranges: list[tuple[int, ScoringRange]] = []
    for i, raw in enumerate(raw_ranges, start=1):
        if not isinstance(raw, Mapping):
            errors.append(f"Range {i}: must be a mapping with min, max and score")
            continue
        min_value, max_value, score = raw.get("min"), raw.get("max"), raw.get("score")
        if not (_is_number(min_value) and _is_number(max_value) and _is_number(score)):
            errors.append(f"Range {i}: min, max and score must be numbers")
            continue
        if not float(score).is_integer():
            errors.append(f"Range {i}: score must be an integer between {MIN_SCORE} and {MAX_SCORE}")
            continue
        ranges.append((i, ScoringRange(min=min_value, max=max_value, score=int(score))))
    return ranges


def validate_criteria(criteria: ScoringCriteria | Mapping[str, Any]) -> list[str]:
    """Check scoring criteria and describe every problem found.

    Accepts a ScoringCriteria model or the raw mapping submitted while
    authoring a KPI. Never raises.

    Returns:
        List of violation descriptions (empty when the criteria are valid)
    """
    errors: list[str] = []
    if isinstance(criteria, ScoringCriteria):
        indexed = list(enumerate(criteria.ranges, start=1))
    elif isinstance(criteria, Mapping):
        indexed = _coerce_ranges(criteria, errors)
        if errors and not indexed:
            return errors
    else:
        return ["Scoring criteria must be a mapping with a ranges list"]

    if not indexed and not errors:
        errors.append("Scoring criteria must have at least one range")
        return errors

    for i, rng in indexed:
        if not (math.isfinite(rng.min) and math.isfinite(rng.max)):
            errors.append(f"Range {i}: min and max must be finite numbers")
        elif rng.min >= rng.max:
            errors.append(f"Range {i}: min value ({rng.min}) must be less than max value ({rng.max})")
        if not MIN_SCORE <= rng.score <= MAX_SCORE:
            errors.append(f"Range {i}: score must be an integer between {MIN_SCORE} and {MAX_SCORE}")

    # Adjacent ranges may share a boundary point; anything more is an overlap
    ordered = sorted(indexed, key=lambda item: (item[1].min, item[1].max))
    for (prev_i, prev), (i, rng) in zip(ordered, ordered[1:]):
        if prev.max > rng.min:
            errors.append(f"Range {i}: overlaps with range {prev_i}")

    seen: dict[int, int] = {}
    for i, rng in indexed:
        if rng.score in seen:
            errors.append(f"Range {i}: score {rng.score} is already used by range {seen[rng.score]}")
        else:
            seen[rng.score] = i

    return errors


def classify(value: float, criteria: ScoringCriteria) -> int:
    """Map a value to the score of the range containing it.

    Ranges are closed intervals scanned in ascending order, so a boundary
    shared by two ranges belongs to the lower one. Values below every range
    get the lowest range's score, values above every range the highest
    range's score, and values in a gap between ranges the score of the
    range just below.

    Raises:
        InvalidScoringCriteriaError: If the criteria fail validation
        InvalidVariableTypeError: If value is not a finite number
    """
    violations = validate_criteria(criteria)
    if violations:
        raise InvalidScoringCriteriaError(
            f"Invalid scoring criteria: {'; '.join(violations)}", violations
        )
    if not _is_number(value) or not math.isfinite(value):
        raise InvalidVariableTypeError("value", value)

    ranges = criteria.sorted_ranges()
    if value < ranges[0].min:
        return ranges[0].score

    below = ranges[0]
    for rng in ranges:
        if rng.contains(value):
            return rng.score
        if rng.max < value:
            below = rng
    return below.score


def _partition(min_value: float, max_value: float) -> list[tuple[float, float]]:
    if not (math.isfinite(min_value) and math.isfinite(max_value)):
        raise InvalidScoringCriteriaError("Minimum and maximum values must be finite numbers")
    if min_value >= max_value:
        raise InvalidScoringCriteriaError("Minimum value must be less than maximum value")

    step = (max_value - min_value) / RANGE_COUNT
    bounds = [min_value + i * step for i in range(RANGE_COUNT)] + [max_value]
    return list(zip(bounds, bounds[1:]))


def build_linear(min_value: float, max_value: float) -> ScoringCriteria:
    """Split [min_value, max_value] into five equal ranges scored 1 to 5.

    Higher values get higher scores.
    """
    return ScoringCriteria(
        ranges=[
            ScoringRange(min=low, max=high, score=MIN_SCORE + i)
            for i, (low, high) in enumerate(_partition(min_value, max_value))
        ]
    )


def build_inverse(min_value: float, max_value: float) -> ScoringCriteria:
    """Split [min_value, max_value] into five equal ranges scored 5 to 1.

    Lower values get higher scores (defect counts, days to close).
    """
    return ScoringCriteria(
        ranges=[
            ScoringRange(min=low, max=high, score=MAX_SCORE - i)
            for i, (low, high) in enumerate(_partition(min_value, max_value))
        ]
    )


def build_percentage() -> ScoringCriteria:
    """Get the canonical percentage criteria over [0, 100]."""
    return PERCENTAGE_CRITERIA
