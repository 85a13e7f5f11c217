"""Overall score and letter grade."""

from __future__ import annotations

from sitegrade.models import Grade, SecurityCategory

GRADE_THRESHOLDS: tuple[tuple[float, Grade], ...] = (
    (90.0, Grade.A),
    (75.0, Grade.B),
    (60.0, Grade.C),
    (40.0, Grade.D),
)


def grade_for(percentage: float) -> Grade:
    """Map a percentage of the maximum score to a letter grade."""
    for threshold, grade in GRADE_THRESHOLDS:
        if percentage >= threshold:
            return grade
    return Grade.F


def score_percentage(score: float, max_score: float) -> float:
    if max_score <= 0:
        return 0.0
    return score / max_score * 100.0


def summarize(categories: list[SecurityCategory]) -> tuple[float, float, Grade]:
    """Return ``(overall_score, max_score, grade)`` across categories."""
    overall = sum(c.score for c in categories)
    maximum = sum(c.max_score for c in categories)
    return overall, maximum, grade_for(score_percentage(overall, maximum))
