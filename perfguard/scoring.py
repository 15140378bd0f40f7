"""Severity-weighted performance score and letter grade."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perfguard.scanner import ScanAggregate

SEVERITY_WEIGHTS: dict[str, int] = {
    "critical": 25,
    "high": 10,
    "medium": 4,
    "low": 1,
}

# Added to files_scanned before scaling the penalty.
FILE_COUNT_OFFSET = 5

GRADE_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)

EXIT_MIN_SCORE = 70


def severity_penalty(critical: int, high: int, medium: int, low: int) -> int:
    """Return the unscaled severity-weighted penalty."""
    return (
        critical * SEVERITY_WEIGHTS["critical"]
        + high * SEVERITY_WEIGHTS["high"]
        + medium * SEVERITY_WEIGHTS["medium"]
        + low * SEVERITY_WEIGHTS["low"]
    )


def compute_score(files_scanned: int, critical: int, high: int, medium: int, low: int) -> int:
    """Convert severity counts into a 0-100 score.

    With files scanned, the penalty is scaled by ``10 / (files_scanned + 5)``
    and floored; with no files the raw penalty applies.
    """
    penalty = severity_penalty(critical, high, medium, low)
    if files_scanned > 0:
        penalty = (penalty * 10) // (files_scanned + FILE_COUNT_OFFSET)
    return _clamp(100 - penalty)


def grade_for_score(score: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def score_aggregate(aggregate: ScanAggregate) -> tuple[int, str]:
    """Score and grade a scan aggregate."""
    score = compute_score(
        aggregate.files_scanned,
        aggregate.critical,
        aggregate.high,
        aggregate.medium,
        aggregate.low,
    )
    return (score, grade_for_score(score))


def is_passing(score: int, critical: int) -> bool:
    """Exit gate for the scan command: no criticals and score >= 70."""
    return score >= EXIT_MIN_SCORE and critical == 0


def _clamp(value: int, lower: int = 0, upper: int = 100) -> int:
    return max(lower, min(upper, value))
