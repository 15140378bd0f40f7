from __future__ import annotations

import pytest

from perfguard.scanner import ScanAggregate
from perfguard.scoring import (
    compute_score,
    grade_for_score,
    is_passing,
    score_aggregate,
    severity_penalty,
)


def test_clean_scan_scores_perfect() -> None:
    assert compute_score(0, 0, 0, 0, 0) == 100
    assert compute_score(12, 0, 0, 0, 0) == 100


def test_penalty_weights() -> None:
    assert severity_penalty(1, 1, 1, 1) == 40
    assert severity_penalty(2, 0, 3, 0) == 62


def test_penalty_scaled_by_file_count_and_floored() -> None:
    # 25 * 10 // (1 + 5) == 41
    assert compute_score(1, 1, 0, 0, 0) == 59
    # 5 * 10 // (20 + 5) == 2
    assert compute_score(20, 0, 0, 0, 5) == 98


def test_raw_penalty_applies_without_files() -> None:
    assert compute_score(0, 1, 0, 0, 0) == 75


def test_score_clamped_at_zero() -> None:
    assert compute_score(0, 5, 0, 0, 0) == 0
    assert compute_score(1, 100, 100, 100, 100) == 0


@pytest.mark.parametrize(
    ("score", "grade"),
    [
        (100, "A"),
        (90, "A"),
        (89, "B"),
        (80, "B"),
        (79, "C"),
        (70, "C"),
        (69, "D"),
        (60, "D"),
        (59, "F"),
        (0, "F"),
    ],
)
def test_grade_boundaries(score: int, grade: str) -> None:
    assert grade_for_score(score) == grade


@pytest.mark.parametrize("bucket", range(4), ids=["critical", "high", "medium", "low"])
def test_more_findings_never_raise_the_score(bucket: int) -> None:
    for files in (0, 1, 7, 40):
        for base in ((0, 0, 0, 0), (1, 2, 3, 4)):
            previous = compute_score(files, *base)
            for extra in range(1, 30):
                counts = list(base)
                counts[bucket] += extra
                current = compute_score(files, *counts)
                assert 0 <= current <= previous <= 100
                previous = current


def test_more_files_never_lower_the_score() -> None:
    previous = compute_score(1, 1, 1, 1, 1)
    for files in range(2, 60):
        current = compute_score(files, 1, 1, 1, 1)
        assert current >= previous
        previous = current


def test_score_aggregate_returns_score_and_grade() -> None:
    aggregate = ScanAggregate(files_scanned=1, total_issues=3, critical=2, medium=1)
    assert score_aggregate(aggregate) == (10, "F")


def test_passing_gate_requires_score_and_no_criticals() -> None:
    assert is_passing(70, 0)
    assert not is_passing(69, 0)
    assert not is_passing(100, 1)
