"""Score history across recent commits."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from perfguard.config import MAX_TREND_DEPTH
from perfguard.git import (
    Commit,
    DirtyWorkingTreeError,
    GitError,
    checkout,
    find_repo_root,
    get_current_ref,
    get_head_revision,
    has_tracked_changes,
    list_recent_commits,
)
from perfguard.scanner import scan_project

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TrendPoint:
    sha: str
    short_sha: str
    score: int
    grade: str
    total_issues: int
    message: str
    direction: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sha": self.sha,
            "short_sha": self.short_sha,
            "score": self.score,
            "grade": self.grade,
            "total_issues": self.total_issues,
            "message": self.message,
            "direction": self.direction,
        }


@dataclass(slots=True)
class SkippedRevision:
    sha: str
    short_sha: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"sha": self.sha, "short_sha": self.short_sha, "reason": self.reason}


@dataclass(slots=True)
class TrendResult:
    """Outcome of a trend walk.

    ``points`` are most-recent-first. ``restored`` is False only when the
    original checkout could not be put back; ``restore_error`` then says why.
    """

    points: list[TrendPoint] = field(default_factory=list)
    skipped: list[SkippedRevision] = field(default_factory=list)
    in_repo: bool = True
    restored: bool = True
    restore_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "points": [point.to_dict() for point in self.points],
            "skipped": [item.to_dict() for item in self.skipped],
            "in_repo": self.in_repo,
            "restored": self.restored,
            "restore_error": self.restore_error,
        }


def walk_trend(
    target: Path,
    *,
    limit: int = MAX_TREND_DEPTH,
    extra_excludes: Iterable[str] = (),
) -> TrendResult:
    """Check out each recent commit in turn and score ``target`` at it.

    Outside a git repository, or in one without commits, nothing is touched
    and an empty result with ``in_repo=False`` is returned. The original
    branch (or detached sha) is always checked out again before returning.
    """
    depth = max(1, min(MAX_TREND_DEPTH, limit))
    target = target.resolve()
    repo = find_repo_root(target)
    if repo is None:
        logger.debug("No git repository encloses %s; skipping trend", target)
        return TrendResult(in_repo=False)

    original_sha = get_head_revision(repo)
    if original_sha is None:
        logger.debug("Repository %s has no commits; skipping trend", repo)
        return TrendResult(in_repo=False)

    if has_tracked_changes(repo):
        raise DirtyWorkingTreeError(
            f"{repo} has uncommitted changes to tracked files; commit or stash them first"
        )

    commits = list_recent_commits(repo, depth)
    original_ref = get_current_ref(repo)
    excludes = tuple(extra_excludes)
    result = TrendResult()
    try:
        for commit in commits:
            _score_revision(repo, target, commit, excludes, result)
    finally:
        _restore(repo, original_ref, original_sha, result)
    return result


def _score_revision(
    repo: Path,
    target: Path,
    commit: Commit,
    excludes: tuple[str, ...],
    result: TrendResult,
) -> None:
    try:
        checkout(repo, commit.sha)
    except GitError as exc:
        logger.warning("Skipping %s: checkout failed: %s", commit.short_sha, exc)
        result.skipped.append(SkippedRevision(commit.sha, commit.short_sha, "checkout failed"))
        return

    if not target.exists():
        logger.debug("Skipping %s: %s missing at this revision", commit.short_sha, target)
        result.skipped.append(SkippedRevision(commit.sha, commit.short_sha, "target missing"))
        return

    scan = scan_project(target, 0, extra_excludes=excludes)
    previous = result.points[-1] if result.points else None
    result.points.append(
        TrendPoint(
            sha=commit.sha,
            short_sha=commit.short_sha,
            score=scan.score,
            grade=scan.grade,
            total_issues=scan.aggregate.total_issues,
            message=commit.subject,
            direction=_direction(previous.score, scan.score) if previous else None,
        )
    )


def _direction(previous: int, current: int) -> str:
    if current > previous:
        return "improved"
    if current < previous:
        return "degraded"
    return "unchanged"


def _restore(repo: Path, original_ref: str, original_sha: str, result: TrendResult) -> None:
    try:
        checkout(repo, original_ref)
        return
    except GitError as exc:
        logger.warning("Could not restore %s: %s", original_ref, exc)
        error = str(exc)

    if original_ref != original_sha:
        try:
            checkout(repo, original_sha)
            return
        except GitError as exc:
            logger.warning("Could not restore %s: %s", original_sha, exc)
            error = str(exc)

    result.restored = False
    result.restore_error = error
