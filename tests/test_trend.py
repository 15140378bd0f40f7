"""Trend walks over synthetic git repositories."""

from __future__ import annotations

from pathlib import Path

import pytest

from perfguard import trend as trend_module
from perfguard.git import DirtyWorkingTreeError, GitError
from perfguard.trend import walk_trend
from tests.helpers_git import commit_all, current_branch, git, head_sha, init_repo, write_file

CLEAN = "puts 'hello'\n"
CRITICAL = "users.each do |u| User.find(u.id) end\n"


def _three_commit_repo(tmp_path: Path) -> tuple[Path, list[str]]:
    repo = init_repo(tmp_path)
    write_file(repo, "app.rb", CLEAN)
    first = commit_all(repo, "baseline")
    write_file(repo, "app.rb", CRITICAL)
    second = commit_all(repo, "introduce n+1")
    write_file(repo, "app.rb", CLEAN + "# fixed\n")
    third = commit_all(repo, "fix n+1")
    return repo, [third, second, first]


def test_trend_outside_git_is_a_noop(tmp_path: Path) -> None:
    project = tmp_path / "plain"
    project.mkdir()
    write_file(project, "app.rb", CRITICAL)
    before = sorted(path.name for path in project.iterdir())

    result = walk_trend(project)

    assert not result.in_repo
    assert result.points == []
    assert result.skipped == []
    assert sorted(path.name for path in project.iterdir()) == before
    assert (project / "app.rb").read_text(encoding="utf-8") == CRITICAL


def test_trend_in_repo_without_commits_is_a_noop(tmp_path: Path) -> None:
    repo = init_repo(tmp_path)
    write_file(repo, "app.rb", CLEAN)

    result = walk_trend(repo)

    assert not result.in_repo
    assert result.points == []


def test_trend_scores_recent_commits_and_restores_branch(tmp_path: Path) -> None:
    repo, shas = _three_commit_repo(tmp_path)

    result = walk_trend(repo)

    assert [point.sha for point in result.points] == shas
    assert [point.message for point in result.points] == ["fix n+1", "introduce n+1", "baseline"]
    assert [point.score for point in result.points] == [100, 59, 100]
    assert [point.direction for point in result.points] == [None, "degraded", "improved"]
    assert result.points[1].grade == "F"
    assert result.points[1].total_issues == 1
    assert result.points[0].short_sha == shas[0][:7]
    assert result.restored
    assert current_branch(repo) == "main"
    assert head_sha(repo) == shas[0]
    assert "# fixed" in (repo / "app.rb").read_text(encoding="utf-8")


def test_trend_depth_is_clamped(tmp_path: Path) -> None:
    repo, shas = _three_commit_repo(tmp_path)

    assert len(walk_trend(repo, limit=50).points) == 3
    assert [point.sha for point in walk_trend(repo, limit=0).points] == shas[:1]


def test_trend_caps_at_ten_commits(tmp_path: Path) -> None:
    repo = init_repo(tmp_path)
    for index in range(12):
        write_file(repo, "app.rb", f"puts {index}\n")
        commit_all(repo, f"commit {index}")

    result = walk_trend(repo, limit=10)

    assert len(result.points) == 10
    assert result.points[0].message == "commit 11"


def test_trend_restores_detached_head(tmp_path: Path) -> None:
    repo, shas = _three_commit_repo(tmp_path)
    git(repo, "checkout", "-q", shas[1])

    result = walk_trend(repo)

    assert [point.sha for point in result.points] == shas[1:]
    assert head_sha(repo) == shas[1]
    assert current_branch(repo) == "HEAD"


def test_trend_skips_revisions_missing_the_target(tmp_path: Path) -> None:
    repo = init_repo(tmp_path)
    write_file(repo, "README.md", "docs\n")
    first = commit_all(repo, "docs only")
    write_file(repo, "src/app.rb", CLEAN)
    second = commit_all(repo, "add src")

    result = walk_trend(repo / "src")

    assert [point.sha for point in result.points] == [second]
    assert [(item.sha, item.reason) for item in result.skipped] == [(first, "target missing")]
    assert (repo / "src" / "app.rb").exists()
    assert current_branch(repo) == "main"


def test_trend_skips_failed_checkouts(tmp_path: Path, monkeypatch) -> None:
    repo, shas = _three_commit_repo(tmp_path)
    real_checkout = trend_module.checkout

    def flaky_checkout(repo_path: Path, ref: str) -> None:
        if ref == shas[1]:
            raise GitError("simulated checkout failure")
        real_checkout(repo_path, ref)

    monkeypatch.setattr(trend_module, "checkout", flaky_checkout)

    result = walk_trend(repo)

    assert [point.sha for point in result.points] == [shas[0], shas[2]]
    assert [item.reason for item in result.skipped] == ["checkout failed"]
    assert result.points[1].direction == "unchanged"
    assert result.restored
    assert current_branch(repo) == "main"


def test_trend_reports_restore_failure(tmp_path: Path, monkeypatch) -> None:
    repo, shas = _three_commit_repo(tmp_path)
    real_checkout = trend_module.checkout

    def no_restore(repo_path: Path, ref: str) -> None:
        if ref in {"main", shas[0]}:
            raise GitError(f"cannot check out {ref}")
        real_checkout(repo_path, ref)

    monkeypatch.setattr(trend_module, "checkout", no_restore)

    result = walk_trend(repo)

    assert not result.restored
    assert result.restore_error == f"cannot check out {shas[0]}"
    assert len(result.points) == 2
    git(repo, "checkout", "-q", "main")


def test_trend_restores_branch_when_scan_raises(tmp_path: Path, monkeypatch) -> None:
    repo, _ = _three_commit_repo(tmp_path)

    def broken_scan(*args, **kwargs):
        raise RuntimeError("scan exploded")

    monkeypatch.setattr(trend_module, "scan_project", broken_scan)

    with pytest.raises(RuntimeError, match="scan exploded"):
        walk_trend(repo)

    assert current_branch(repo) == "main"


def test_trend_refuses_dirty_tracked_tree(tmp_path: Path) -> None:
    repo, shas = _three_commit_repo(tmp_path)
    write_file(repo, "app.rb", CRITICAL)

    with pytest.raises(DirtyWorkingTreeError):
        walk_trend(repo)

    assert head_sha(repo) == shas[0]
    assert (repo / "app.rb").read_text(encoding="utf-8") == CRITICAL
