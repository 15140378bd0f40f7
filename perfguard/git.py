"""Git subprocess helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from subprocess import CalledProcessError, run

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """Raised when git command execution fails."""


class DirtyWorkingTreeError(GitError):
    """Raised when tracked files have uncommitted changes."""


@dataclass(slots=True, frozen=True)
class Commit:
    sha: str
    subject: str

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


def find_repo_root(path: Path) -> Path | None:
    """Return the enclosing work tree root, or None outside a repository."""
    start = path if path.is_dir() else path.parent
    try:
        return Path(_run_git(start, ["rev-parse", "--show-toplevel"]).strip())
    except (GitError, OSError):
        return None


def list_recent_commits(repo: Path, limit: int) -> list[Commit]:
    """Return up to ``limit`` commits reachable from HEAD, most recent first."""
    if get_head_revision(repo) is None:
        return []
    output = _run_git(repo, ["log", "-n", str(limit), "--format=%H %s"])
    commits: list[Commit] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        sha, _, subject = line.partition(" ")
        commits.append(Commit(sha=sha, subject=subject))
    return commits


def get_current_ref(repo: Path) -> str:
    """Return the checked-out branch name, or the commit sha when detached."""
    branch = _run_git(repo, ["rev-parse", "--abbrev-ref", "HEAD"]).strip()
    if branch and branch != "HEAD":
        return branch
    return _run_git(repo, ["rev-parse", "--verify", "HEAD"]).strip()


def get_head_revision(repo: Path) -> str | None:
    """Return HEAD revision if present."""
    try:
        return _run_git(repo, ["rev-parse", "--verify", "HEAD"]).strip()
    except GitError:
        return None


def checkout(repo: Path, ref: str) -> None:
    _run_git(repo, ["checkout", "--quiet", ref])


def has_tracked_changes(repo: Path) -> bool:
    """Return True when tracked files differ from HEAD (staged or not)."""
    output = _run_git(repo, ["status", "--porcelain", "--untracked-files=no"])
    return bool(output.strip())


def list_staged_files(repo: Path) -> list[str]:
    """Return repository-relative paths of added, copied or modified staged files."""
    output = _run_git(repo, ["diff", "--cached", "--name-only", "--diff-filter=ACM"])
    return [line for line in output.splitlines() if line.strip()]


def get_hooks_dir(repo: Path) -> Path:
    """Return the directory git reads hook scripts from."""
    hooks = Path(_run_git(repo, ["rev-parse", "--git-path", "hooks"]).strip())
    if not hooks.is_absolute():
        hooks = repo / hooks
    return hooks


def _run_git(repo: Path, args: list[str]) -> str:
    logger.debug("git %s (cwd=%s)", " ".join(args), repo)
    try:
        completed = run(
            ["git", *args],
            cwd=repo,
            check=True,
            capture_output=True,
            text=True,
        )
    except CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise GitError(stderr or f"git {' '.join(args)} failed") from exc

    return completed.stdout
