"""Source file discovery with relevance-based prioritization."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

EXCLUDE_DIRS = frozenset(
    {
        ".git",
        "node_modules",
        "dist",
        "build",
        "vendor",
        "__pycache__",
        ".next",
        ".nuxt",
        "coverage",
        ".venv",
        "venv",
        "env",
        ".tox",
        "target",
        ".gradle",
        ".mvn",
        ".idea",
        ".mypy_cache",
        ".pytest_cache",
        "migrations",
    }
)

SOURCE_EXTENSIONS = frozenset({".py", ".js", ".ts", ".jsx", ".tsx", ".rb", ".java", ".mjs", ".cjs"})

# Names that usually hold data-access or request-handling code.
HOT_KEYWORDS = (
    "model",
    "models",
    "query",
    "queries",
    "service",
    "services",
    "handler",
    "handlers",
    "controller",
    "controllers",
    "api",
    "views",
    "view",
    "repository",
    "repo",
    "dao",
    "db",
    "database",
    "worker",
    "task",
    "tasks",
    "job",
    "jobs",
    "serializer",
    "serializers",
)

FILENAME_BONUS = 10
DIRECTORY_BONUS = 5
LARGE_FILE_BONUS = 3
LARGE_FILE_BYTES = 5000


class TargetNotFoundError(FileNotFoundError):
    """Raised when the scan target does not exist."""


@dataclass(slots=True)
class FileSelection:
    """Ordered candidate files for one scan."""

    root: Path
    files: list[Path] = field(default_factory=list)
    total_candidates: int = 0
    max_files: int = 0

    @property
    def truncated(self) -> bool:
        return self.max_files > 0 and self.total_candidates > self.max_files


def select_source_files(
    root: Path,
    max_files: int = 0,
    *,
    extra_excludes: Iterable[str] = (),
) -> FileSelection:
    """Select source files under ``root`` ordered by descending relevance.

    A file root is returned as-is and ignores ``max_files``. For directories,
    ``max_files`` of 0 means unlimited.
    """
    if max_files < 0:
        raise ValueError("max_files must be >= 0")
    if not root.exists():
        raise TargetNotFoundError(f"Target not found: {root}")

    if root.is_file():
        return FileSelection(root=root, files=[root], total_candidates=1, max_files=max_files)

    scored = [
        (relevance_score(path, root), _relative_posix(path, root), path)
        for path in iter_candidate_files(root, extra_excludes=extra_excludes)
    ]
    scored.sort(key=lambda item: (-item[0], item[1]))
    ordered = [path for _, _, path in scored]
    selected = ordered[:max_files] if max_files > 0 else ordered
    logger.debug(
        "Selected %d of %d candidate files under %s", len(selected), len(ordered), root
    )
    return FileSelection(
        root=root,
        files=selected,
        total_candidates=len(ordered),
        max_files=max_files,
    )


def iter_candidate_files(root: Path, *, extra_excludes: Iterable[str] = ()) -> Iterator[Path]:
    """Yield supported source files below ``root`` outside excluded directories."""
    excluded = EXCLUDE_DIRS | set(extra_excludes)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in excluded)
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.suffix.lower() not in SOURCE_EXTENSIONS:
                continue
            if is_excluded(path, root, excluded) or not path.is_file():
                continue
            yield path


def is_excluded(path: Path, root: Path, excluded: Iterable[str] = EXCLUDE_DIRS) -> bool:
    """Return True when any directory segment below ``root`` is an excluded name."""
    excluded_names = set(excluded)
    parts = PurePosixPath(_relative_posix(path, root)).parts[:-1]
    return any(part in excluded_names for part in parts)


def relevance_score(path: Path, root: Path) -> int:
    """Score how likely a file is to contain data-access or request-path code."""
    score = 1
    if _contains_keyword(path.name.lower()):
        score += FILENAME_BONUS

    relative_dir = PurePosixPath(_relative_posix(path, root)).parent.as_posix()
    if relative_dir != "." and _contains_keyword(relative_dir.lower()):
        score += DIRECTORY_BONUS

    try:
        size = path.stat().st_size
    except FileNotFoundError:
        size = 0
    if size > LARGE_FILE_BYTES:
        score += LARGE_FILE_BONUS
    return score


def finding_path(path: Path, root: Path) -> str:
    """Path shown in findings: relative to a directory root, else as given."""
    if root.is_dir():
        return _relative_posix(path, root)
    return str(path)


def _contains_keyword(value: str) -> bool:
    return any(keyword in value for keyword in HOT_KEYWORDS)


def _relative_posix(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
