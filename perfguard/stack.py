"""Technology stack detection for files and project roots."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from perfguard.catalog import STACKS
from perfguard.selector import TargetNotFoundError, iter_candidate_files

UNKNOWN_STACK = "unknown"

EXTENSION_STACKS: dict[str, str] = {
    ".py": "python",
    ".js": "javascript",
    ".ts": "javascript",
    ".jsx": "javascript",
    ".tsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".rb": "ruby",
    ".java": "java",
}

MARKER_FILES: dict[str, tuple[str, ...]] = {
    "python": ("requirements.txt", "pyproject.toml", "setup.py", "Pipfile"),
    "javascript": ("package.json", "tsconfig.json"),
    "ruby": ("Gemfile", "Rakefile"),
    "java": ("pom.xml", "build.gradle", "build.gradle.kts"),
}


def detect_file_stack(path: Path | str) -> str:
    """Classify a single file by extension only."""
    return EXTENSION_STACKS.get(Path(path).suffix.lower(), UNKNOWN_STACK)


def detect_project_stack(root: Path, *, extra_excludes: Iterable[str] = ()) -> list[str]:
    """Detect the stacks present in a project.

    Marker files (dependency manifests) win; extension prevalence across the
    candidate source files is only consulted when no marker file exists.
    """
    if not root.exists():
        raise TargetNotFoundError(f"Target not found: {root}")
    if root.is_file():
        return [detect_file_stack(root)]

    detected = {
        stack
        for stack, markers in MARKER_FILES.items()
        if any((root / marker).is_file() for marker in markers)
    }
    if not detected:
        for path in iter_candidate_files(root, extra_excludes=extra_excludes):
            stack = detect_file_stack(path)
            if stack != UNKNOWN_STACK:
                detected.add(stack)
            if len(detected) == len(STACKS):
                break

    ordered = [stack for stack in STACKS if stack in detected]
    return ordered or [UNKNOWN_STACK]
