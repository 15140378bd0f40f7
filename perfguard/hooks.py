"""Pre-commit integration: staged-file scan and hook script management."""

from __future__ import annotations

import logging
import stat
from dataclasses import dataclass
from pathlib import Path

from perfguard.git import get_hooks_dir, list_staged_files
from perfguard.scanner import ScanAggregate, scan_files
from perfguard.selector import SOURCE_EXTENSIONS

logger = logging.getLogger(__name__)

HOOK_NAME = "pre-commit"
SHEBANG = "#!/bin/sh"
BLOCK_START = "# >>> perfguard >>>"
BLOCK_END = "# <<< perfguard <<<"
HOOK_COMMAND = "perfguard hook || exit 1"


@dataclass(slots=True, frozen=True)
class HookAction:
    """What an install/uninstall call did to the hook script."""

    path: Path
    action: str

    @property
    def changed(self) -> bool:
        return self.action not in {"unchanged", "absent"}


def staged_source_files(repo: Path) -> list[Path]:
    """Return staged files with a supported extension that still exist on disk."""
    files: list[Path] = []
    for relative in list_staged_files(repo):
        path = repo / relative
        if path.suffix.lower() not in SOURCE_EXTENSIONS:
            continue
        if not path.is_file():
            logger.debug("Skipping staged %s: not on disk", relative)
            continue
        files.append(path)
    return files


def scan_staged(repo: Path) -> ScanAggregate:
    """Scan the staged source files of ``repo`` with a fresh aggregate."""
    return scan_files(staged_source_files(repo), root=repo)


def install_hook(repo: Path) -> HookAction:
    """Add the perfguard block to the pre-commit hook, creating the script if needed."""
    hook_path = get_hooks_dir(repo) / HOOK_NAME
    block = _hook_block()

    if hook_path.exists():
        content = hook_path.read_text(encoding="utf-8")
        if BLOCK_START in content:
            return HookAction(path=hook_path, action="unchanged")
        if content and not content.endswith("\n"):
            content += "\n"
        hook_path.write_text(content + "\n" + block, encoding="utf-8")
        action = "updated"
    else:
        hook_path.parent.mkdir(parents=True, exist_ok=True)
        hook_path.write_text(f"{SHEBANG}\n\n{block}", encoding="utf-8")
        action = "created"

    _make_executable(hook_path)
    logger.debug("Hook %s: %s", action, hook_path)
    return HookAction(path=hook_path, action=action)


def uninstall_hook(repo: Path) -> HookAction:
    """Remove the perfguard block; delete the script when nothing else remains."""
    hook_path = get_hooks_dir(repo) / HOOK_NAME
    if not hook_path.exists():
        return HookAction(path=hook_path, action="absent")

    content = hook_path.read_text(encoding="utf-8")
    if BLOCK_START not in content:
        return HookAction(path=hook_path, action="absent")

    remaining = _strip_block(content)
    if not remaining.strip() or remaining.strip() == SHEBANG:
        hook_path.unlink()
        action = "removed"
    else:
        hook_path.write_text(remaining, encoding="utf-8")
        action = "updated"
    logger.debug("Hook %s: %s", action, hook_path)
    return HookAction(path=hook_path, action=action)


def _hook_block() -> str:
    return f"{BLOCK_START}\n{HOOK_COMMAND}\n{BLOCK_END}\n"


def _strip_block(content: str) -> str:
    kept: list[str] = []
    inside = False
    for line in content.splitlines():
        if line.strip() == BLOCK_START:
            inside = True
            continue
        if line.strip() == BLOCK_END:
            inside = False
            continue
        if not inside:
            kept.append(line)

    while kept and not kept[-1].strip():
        kept.pop()
    return "\n".join(kept) + "\n" if kept else ""


def _make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
