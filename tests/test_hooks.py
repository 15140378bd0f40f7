from __future__ import annotations

import os
from pathlib import Path

from perfguard.hooks import (
    BLOCK_START,
    HOOK_COMMAND,
    install_hook,
    scan_staged,
    staged_source_files,
    uninstall_hook,
)
from tests.helpers_git import commit_all, git, init_repo, write_file


def _hook_path(repo: Path) -> Path:
    return repo / ".git" / "hooks" / "pre-commit"


def test_scan_staged_only_scans_staged_source_files(tmp_path: Path) -> None:
    repo = init_repo(tmp_path)
    write_file(repo, "README.md", "docs\n")
    commit_all(repo, "baseline")

    write_file(repo, "app/views.py", "for x in Model.objects.all(): x.save()\n")
    write_file(repo, "notes.txt", "SELECT * FROM t\n")
    write_file(repo, "unstaged.rb", "SELECT * FROM t\n")
    git(repo, "add", "app/views.py", "notes.txt")

    aggregate = scan_staged(repo)

    assert aggregate.files_scanned == 1
    assert aggregate.critical >= 1
    assert {finding.path for finding in aggregate.findings} == {"app/views.py"}


def test_staged_files_missing_on_disk_are_skipped(tmp_path: Path) -> None:
    repo = init_repo(tmp_path)
    write_file(repo, "README.md", "docs\n")
    commit_all(repo, "baseline")
    write_file(repo, "gone.py", "x = 1\n")
    git(repo, "add", "gone.py")
    (repo / "gone.py").unlink()

    assert staged_source_files(repo) == []
    assert scan_staged(repo).files_scanned == 0


def test_install_creates_executable_hook_and_is_idempotent(tmp_path: Path) -> None:
    repo = init_repo(tmp_path)

    first = install_hook(repo)
    second = install_hook(repo)

    hook = _hook_path(repo)
    content = hook.read_text(encoding="utf-8")
    assert first.action == "created"
    assert first.path.resolve() == hook.resolve()
    assert second.action == "unchanged"
    assert not second.changed
    assert content.startswith("#!/bin/sh\n")
    assert content.count(BLOCK_START) == 1
    assert HOOK_COMMAND in content
    assert os.access(hook, os.X_OK)


def test_install_and_uninstall_preserve_existing_hook(tmp_path: Path) -> None:
    repo = init_repo(tmp_path)
    hook = _hook_path(repo)
    hook.parent.mkdir(parents=True, exist_ok=True)
    original = "#!/bin/sh\nnpm test\n"
    hook.write_text(original, encoding="utf-8")

    assert install_hook(repo).action == "updated"
    assert "npm test" in hook.read_text(encoding="utf-8")
    assert HOOK_COMMAND in hook.read_text(encoding="utf-8")

    assert uninstall_hook(repo).action == "updated"
    assert hook.read_text(encoding="utf-8") == original


def test_uninstall_removes_hook_owned_by_perfguard(tmp_path: Path) -> None:
    repo = init_repo(tmp_path)
    install_hook(repo)

    action = uninstall_hook(repo)

    assert action.action == "removed"
    assert not _hook_path(repo).exists()
    assert uninstall_hook(repo).action == "absent"
