from __future__ import annotations

from pathlib import Path

from perfguard.budget import evaluate_budget
from perfguard.config import BudgetConfig


def _touch(root: Path, rel_path: str, content: str) -> None:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _project_with_one_critical(root: Path) -> None:
    _touch(root, "loop.rb", "users.each do |u| User.find(u.id) end\n")
    for index in range(9):
        _touch(root, f"lib/clean{index}.rb", "puts 'ok'\n")


def test_single_critical_fails_default_budget(tmp_path: Path) -> None:
    _project_with_one_critical(tmp_path)

    result = evaluate_budget(tmp_path, BudgetConfig())

    checks = {check.name: check for check in result.checks}
    assert checks["critical"].actual == 1
    assert not checks["critical"].passed
    assert checks["total"].passed
    # 25 * 10 // (10 + 5) == 16
    assert checks["score"].actual == 84
    assert checks["score"].passed
    assert not result.passed


def test_lenient_budget_passes(tmp_path: Path) -> None:
    _project_with_one_critical(tmp_path)

    result = evaluate_budget(tmp_path, BudgetConfig(max_critical=1, max_total=5, min_score=80))

    assert result.passed
    assert [check.comparison for check in result.checks] == ["<=", "<=", ">="]


def test_total_and_score_checks_are_independent(tmp_path: Path) -> None:
    _touch(tmp_path, "orders.rb", "SELECT * FROM orders\n" * 3)

    result = evaluate_budget(tmp_path, BudgetConfig(max_critical=0, max_total=5, min_score=95))

    checks = {check.name: check for check in result.checks}
    assert checks["critical"].passed
    assert not checks["total"].passed
    assert not checks["score"].passed
    assert not result.passed


def test_budget_scans_without_file_cap(tmp_path: Path) -> None:
    for index in range(30):
        _touch(tmp_path, f"m{index}.rb", "puts 'ok'\n")

    result = evaluate_budget(tmp_path, BudgetConfig())

    assert result.scan.aggregate.files_scanned == 30
    assert result.passed
