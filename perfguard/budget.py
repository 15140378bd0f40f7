"""Pass/fail quality gate over a full project scan."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from perfguard.config import BudgetConfig
from perfguard.scanner import ProjectScan, scan_project


@dataclass(slots=True)
class BudgetCheck:
    name: str
    label: str
    actual: int
    limit: int
    comparison: str
    passed: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "actual": self.actual,
            "limit": self.limit,
            "comparison": self.comparison,
            "passed": self.passed,
        }


@dataclass(slots=True)
class BudgetResult:
    scan: ProjectScan
    budgets: BudgetConfig
    checks: list[BudgetCheck] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)


def evaluate_budget(
    root: Path,
    budgets: BudgetConfig,
    *,
    extra_excludes: Iterable[str] = (),
) -> BudgetResult:
    """Scan ``root`` without a file cap and check it against ``budgets``."""
    scan = scan_project(root, 0, extra_excludes=extra_excludes)
    return BudgetResult(scan=scan, budgets=budgets, checks=check_budget(scan, budgets))


def check_budget(scan: ProjectScan, budgets: BudgetConfig) -> list[BudgetCheck]:
    """Run the three independent budget checks."""
    aggregate = scan.aggregate
    return [
        BudgetCheck(
            name="critical",
            label="Critical issues",
            actual=aggregate.critical,
            limit=budgets.max_critical,
            comparison="<=",
            passed=aggregate.critical <= budgets.max_critical,
        ),
        BudgetCheck(
            name="total",
            label="Total issues",
            actual=aggregate.total_issues,
            limit=budgets.max_total,
            comparison="<=",
            passed=aggregate.total_issues <= budgets.max_total,
        ),
        BudgetCheck(
            name="score",
            label="Performance score",
            actual=scan.score,
            limit=budgets.min_score,
            comparison=">=",
            passed=scan.score >= budgets.min_score,
        ),
    ]
