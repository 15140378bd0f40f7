"""Rule and rule-set models for the detection catalog."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

Severity = Literal["critical", "high", "medium", "low"]

SEVERITIES: tuple[Severity, ...] = ("critical", "high", "medium", "low")


@dataclass(frozen=True, slots=True)
class Rule:
    """A single regex-based performance anti-pattern check."""

    rule_id: str
    pattern: str
    severity: Severity
    description: str
    remediation: str
    multiline: bool = False

    def __post_init__(self) -> None:
        if not self.pattern:
            raise ValueError(f"Rule {self.rule_id} has an empty pattern")
        if self.severity not in SEVERITIES:
            raise ValueError(f"Rule {self.rule_id} has unknown severity '{self.severity}'")
        try:
            compile_pattern(self.pattern)
        except re.error as exc:
            raise ValueError(f"Rule {self.rule_id} has an invalid pattern: {exc}") from exc

    @property
    def regex(self) -> re.Pattern[str]:
        return compile_pattern(self.pattern)


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Named group of related rules."""

    name: str
    title: str
    rules: tuple[Rule, ...]


def rule(
    pattern: str,
    severity: Severity,
    rule_id: str,
    description: str,
    remediation: str,
) -> Rule:
    """Build a rule; patterns spanning lines (explicit ``\\n``) are flagged multiline."""
    return Rule(
        rule_id=rule_id,
        pattern=pattern,
        severity=severity,
        description=description,
        remediation=remediation,
        multiline="\\n" in pattern,
    )


@lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)
