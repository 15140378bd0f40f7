"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from perfguard import __version__
from perfguard.budget import BudgetResult
from perfguard.catalog import RuleSetInfo, get_rule_set
from perfguard.hotspots import Hotspot
from perfguard.scanner import Finding, ProjectScan, ScanAggregate
from perfguard.trend import TrendResult

SEVERITY_COLORS = {
    "critical": "red",
    "high": "magenta",
    "medium": "yellow",
    "low": "cyan",
}

DIRECTION_MARKS = {
    "improved": ("^", "green"),
    "degraded": ("v", "red"),
    "unchanged": ("=", None),
}


def render_scan_human(scan: ProjectScan) -> str:
    """Render a colorized project scan summary."""
    aggregate = scan.aggregate
    lines: list[str] = [
        click.style(
            f"Performance score: {scan.score}/100 ({scan.grade})",
            fg=score_color(scan.score),
            bold=True,
        ),
        f"Stack: {', '.join(scan.stacks)}",
        f"Files scanned: {aggregate.files_scanned}",
        _severity_counts_line(aggregate),
    ]
    if scan.selection.truncated:
        lines.append(
            click.style(
                f"Note: scanned the {scan.selection.max_files} most relevant of "
                f"{scan.selection.total_candidates} source files (max_files cap).",
                fg="yellow",
            )
        )

    if aggregate.findings:
        lines.append(click.style("Findings:", bold=True))
        lines.extend(_finding_lines(aggregate.findings))
    else:
        lines.append(click.style("No performance anti-patterns detected.", fg="green"))

    status = "PASS" if scan.passed else "FAIL"
    lines.append(click.style(status, fg="green" if scan.passed else "red", bold=True))
    return "\n".join(lines)


def render_hook_human(aggregate: ScanAggregate) -> str:
    """Render the pre-commit summary for staged files."""
    if aggregate.files_scanned == 0:
        return click.style("No relevant source files in staged changes.", fg="green")
    if aggregate.critical:
        lines = [
            click.style(
                f"{aggregate.critical} critical performance issue(s) found in staged files!",
                fg="red",
                bold=True,
            )
        ]
        lines.extend(_finding_lines(aggregate.findings))
        return "\n".join(lines)
    if aggregate.total_issues:
        return click.style(
            f"{aggregate.total_issues} issue(s) found ({aggregate.high} high, "
            f"{aggregate.medium} medium, {aggregate.low} low)",
            fg="yellow",
        )
    return click.style("Staged files look clean.", fg="green")


def render_hotspots_human(hotspots: list[Hotspot]) -> str:
    if not hotspots:
        return click.style("No hotspots: no file has findings.", fg="green")

    lines = [click.style("Performance hotspots:", bold=True)]
    for item in hotspots:
        lines.append(
            f"{item.rank:>2}. {item.path} weight={item.weight} "
            f"(critical {item.critical}, high {item.high}, "
            f"medium {item.medium}, low {item.low}; {item.total} total)"
        )
    return "\n".join(lines)


def render_budget_human(result: BudgetResult) -> str:
    lines = [click.style("Performance budget:", bold=True)]
    for check in result.checks:
        if check.passed:
            mark = click.style("PASS", fg="green")
        else:
            mark = click.style("FAIL", fg="red")
        lines.append(
            f"- {check.label}: {check.actual} (budget {check.comparison} {check.limit}) {mark}"
        )
    if result.passed:
        lines.append(click.style("Budget passed.", fg="green", bold=True))
    else:
        lines.append(click.style("Budget exceeded.", fg="red", bold=True))
    return "\n".join(lines)


def render_trend_human(result: TrendResult) -> str:
    if not result.in_repo:
        return "Not a git repository (or no commits yet); no trend to show."

    lines = [click.style("Score trend (most recent first):", bold=True)]
    if not result.points:
        lines.append("No revisions could be scored.")
    for point in result.points:
        mark = " "
        if point.direction is not None:
            symbol, color = DIRECTION_MARKS[point.direction]
            mark = click.style(symbol, fg=color) if color else symbol
        lines.append(
            f"{mark} {point.short_sha} "
            + click.style(f"{point.score:>3} ({point.grade})", fg=score_color(point.score))
            + f" {point.total_issues:>4} issues  {point.message}"
        )
    for item in result.skipped:
        lines.append(click.style(f"  skipped {item.short_sha}: {item.reason}", dim=True))
    if not result.restored:
        lines.append(
            click.style(
                f"Could not restore the original checkout: {result.restore_error}",
                fg="red",
                bold=True,
            )
        )
    return "\n".join(lines)


def render_rules_human(infos: list[RuleSetInfo]) -> str:
    lines = ["Available rule-sets:"]
    for info in infos:
        scope = "all stacks" if info.universal else ", ".join(info.stacks)
        lines.append(f"- {info.name} ({info.rule_count} rules, {scope}) - {info.title}")
        for item in get_rule_set(info.name).rules:
            lines.append(
                "    "
                + click.style(f"{item.severity:<8}", fg=SEVERITY_COLORS[item.severity])
                + f" {item.rule_id} - {item.description}"
            )
    return "\n".join(lines)


def render_json(payload: dict[str, Any]) -> str:
    """Render stable JSON output for CI and automation."""
    return json.dumps(payload, sort_keys=True)


def build_scan_payload(scan: ProjectScan, *, target: str) -> dict[str, Any]:
    """Build stable JSON payload for a project scan."""
    aggregate = scan.aggregate
    return {
        "score": scan.score,
        "grade": scan.grade,
        "passed": scan.passed,
        "stacks": list(scan.stacks),
        "summary": _serialize_counts(aggregate),
        "selection": {
            "total_candidates": scan.selection.total_candidates,
            "max_files": scan.selection.max_files,
            "truncated": scan.selection.truncated,
        },
        "findings": [_serialize_finding(item) for item in aggregate.findings],
        "meta": build_meta(target),
    }


def build_hook_payload(aggregate: ScanAggregate, *, target: str) -> dict[str, Any]:
    return {
        "passed": aggregate.critical == 0,
        "summary": _serialize_counts(aggregate),
        "findings": [_serialize_finding(item) for item in aggregate.findings],
        "meta": build_meta(target),
    }


def build_hotspots_payload(hotspots: list[Hotspot], *, target: str) -> dict[str, Any]:
    return {
        "hotspots": [item.to_dict() for item in hotspots],
        "meta": build_meta(target),
    }


def build_budget_payload(result: BudgetResult, *, target: str) -> dict[str, Any]:
    return {
        "passed": result.passed,
        "score": result.scan.score,
        "grade": result.scan.grade,
        "budgets": result.budgets.to_dict(),
        "checks": [check.to_dict() for check in result.checks],
        "summary": _serialize_counts(result.scan.aggregate),
        "meta": build_meta(target),
    }


def build_trend_payload(result: TrendResult, *, target: str) -> dict[str, Any]:
    payload = result.to_dict()
    payload["meta"] = build_meta(target)
    return payload


def build_rules_payload(infos: list[RuleSetInfo], *, stack: str | None) -> dict[str, Any]:
    return {
        "rule_sets": [
            {
                "name": info.name,
                "title": info.title,
                "stacks": list(info.stacks),
                "universal": info.universal,
                "rules": [
                    {
                        "rule_id": item.rule_id,
                        "severity": item.severity,
                        "description": item.description,
                        "remediation": item.remediation,
                        "multiline": item.multiline,
                    }
                    for item in get_rule_set(info.name).rules
                ],
            }
            for info in infos
        ],
        "meta": {"stack": stack, "version": __version__},
    }


def build_meta(target: str) -> dict[str, Any]:
    return {
        "generated_at": datetime.now(tz=UTC)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z"),
        "target": target,
        "version": __version__,
    }


def score_color(score: int) -> str:
    if score >= 90:
        return "green"
    if score >= 70:
        return "yellow"
    return "red"


def _severity_counts_line(aggregate: ScanAggregate) -> str:
    parts = [
        click.style(f"{aggregate.count(name)} {name}", fg=color)
        for name, color in SEVERITY_COLORS.items()
    ]
    return f"Issues: {aggregate.total_issues} (" + ", ".join(parts) + ")"


def _finding_lines(findings: list[Finding]) -> list[str]:
    lines: list[str] = []
    for finding in findings:
        label = click.style(
            finding.severity.upper(), fg=SEVERITY_COLORS[finding.severity], bold=True
        )
        lines.append(f"[{label}] {finding.path}:{finding.line} {finding.rule_id}")
        lines.append(f"   {finding.description}")
        lines.append(f"   fix: {finding.remediation}")
        if finding.matched_text:
            lines.append(f"   code: {finding.matched_text}")
    return lines


def _serialize_counts(aggregate: ScanAggregate) -> dict[str, int]:
    return {
        "files_scanned": aggregate.files_scanned,
        "total_issues": aggregate.total_issues,
        "critical": aggregate.critical,
        "high": aggregate.high,
        "medium": aggregate.medium,
        "low": aggregate.low,
    }


def _serialize_finding(finding: Finding) -> dict[str, Any]:
    return {
        "path": finding.path,
        "line": finding.line,
        "rule_id": finding.rule_id,
        "severity": finding.severity,
        "description": finding.description,
        "remediation": finding.remediation,
        "matched_text": finding.matched_text,
    }
