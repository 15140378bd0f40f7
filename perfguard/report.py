"""Markdown performance audit report."""

from __future__ import annotations

from pathlib import Path

from perfguard.scanner import Finding, ProjectScan

REPORT_FILENAME = "PERFGUARD-REPORT.md"
CLEAN_FINDINGS = "No performance anti-patterns found."
CLEAN_RECOMMENDATIONS = "No recommendations -- your code looks performant!"

DEFAULT_TEMPLATE = """\
# PerfGuard Performance Audit Report

**Project:** {{PROJECT}}
**Date:** {{DATE}}
**Stack:** {{STACK}}

## Summary

**Score:** {{PERF_SCORE}}/100 ({{GRADE}})

| Metric | Count |
| --- | --- |
| Files scanned | {{FILES_SCANNED}} |
| Total issues | {{TOTAL_ISSUES}} |
| Critical | {{CRITICAL_COUNT}} |
| High | {{HIGH_COUNT}} |
| Medium | {{MEDIUM_COUNT}} |
| Low | {{LOW_COUNT}} |

## Findings

{{FINDINGS}}

## Recommendations

{{RECOMMENDATIONS}}

---
Generated by PerfGuard v{{VERSION}}
"""


def render_report(
    scan: ProjectScan,
    *,
    project_name: str,
    generated_on: str,
    version: str,
    template: str | None = None,
) -> str:
    """Fill ``{{PLACEHOLDER}}`` tokens in the report template."""
    aggregate = scan.aggregate
    values = {
        "DATE": generated_on,
        "PROJECT": project_name,
        "PERF_SCORE": str(scan.score),
        "GRADE": scan.grade,
        "FILES_SCANNED": str(aggregate.files_scanned),
        "TOTAL_ISSUES": str(aggregate.total_issues),
        "CRITICAL_COUNT": str(aggregate.critical),
        "HIGH_COUNT": str(aggregate.high),
        "MEDIUM_COUNT": str(aggregate.medium),
        "LOW_COUNT": str(aggregate.low),
        "STACK": " ".join(scan.stacks),
        "FINDINGS": render_findings(aggregate.findings),
        "RECOMMENDATIONS": render_recommendations(
            aggregate.critical, aggregate.high, aggregate.medium, aggregate.low
        ),
        "VERSION": version,
    }

    content = DEFAULT_TEMPLATE if template is None else template
    for key, value in values.items():
        content = content.replace("{{" + key + "}}", value)
    return content


def render_findings(findings: list[Finding]) -> str:
    if not findings:
        return CLEAN_FINDINGS

    blocks: list[str] = []
    for finding in findings:
        lines = [
            f"### {finding.severity.upper()}: {finding.rule_id}",
            f"- **File:** `{finding.path}:{finding.line}`",
            f"- **Severity:** {finding.severity}",
            f"- **Description:** {finding.description}",
            f"- **Fix:** {finding.remediation}",
        ]
        if finding.matched_text:
            lines.append(f"- **Code:** `{finding.matched_text}`")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def render_recommendations(critical: int, high: int, medium: int, low: int) -> str:
    lines: list[str] = []
    if critical:
        lines.append(
            f"- **URGENT:** Fix {critical} critical issue(s) immediately -- "
            "these cause measurable latency"
        )
    if high:
        lines.append(f"- Fix {high} high-severity issue(s) before next deployment")
    if medium:
        lines.append(f"- Address {medium} medium-severity issue(s) in upcoming sprint")
    if low:
        lines.append(f"- Review {low} low-severity finding(s) for best practices")
    return "\n".join(lines) if lines else CLEAN_RECOMMENDATIONS


def load_template(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Could not read report template {path}: {exc}") from exc
