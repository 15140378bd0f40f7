from __future__ import annotations

from pathlib import Path

from perfguard.report import render_recommendations, render_report
from perfguard.scanner import scan_project


def _touch(root: Path, rel_path: str, content: str) -> None:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_clean_report(tmp_path: Path) -> None:
    _touch(tmp_path, "app.rb", "puts 'ok'\n")
    scan = scan_project(tmp_path)

    report = render_report(scan, project_name="demo", generated_on="2026-01-02", version="9.9.9")

    assert "**Project:** demo" in report
    assert "**Date:** 2026-01-02" in report
    assert "**Score:** 100/100 (A)" in report
    assert "| Files scanned | 1 |" in report
    assert "**Stack:** ruby" in report
    assert "No performance anti-patterns found." in report
    assert "No recommendations -- your code looks performant!" in report
    assert "Generated by PerfGuard v9.9.9" in report
    assert "{{" not in report


def test_findings_render_as_markdown_blocks(tmp_path: Path) -> None:
    _touch(tmp_path, "app.py", "for x in Model.objects.all(): x.save()\n    x.save()\n")
    scan = scan_project(tmp_path)

    report = render_report(scan, project_name="demo", generated_on="2026-01-02", version="1.0.0")

    assert "### CRITICAL: DB_NPLUS1_LOOP_QUERY" in report
    assert "- **File:** `app.py:1`" in report
    assert "- **Severity:** medium" in report
    assert "- **Code:** `for x in Model.objects.all(): x.save()`" in report
    assert "- **URGENT:** Fix 2 critical issue(s) immediately" in report
    assert "- Address 1 medium-severity issue(s) in upcoming sprint" in report


def test_custom_template_keeps_unknown_tokens(tmp_path: Path) -> None:
    scan = scan_project(tmp_path)

    report = render_report(
        scan,
        project_name="demo",
        generated_on="2026-01-02",
        version="1.0.0",
        template="{{PROJECT}}|{{PERF_SCORE}}|{{GRADE}}|{{TOTAL_ISSUES}}|{{OTHER}}",
    )

    assert report == "demo|100|A|0|{{OTHER}}"


def test_recommendations_only_for_nonzero_buckets() -> None:
    text = render_recommendations(0, 2, 0, 1)

    assert text.splitlines() == [
        "- Fix 2 high-severity issue(s) before next deployment",
        "- Review 1 low-severity finding(s) for best practices",
    ]
