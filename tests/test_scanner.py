from __future__ import annotations

from pathlib import Path

from perfguard.scanner import (
    MAX_MATCH_LENGTH,
    ScanAggregate,
    clip_match,
    scan_file,
    scan_files,
    scan_project,
)

NPLUS1_WITH_SAVES = "for x in Model.objects.all(): x.save()\n    x.save()\n"


def _touch(root: Path, rel_path: str, content: str) -> Path:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _rule_ids(aggregate: ScanAggregate) -> set[str]:
    return {finding.rule_id for finding in aggregate.findings}


def test_nplus1_loop_with_sequential_saves(tmp_path: Path) -> None:
    _touch(tmp_path, "app/views.py", NPLUS1_WITH_SAVES)

    scan = scan_project(tmp_path)
    aggregate = scan.aggregate

    severities = {(finding.rule_id, finding.severity) for finding in aggregate.findings}
    assert ("DB_NPLUS1_LOOP_QUERY", "critical") in severities
    assert ("DB_SEQUENTIAL_SAVES", "medium") in severities
    assert aggregate.critical >= 1
    assert aggregate.medium >= 1
    assert aggregate.files_scanned == 1
    assert scan.score < 100
    assert not scan.passed


def test_multiline_finding_reports_starting_line(tmp_path: Path) -> None:
    path = _touch(tmp_path, "repo.py", "x = 1\nobj.save()\nother.save()\n")

    aggregate = scan_file(path)

    assert [(item.rule_id, item.line) for item in aggregate.findings] == [
        ("DB_SEQUENTIAL_SAVES", 2)
    ]
    assert aggregate.findings[0].matched_text == "obj.save()"


def test_overlapping_multiline_matches_each_report(tmp_path: Path) -> None:
    path = _touch(tmp_path, "batch.py", "a.save()\nb.save()\nc.save()\n")

    aggregate = scan_file(path)

    assert [item.line for item in aggregate.findings] == [1, 2]
    assert aggregate.medium == 2


def test_multiline_rules_only_join_adjacent_lines(tmp_path: Path) -> None:
    gapped = _touch(tmp_path, "gapped.py", "for x in y:\n\n\n    s += 'a'\n")
    adjacent = _touch(tmp_path, "adjacent.py", "for x in y:\n    s += 'a'\n")

    assert "PY_STRING_CONCAT_LOOP" not in _rule_ids(scan_file(gapped))
    assert [(item.rule_id, item.line) for item in scan_file(adjacent).findings] == [
        ("PY_STRING_CONCAT_LOOP", 1)
    ]


def test_single_line_rules_report_each_matching_line(tmp_path: Path) -> None:
    path = _touch(tmp_path, "orders.rb", "a = 1\nSELECT * FROM orders\nb = 2\nSELECT id FROM t\n")

    aggregate = scan_file(path)

    found = sorted((item.line, item.rule_id) for item in aggregate.findings)
    assert found == [
        (2, "DB_SELECT_STAR"),
        (2, "DB_UNBOUNDED_SELECT"),
        (4, "DB_UNBOUNDED_SELECT"),
    ]
    assert aggregate.high == 3
    assert aggregate.total_issues == 3


def test_select_with_limit_is_bounded(tmp_path: Path) -> None:
    path = _touch(tmp_path, "report.rb", "SELECT id FROM users LIMIT 10\n")

    assert "DB_UNBOUNDED_SELECT" not in _rule_ids(scan_file(path))


def test_unknown_stack_gets_only_universal_rules(tmp_path: Path) -> None:
    path = _touch(tmp_path, "job.txt", "SELECT * FROM users\ntime.sleep(5)\n")

    aggregate = scan_file(path, "unknown")

    assert _rule_ids(aggregate) == {"GEN_HARDCODED_SLEEP"}
    assert aggregate.low == 1


def test_per_file_aggregates_are_independent(tmp_path: Path) -> None:
    first = _touch(tmp_path, "a.py", NPLUS1_WITH_SAVES)
    second = _touch(tmp_path, "b.rb", "SELECT * FROM orders\n")

    combined = scan_files([first, second], root=tmp_path)
    reversed_order = scan_files([second, first], root=tmp_path)
    alone = [scan_file(first), scan_file(second)]

    assert combined.files_scanned == 2
    for name in ("critical", "high", "medium", "low"):
        expected = sum(item.count(name) for item in alone)
        assert combined.count(name) == expected
        assert reversed_order.count(name) == expected
    assert combined.total_issues == sum(item.total_issues for item in alone)
    assert {item.path for item in combined.findings} == {"a.py", "b.rb"}


def test_vanished_and_binary_files_are_not_counted(tmp_path: Path) -> None:
    binary = tmp_path / "blob.py"
    binary.write_bytes(b"SELECT * FROM t\x00\x01\x02")

    assert scan_file(binary).files_scanned == 0
    assert scan_file(tmp_path / "gone.py").files_scanned == 0


def test_empty_project_scores_perfect(tmp_path: Path) -> None:
    scan = scan_project(tmp_path)

    assert scan.aggregate.files_scanned == 0
    assert scan.score == 100
    assert scan.grade == "A"
    assert scan.stacks == ["unknown"]
    assert scan.passed


def test_project_findings_use_root_relative_paths(tmp_path: Path) -> None:
    _touch(tmp_path, "services/orders.rb", "SELECT * FROM orders\n")

    scan = scan_project(tmp_path)

    assert {item.path for item in scan.aggregate.findings} == {"services/orders.rb"}


def test_clip_match() -> None:
    assert clip_match("   foo  ") == "foo"
    long_line = "x" * (MAX_MATCH_LENGTH + 30)
    clipped = clip_match(long_line)
    assert clipped.endswith("...")
    assert len(clipped) == MAX_MATCH_LENGTH + 3


def test_aggregate_merge_and_weighted_total() -> None:
    left = ScanAggregate(files_scanned=1, total_issues=2, critical=1, low=1)
    right = ScanAggregate(files_scanned=2, total_issues=1, high=1)

    left.merge(right)

    assert left.files_scanned == 3
    assert left.total_issues == 3
    assert left.weighted_total() == 36
