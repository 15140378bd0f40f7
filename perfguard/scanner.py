"""Scan core: evaluate catalog rules against source files."""

from __future__ import annotations

import logging
from bisect import bisect_right
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from perfguard.catalog import Rule, Severity, rule_sets_for_stack
from perfguard.scoring import SEVERITY_WEIGHTS, is_passing, score_aggregate
from perfguard.selector import FileSelection, finding_path, select_source_files
from perfguard.stack import detect_file_stack, detect_project_stack

logger = logging.getLogger(__name__)

MAX_MATCH_LENGTH = 120
BINARY_SNIFF_BYTES = 8192


@dataclass(slots=True)
class Finding:
    """One rule match on one line of a source file."""

    path: str
    line: int
    rule_id: str
    severity: Severity
    description: str
    remediation: str
    matched_text: str


@dataclass(slots=True)
class ScanAggregate:
    """Running tally of findings for a single top-level operation."""

    files_scanned: int = 0
    total_issues: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    findings: list[Finding] = field(default_factory=list)

    def record(self, finding: Finding) -> None:
        self.findings.append(finding)
        self.total_issues += 1
        if finding.severity == "critical":
            self.critical += 1
        elif finding.severity == "high":
            self.high += 1
        elif finding.severity == "medium":
            self.medium += 1
        else:
            self.low += 1

    def merge(self, other: ScanAggregate) -> None:
        """Fold another aggregate (typically one file's delta) into this one."""
        self.files_scanned += other.files_scanned
        self.total_issues += other.total_issues
        self.critical += other.critical
        self.high += other.high
        self.medium += other.medium
        self.low += other.low
        self.findings.extend(other.findings)

    def count(self, severity: str) -> int:
        return int(getattr(self, severity))

    def weighted_total(self) -> int:
        return sum(self.count(name) * weight for name, weight in SEVERITY_WEIGHTS.items())


@dataclass(slots=True)
class ProjectScan:
    """Result of a full project scan."""

    root: Path
    stacks: list[str]
    selection: FileSelection
    aggregate: ScanAggregate
    score: int
    grade: str

    @property
    def passed(self) -> bool:
        return is_passing(self.score, self.aggregate.critical)


def scan_file(
    path: Path,
    stack: str | None = None,
    *,
    display_path: str | None = None,
) -> ScanAggregate:
    """Scan one file and return its aggregate delta.

    Files that vanished before reading or look binary produce an empty
    aggregate that does not count as scanned.
    """
    delta = ScanAggregate()
    text = _read_source(path)
    if text is None:
        return delta

    resolved_stack = stack or detect_file_stack(path)
    shown_path = display_path if display_path is not None else str(path)
    lines = text.split("\n")
    for rule_set in rule_sets_for_stack(resolved_stack):
        for rule in rule_set.rules:
            for line_number in _matching_lines(rule, text, lines):
                delta.record(
                    Finding(
                        path=shown_path,
                        line=line_number,
                        rule_id=rule.rule_id,
                        severity=rule.severity,
                        description=rule.description,
                        remediation=rule.remediation,
                        matched_text=clip_match(lines[line_number - 1]),
                    )
                )

    delta.files_scanned = 1
    logger.debug("Scanned %s (%s): %d findings", shown_path, resolved_stack, delta.total_issues)
    return delta


def scan_files(paths: Iterable[Path], *, root: Path | None = None) -> ScanAggregate:
    """Scan files in order, merging each per-file delta into a fresh aggregate."""
    aggregate = ScanAggregate()
    for path in paths:
        shown = finding_path(path, root) if root is not None else str(path)
        aggregate.merge(scan_file(path, detect_file_stack(path), display_path=shown))
    return aggregate


def scan_project(
    root: Path,
    max_files: int = 0,
    *,
    extra_excludes: Iterable[str] = (),
) -> ProjectScan:
    """Select, scan and score a project (or a single file)."""
    excludes = tuple(extra_excludes)
    stacks = detect_project_stack(root, extra_excludes=excludes)
    selection = select_source_files(root, max_files, extra_excludes=excludes)
    aggregate = scan_files(selection.files, root=root)
    score, grade = score_aggregate(aggregate)
    logger.debug(
        "Project scan of %s: %d files, %d issues, score %d",
        root,
        aggregate.files_scanned,
        aggregate.total_issues,
        score,
    )
    return ProjectScan(
        root=root,
        stacks=stacks,
        selection=selection,
        aggregate=aggregate,
        score=score,
        grade=grade,
    )


def clip_match(content: str, max_len: int = MAX_MATCH_LENGTH) -> str:
    stripped = content.strip()
    if len(stripped) <= max_len:
        return stripped
    return stripped[:max_len] + "..."


def _matching_lines(rule: Rule, text: str, lines: list[str]) -> list[int]:
    if not rule.multiline:
        return [index for index, line in enumerate(lines, start=1) if rule.regex.search(line)]

    # Matches may overlap: a span ending on line N+1 must not hide one starting there.
    line_starts = [0]
    for line in lines[:-1]:
        line_starts.append(line_starts[-1] + len(line) + 1)

    line_numbers: list[int] = []
    index = 0
    while index < len(line_starts):
        match = rule.regex.search(text, line_starts[index])
        if match is None:
            break
        line_number = bisect_right(line_starts, match.start())
        line_numbers.append(line_number)
        index = line_number
    return line_numbers


def _read_source(path: Path) -> str | None:
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        logger.debug("Skipping %s: file disappeared before scanning", path)
        return None
    except OSError as exc:
        logger.warning("Skipping unreadable file %s: %s", path, exc)
        return None

    if b"\x00" in raw[:BINARY_SNIFF_BYTES]:
        logger.debug("Skipping %s: binary content", path)
        return None
    return raw.decode("utf-8", errors="replace")
