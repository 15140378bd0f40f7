"""Rank individual files by severity-weighted findings."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from perfguard.scanner import scan_file
from perfguard.selector import finding_path, select_source_files
from perfguard.stack import detect_file_stack

DEFAULT_HOTSPOT_LIMIT = 10


@dataclass(slots=True)
class Hotspot:
    rank: int
    weight: int
    critical: int
    high: int
    medium: int
    low: int
    total: int
    path: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def find_hotspots(
    root: Path,
    *,
    limit: int = DEFAULT_HOTSPOT_LIMIT,
    extra_excludes: Iterable[str] = (),
) -> list[Hotspot]:
    """Return the ``limit`` heaviest files, heaviest first.

    Each file is scanned in isolation so one file's weight never includes
    another's findings. Files without findings are not ranked.
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")

    selection = select_source_files(root, 0, extra_excludes=extra_excludes)
    ranked: list[Hotspot] = []
    for path in selection.files:
        shown = finding_path(path, root)
        delta = scan_file(path, detect_file_stack(path), display_path=shown)
        if delta.total_issues == 0:
            continue
        ranked.append(
            Hotspot(
                rank=0,
                weight=delta.weighted_total(),
                critical=delta.critical,
                high=delta.high,
                medium=delta.medium,
                low=delta.low,
                total=delta.total_issues,
                path=shown,
            )
        )

    ranked.sort(key=lambda item: (-item.weight, item.path))
    top = ranked[:limit]
    for index, hotspot in enumerate(top, start=1):
        hotspot.rank = index
    return top
