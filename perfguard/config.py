"""Configuration loading for perfguard."""

from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".perfguard.toml", "perfguard.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("perfguard",)

OPENCLAW_CONFIG_PATH = Path("~/.openclaw/openclaw.json")
OPENCLAW_BUDGET_KEYS = {
    "max_critical": "maxCritical",
    "max_total": "maxTotal",
    "min_score": "minScore",
}

MAX_TREND_DEPTH = 10


@dataclass(slots=True)
class BudgetConfig:
    """Quality-gate thresholds for the budget command."""

    max_critical: int = 0
    max_total: int = 20
    min_score: int = 70

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_critical": self.max_critical,
            "max_total": self.max_total,
            "min_score": self.min_score,
        }


@dataclass(slots=True)
class TrendConfig:
    """History-walk controls."""

    depth: int = MAX_TREND_DEPTH

    def to_dict(self) -> dict[str, Any]:
        return {"depth": self.depth}


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    max_files: int = 0
    exclude: list[str] = field(default_factory=list)
    budgets: BudgetConfig = field(default_factory=BudgetConfig)
    trend: TrendConfig = field(default_factory=TrendConfig)
    source: str | None = None
    budget_source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "max_files": self.max_files,
            "exclude": list(self.exclude),
            "budgets": self.budgets.to_dict(),
            "trend": self.trend.to_dict(),
            "source": self.source,
            "budget_source": self.budget_source,
        }


def load_app_config(
    repo: Path,
    config_path: Path | None = None,
    *,
    openclaw_path: Path | None = None,
) -> AppConfig:
    """Load config from explicit path or repository-local files with precedence.

    Budget keys missing from the TOML config fall back to the OpenClaw skill
    config (``~/.openclaw/openclaw.json`` unless ``openclaw_path`` is given).
    """
    repo = repo.resolve()
    mapping: dict[str, Any] = {}
    source: str | None = None

    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (repo / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        source = str(resolved)
    else:
        for filename in CONFIG_FILENAMES:
            resolved = repo / filename
            if resolved.exists():
                mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
                source = str(resolved)
                break
        else:
            pyproject_path = repo / PYPROJECT_FILENAME
            if pyproject_path.exists():
                mapping = _extract_config_mapping(
                    _load_toml(pyproject_path), source_path=pyproject_path
                )
                if mapping:
                    source = str(pyproject_path)

    config = _from_mapping(mapping, source=source)
    _apply_openclaw_budgets(
        config,
        configured=set(_as_table(mapping.get("budgets"), "budgets")),
        openclaw_path=openclaw_path or OPENCLAW_CONFIG_PATH.expanduser(),
    )
    return config


def default_config_template() -> str:
    """Return a starter config template."""
    return "\n".join(
        [
            'format = "human"',
            "# 0 scans every source file; a positive value keeps only the most relevant ones.",
            "max_files = 0",
            'exclude = ["fixtures", "generated"]',
            "",
            "[budgets]",
            "max_critical = 0",
            "max_total = 20",
            "min_score = 70",
            "",
            "[trend]",
            "depth = 10",
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str | None) -> AppConfig:
    budgets_mapping = _as_table(mapping.get("budgets"), "budgets")
    trend_mapping = _as_table(mapping.get("trend"), "trend")

    raw_format = mapping.get("format", "human")
    format_value = str(raw_format).lower()
    if format_value not in {"human", "json"}:
        format_value = "human"

    max_files = _as_non_negative_int(mapping.get("max_files", 0), "max_files")

    return AppConfig(
        format=format_value,
        max_files=max_files,
        exclude=_as_str_list(mapping.get("exclude")),
        budgets=_parse_budget_config(budgets_mapping),
        trend=_parse_trend_config(trend_mapping),
        source=source,
        budget_source=source if budgets_mapping else None,
    )


def _parse_budget_config(value: dict[str, Any]) -> BudgetConfig:
    defaults = BudgetConfig()
    min_score = _as_non_negative_int(
        value.get("min_score", defaults.min_score), "budgets.min_score"
    )
    if min_score > 100:
        raise ValueError("budgets.min_score must be <= 100")
    return BudgetConfig(
        max_critical=_as_non_negative_int(
            value.get("max_critical", defaults.max_critical), "budgets.max_critical"
        ),
        max_total=_as_non_negative_int(
            value.get("max_total", defaults.max_total), "budgets.max_total"
        ),
        min_score=min_score,
    )


def _parse_trend_config(value: dict[str, Any]) -> TrendConfig:
    depth = _as_int(value.get("depth", MAX_TREND_DEPTH), "trend.depth")
    if not 1 <= depth <= MAX_TREND_DEPTH:
        raise ValueError(f"trend.depth must be between 1 and {MAX_TREND_DEPTH}")
    return TrendConfig(depth=depth)


def _apply_openclaw_budgets(
    config: AppConfig,
    *,
    configured: set[str],
    openclaw_path: Path,
) -> None:
    missing = [key for key in OPENCLAW_BUDGET_KEYS if key not in configured]
    if not missing or not openclaw_path.is_file():
        return

    try:
        loaded = json.loads(openclaw_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable OpenClaw config %s: %s", openclaw_path, exc)
        return

    budgets = _dig(loaded, ("skills", "entries", "perfguard", "config", "budgets"))
    if not isinstance(budgets, dict):
        return

    applied = False
    for key in missing:
        raw = budgets.get(OPENCLAW_BUDGET_KEYS[key])
        if raw is None or raw == "":
            continue
        try:
            value = _as_non_negative_int(raw, f"openclaw budgets.{OPENCLAW_BUDGET_KEYS[key]}")
        except ValueError as exc:
            logger.warning("Ignoring OpenClaw budget value: %s", exc)
            continue
        setattr(config.budgets, key, value)
        applied = True

    if applied:
        config.budget_source = str(openclaw_path)


def _dig(value: Any, keys: tuple[str, ...]) -> Any:
    current = value
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("Expected a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError("Expected a list of strings")
        items.append(item)
    return items


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw


def _as_non_negative_int(raw: Any, field_name: str) -> int:
    value = _as_int(raw, field_name)
    if value < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return value
