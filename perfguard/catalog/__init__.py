"""Detection catalog: rule-sets and stack profiles."""

from dataclasses import dataclass

from perfguard.catalog import database, general, javascript, python
from perfguard.catalog.base import SEVERITIES, Rule, RuleSet, Severity

__all__ = [
    "SEVERITIES",
    "STACK_PROFILES",
    "STACKS",
    "UNIVERSAL_RULE_SETS",
    "Rule",
    "RuleSet",
    "RuleSetInfo",
    "Severity",
    "all_rule_sets",
    "get_rule",
    "get_rule_set",
    "list_rule_set_info",
    "rule_sets_for_stack",
]

STACKS = ("python", "javascript", "ruby", "java")

_DATABASE_CORE = (
    "db_nplus1",
    "db_select_star",
    "db_eager_loading",
    "db_unbounded",
    "db_sql_concat",
)

STACK_PROFILES: dict[str, tuple[str, ...]] = {
    "python": (
        *_DATABASE_CORE,
        "db_sequential",
        "py_import",
        "py_string",
        "py_generator",
        "py_async",
        "py_connection",
        "py_regex",
    ),
    "javascript": (
        *_DATABASE_CORE,
        "js_async",
        "js_promise",
        "js_sync_io",
        "js_serialization",
        "js_array",
        "js_memory",
        "js_react",
        "js_pagination",
        "js_console",
    ),
    "ruby": _DATABASE_CORE,
    "java": _DATABASE_CORE,
}

UNIVERSAL_RULE_SETS: tuple[str, ...] = tuple(item.name for item in general.RULE_SETS)


@dataclass(frozen=True, slots=True)
class RuleSetInfo:
    """Rule-set metadata for listing."""

    name: str
    title: str
    rule_count: int
    stacks: tuple[str, ...]
    universal: bool


def _build_registry() -> dict[str, RuleSet]:
    registry: dict[str, RuleSet] = {}
    seen_rule_ids: set[str] = set()
    for module in (database, javascript, python, general):
        for rule_set in module.RULE_SETS:
            if rule_set.name in registry:
                raise ValueError(f"Duplicate rule-set name: {rule_set.name}")
            for item in rule_set.rules:
                if item.rule_id in seen_rule_ids:
                    raise ValueError(f"Duplicate rule id: {item.rule_id}")
                seen_rule_ids.add(item.rule_id)
            registry[rule_set.name] = rule_set
    return registry


_REGISTRY = _build_registry()
_RULES_BY_ID = {item.rule_id: item for rule_set in _REGISTRY.values() for item in rule_set.rules}


def all_rule_sets() -> list[RuleSet]:
    """Return every rule-set in catalog order."""
    return list(_REGISTRY.values())


def get_rule_set(name: str) -> RuleSet:
    """Look up a rule-set by name."""
    try:
        return _REGISTRY[name]
    except KeyError:
        raise ValueError(f"Unknown rule-set: {name}") from None


def get_rule(rule_id: str) -> Rule:
    """Look up a rule by id."""
    try:
        return _RULES_BY_ID[rule_id]
    except KeyError:
        raise ValueError(f"Unknown rule id: {rule_id}") from None


def rule_sets_for_stack(stack: str) -> list[RuleSet]:
    """Resolve stack-specific rule-sets followed by the universal ones.

    Stacks without a profile (including ``unknown``) get only the universal
    rule-sets.
    """
    names = [*STACK_PROFILES.get(stack, ()), *UNIVERSAL_RULE_SETS]
    return [_REGISTRY[name] for name in names]


def list_rule_set_info(stack: str | None = None) -> list[RuleSetInfo]:
    """Describe rule-sets, optionally limited to those applied to ``stack``."""
    selected = rule_sets_for_stack(stack) if stack is not None else all_rule_sets()
    infos: list[RuleSetInfo] = []
    for rule_set in selected:
        infos.append(
            RuleSetInfo(
                name=rule_set.name,
                title=rule_set.title,
                rule_count=len(rule_set.rules),
                stacks=tuple(
                    name for name in STACKS if rule_set.name in STACK_PROFILES.get(name, ())
                ),
                universal=rule_set.name in UNIVERSAL_RULE_SETS,
            )
        )
    return infos
