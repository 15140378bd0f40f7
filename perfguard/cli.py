"""CLI entrypoint for perfguard."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Annotated

import typer

from perfguard import __version__
from perfguard.budget import evaluate_budget
from perfguard.catalog import STACKS, list_rule_set_info
from perfguard.config import AppConfig, default_config_template, load_app_config
from perfguard.git import DirtyWorkingTreeError, GitError, find_repo_root
from perfguard.hooks import install_hook, scan_staged, uninstall_hook
from perfguard.hotspots import DEFAULT_HOTSPOT_LIMIT, find_hotspots
from perfguard.output import (
    build_budget_payload,
    build_hook_payload,
    build_hotspots_payload,
    build_rules_payload,
    build_scan_payload,
    build_trend_payload,
    render_budget_human,
    render_hook_human,
    render_hotspots_human,
    render_json,
    render_rules_human,
    render_scan_human,
    render_trend_human,
)
from perfguard.report import REPORT_FILENAME, load_template, render_report
from perfguard.scanner import ProjectScan, scan_project
from perfguard.selector import TargetNotFoundError
from perfguard.stack import UNKNOWN_STACK
from perfguard.trend import MAX_TREND_DEPTH, walk_trend

app = typer.Typer(
    name="perfguard",
    no_args_is_help=True,
    help="Scan source code for performance anti-patterns and score the result.",
)
hooks_app = typer.Typer(no_args_is_help=True, help="Manage the git pre-commit hook.")
app.add_typer(hooks_app, name="hooks")

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

TargetArg = Annotated[Path, typer.Argument(help="Directory or file to scan.")]
FormatOption = Annotated[
    str | None, typer.Option(help="Output format: human|json.", show_default="human")
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to config TOML file."),
]
RepoOption = Annotated[Path, typer.Option(help="Repository path.")]


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log debug details to stderr.")
    ] = False,
) -> None:
    """Root command callback."""
    _ = version
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


@app.command("scan")
def scan_command(
    target: TargetArg = Path("."),
    max_files: Annotated[
        int | None,
        typer.Option("--max-files", help="Scan only the N most relevant files (0 = all)."),
    ] = None,
    format: FormatOption = None,
    config_file: ConfigOption = None,
) -> None:
    """Scan a project and exit nonzero on a failing score or any critical finding."""
    app_config = _load_config_or_raise(target, config_file)
    output_format = _resolve_format(format, app_config)
    cap = max_files if max_files is not None else app_config.max_files
    if cap < 0:
        raise typer.BadParameter("max-files must be >= 0", param_hint="--max-files")

    scan = _scan_or_raise(target, cap, app_config)
    if output_format == "json":
        typer.echo(render_json(build_scan_payload(scan, target=str(target))))
    else:
        typer.echo(render_scan_human(scan))

    if not scan.passed:
        raise typer.Exit(code=1)


@app.command("report")
def report_command(
    target: TargetArg = Path("."),
    out: Annotated[Path, typer.Option(help="Output path for the markdown report.")] = Path(
        REPORT_FILENAME
    ),
    template: Annotated[
        Path | None,
        typer.Option(help="Custom report template with {{PLACEHOLDER}} tokens."),
    ] = None,
    config_file: ConfigOption = None,
) -> None:
    """Write a markdown performance audit report."""
    app_config = _load_config_or_raise(target, config_file)
    template_text: str | None = None
    if template is not None:
        try:
            template_text = load_template(template)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--template") from exc

    scan = _scan_or_raise(target, 0, app_config)
    content = render_report(
        scan,
        project_name=target.resolve().name,
        generated_on=date.today().isoformat(),
        version=__version__,
        template=template_text,
    )
    out_path = out.resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(content, encoding="utf-8")

    aggregate = scan.aggregate
    typer.echo(f"Report generated: {out_path}")
    typer.echo(f"  Score: {scan.score}/100 ({scan.grade})")
    typer.echo(
        f"  Issues: {aggregate.total_issues} ({aggregate.critical} critical, "
        f"{aggregate.high} high, {aggregate.medium} medium, {aggregate.low} low)"
    )


@app.command("hotspots")
def hotspots_command(
    target: TargetArg = Path("."),
    limit: Annotated[int, typer.Option(help="Number of files to list.")] = DEFAULT_HOTSPOT_LIMIT,
    format: FormatOption = None,
    config_file: ConfigOption = None,
) -> None:
    """List the files with the heaviest severity-weighted findings."""
    app_config = _load_config_or_raise(target, config_file)
    output_format = _resolve_format(format, app_config)
    if limit < 1:
        raise typer.BadParameter("limit must be >= 1", param_hint="--limit")

    try:
        hotspots = find_hotspots(target, limit=limit, extra_excludes=app_config.exclude)
    except TargetNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="target") from exc

    if output_format == "json":
        typer.echo(render_json(build_hotspots_payload(hotspots, target=str(target))))
    else:
        typer.echo(render_hotspots_human(hotspots))


@app.command("budget")
def budget_command(
    target: TargetArg = Path("."),
    max_critical: Annotated[
        int | None, typer.Option("--max-critical", help="Allowed critical findings.")
    ] = None,
    max_total: Annotated[
        int | None, typer.Option("--max-total", help="Allowed findings overall.")
    ] = None,
    min_score: Annotated[
        int | None, typer.Option("--min-score", help="Lowest acceptable score.")
    ] = None,
    format: FormatOption = None,
    config_file: ConfigOption = None,
) -> None:
    """Check the project against performance budgets; exit nonzero when exceeded."""
    app_config = _load_config_or_raise(target, config_file)
    output_format = _resolve_format(format, app_config)

    overrides = {
        "max_critical": max_critical,
        "max_total": max_total,
        "min_score": min_score,
    }
    for name, value in overrides.items():
        if value is not None and value < 0:
            hint = "--" + name.replace("_", "-")
            raise typer.BadParameter(f"{hint} must be >= 0", param_hint=hint)
    budgets = replace(
        app_config.budgets,
        **{name: value for name, value in overrides.items() if value is not None},
    )

    try:
        result = evaluate_budget(target, budgets, extra_excludes=app_config.exclude)
    except TargetNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="target") from exc

    if output_format == "json":
        typer.echo(render_json(build_budget_payload(result, target=str(target))))
    else:
        typer.echo(render_budget_human(result))

    if not result.passed:
        raise typer.Exit(code=1)


@app.command("trend")
def trend_command(
    target: TargetArg = Path("."),
    depth: Annotated[
        int | None,
        typer.Option(help=f"Number of recent commits to score (1-{MAX_TREND_DEPTH})."),
    ] = None,
    format: FormatOption = None,
    config_file: ConfigOption = None,
) -> None:
    """Score the project at each of the most recent commits."""
    app_config = _load_config_or_raise(target, config_file)
    output_format = _resolve_format(format, app_config)
    resolved_depth = depth if depth is not None else app_config.trend.depth
    if not 1 <= resolved_depth <= MAX_TREND_DEPTH:
        raise typer.BadParameter(
            f"depth must be between 1 and {MAX_TREND_DEPTH}", param_hint="--depth"
        )
    if not target.exists():
        raise typer.BadParameter(f"Target not found: {target}", param_hint="target")

    try:
        result = walk_trend(target, limit=resolved_depth, extra_excludes=app_config.exclude)
    except DirtyWorkingTreeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except GitError as exc:
        typer.echo(f"Error: git failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if output_format == "json":
        typer.echo(render_json(build_trend_payload(result, target=str(target))))
    else:
        typer.echo(render_trend_human(result))

    if not result.restored:
        raise typer.Exit(code=1)


@app.command("hook")
def hook_command(
    repo: RepoOption = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Scan staged files; exit nonzero only on critical findings."""
    output_format = _validate_format(format)
    repo_root = _repo_root_or_raise(repo)
    try:
        aggregate = scan_staged(repo_root)
    except GitError as exc:
        raise typer.BadParameter(str(exc), param_hint="--repo") from exc

    if output_format == "json":
        typer.echo(render_json(build_hook_payload(aggregate, target=str(repo_root))))
    else:
        typer.echo(render_hook_human(aggregate))

    if aggregate.critical:
        raise typer.Exit(code=1)


@hooks_app.command("install")
def hooks_install_command(repo: RepoOption = Path(".")) -> None:
    """Add perfguard to the repository's pre-commit hook."""
    repo_root = _repo_root_or_raise(repo)
    try:
        action = install_hook(repo_root)
    except GitError as exc:
        raise typer.BadParameter(str(exc), param_hint="--repo") from exc

    if action.changed:
        typer.echo(f"Installed pre-commit hook: {action.path} ({action.action})")
    else:
        typer.echo(f"Hook already configured: {action.path}")


@hooks_app.command("uninstall")
def hooks_uninstall_command(repo: RepoOption = Path(".")) -> None:
    """Remove perfguard from the repository's pre-commit hook."""
    repo_root = _repo_root_or_raise(repo)
    try:
        action = uninstall_hook(repo_root)
    except GitError as exc:
        raise typer.BadParameter(str(exc), param_hint="--repo") from exc

    if action.changed:
        typer.echo(f"Removed perfguard from pre-commit hook: {action.path} ({action.action})")
    else:
        typer.echo("No perfguard hook installed.")


@app.command("rules")
def rules_command(
    stack: Annotated[
        str | None,
        typer.Option(help="Only rule-sets applied to this stack."),
    ] = None,
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """List detection rule-sets and their rules."""
    output_format = _validate_format(format)
    if stack is not None:
        stack = stack.lower()
        allowed = (*STACKS, UNKNOWN_STACK)
        if stack not in allowed:
            choices = ", ".join(allowed)
            raise typer.BadParameter(f"stack must be one of: {choices}", param_hint="--stack")

    infos = list_rule_set_info(stack)
    if output_format == "json":
        typer.echo(render_json(build_rules_payload(infos, stack=stack)))
        return
    typer.echo(render_rules_human(infos))


@app.command("config")
def config_command(
    repo: RepoOption = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: ConfigOption = None,
) -> None:
    """Show resolved configuration."""
    output_format = _validate_format(format)
    app_config = _load_config_or_raise(repo, config_file)
    payload = app_config.to_dict()

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- max_files: {payload['max_files']}",
        f"- exclude: {payload['exclude']}",
        f"- budgets.max_critical: {payload['budgets']['max_critical']}",
        f"- budgets.max_total: {payload['budgets']['max_total']}",
        f"- budgets.min_score: {payload['budgets']['min_score']}",
        f"- budgets source: {payload['budget_source'] or 'defaults'}",
        f"- trend.depth: {payload['trend']['depth']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".perfguard.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter repository config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


def main() -> None:
    """Console script entrypoint."""
    app()


def _load_config_or_raise(target: Path, config_file: Path | None = None) -> AppConfig:
    config_root = target if target.is_dir() else target.parent
    try:
        return load_app_config(config_root, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _scan_or_raise(target: Path, max_files: int, app_config: AppConfig) -> ProjectScan:
    try:
        return scan_project(target, max_files, extra_excludes=app_config.exclude)
    except TargetNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="target") from exc


def _repo_root_or_raise(repo: Path) -> Path:
    repo_root = find_repo_root(repo.resolve())
    if repo_root is None:
        raise typer.BadParameter(f"Not a git repository: {repo}", param_hint="--repo")
    return repo_root


def _resolve_format(value: str | None, app_config: AppConfig) -> str:
    return _validate_format(value or app_config.format)


def _validate_format(value: str) -> str:
    output_format = value.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    return output_format
