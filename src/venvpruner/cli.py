"""CLI interface for venvpruner."""

from __future__ import annotations

import json
import logging
from typing import Any

import click

from venvpruner.core.engine import PrunerEngine, ScanReport
from venvpruner.core.locator import MAX_DEPTH
from venvpruner.core.search_paths import HomeDirectoryError
from venvpruner.models.environment import VirtualEnvironment
from venvpruner.settings import Settings
from venvpruner.utils import bytes_to_human, format_elapsed

log = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _positive_int(settings: Settings, key: str, fallback: int | None) -> int | None:
    value = settings.get(key, fallback)
    if value is None:
        return fallback
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        log.warning("Ignoring invalid setting %s=%r", key, value)
        return fallback
    return value


def _home_error(exc: HomeDirectoryError) -> click.ClickException:
    return click.ClickException(f"Failed to search for virtual environments: {exc}")


def _build_engine(max_depth: int | None) -> PrunerEngine:
    try:
        settings = Settings()
    except HomeDirectoryError as exc:
        raise _home_error(exc) from exc
    if max_depth is None:
        max_depth = _positive_int(settings, "scan.max_depth", MAX_DEPTH)
    workers = _positive_int(settings, "scan.workers", None)
    return PrunerEngine(max_depth=max_depth, max_workers=workers)


def _run_scan(engine: PrunerEngine, quiet: bool = False) -> ScanReport:
    if not quiet:
        click.echo(f"\n{click.style('🔍', bold=True)} Searching for virtual environments...\n")

    def on_progress(stage: str, message: str) -> None:
        log.info("%s: %s", stage, message)
        if quiet or stage == "done":
            return
        marker = click.style("✓", fg="green") if stage == "built" else click.style("·", fg="cyan")
        click.echo(f"  {marker} {message}", err=True)

    try:
        report = engine.scan(on_progress=on_progress)
    except HomeDirectoryError as exc:
        raise _home_error(exc) from exc
    if not quiet:
        click.echo(err=True)
    return report


def _print_summary(report: ScanReport) -> None:
    found = f"Found {len(report.environments)} virtual environments in {format_elapsed(report.elapsed)}"
    click.echo(click.style(found, fg="green"))
    total = click.style(bytes_to_human(report.total_bytes), fg="cyan", bold=True)
    click.echo(f"Total size of all virtual environments: {total}\n")


def _print_environments(envs: list[VirtualEnvironment], numbered: bool = False) -> None:
    for i, env in enumerate(envs, 1):
        index = f"[{i}] " if numbered else ""
        size = click.style(f"{env.size_display:>10s}", fg="green", bold=True)
        version = click.style(env.python_version, fg="bright_black")
        click.echo(f"  {index}{size}  {env.name:30s} {version}")
        click.echo(f"  {' ' * len(index)}{'':10s}  {click.style(str(env.path), fg='bright_black')}")


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """Search and delete Python virtual environments at common search paths."""
    _setup_logging(verbose)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.option("--max-depth", type=click.IntRange(min=1), default=None, help="Directory levels to search below each location")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(max_depth: int | None, as_json: bool) -> None:
    """List virtual environments (preview only, never deletes)."""
    engine = _build_engine(max_depth)
    report = _run_scan(engine, quiet=as_json)

    if as_json:
        data = {
            "environments": [env.to_dict() for env in report.environments],
            "total_bytes": report.total_bytes,
            "elapsed": report.elapsed,
        }
        click.echo(json.dumps(data, indent=2))
        return

    _print_summary(report)
    if not report.environments:
        click.echo("No virtual environments found.")
        return
    _print_environments(report.environments)
    click.echo()


# ── prune ────────────────────────────────────────────────────────────────

@main.command()
@click.option("--max-depth", type=click.IntRange(min=1), default=None, help="Directory levels to search below each location")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be deleted without doing it")
def prune(max_depth: int | None, yes: bool, dry_run: bool) -> None:
    """Scan, select and delete virtual environments."""
    engine = _build_engine(max_depth)
    report = _run_scan(engine)
    _print_summary(report)

    envs = report.environments
    if not envs:
        click.echo("No virtual environments found.")
        return

    while True:
        selected = _interactive_select(envs)
        if not selected:
            click.echo("No virtual environments selected for deletion.")
            return

        freeable = bytes_to_human(sum(env.size_bytes for env in selected))
        if dry_run:
            for env in selected:
                click.echo(f"  would delete {env.path} ({env.size_display})")
            click.echo(f"\nWould reclaim {click.style(freeable, fg='green', bold=True)}")
            click.echo("(dry run, nothing was deleted)")
            return

        if not yes and not click.confirm(
            f"Are you sure you want to delete {len(selected)} virtual environment(s) ({freeable})?",
            default=False,
        ):
            click.echo("Deletion cancelled.")
            return

        with click.progressbar(length=len(selected), label="Deleting virtual environments") as bar:
            result = engine.remove(selected, on_removed=lambda env: bar.update(1))

        for error in result.errors:
            click.echo(f"  {click.style('✗', fg='red')} {error}", err=True)
        click.echo(
            f"\n{len(result.removed)} virtual environment(s) deleted. Total size reclaimed: "
            f"{click.style(bytes_to_human(result.freed_bytes), fg='green', bold=True)}\n"
        )

        envs = engine.remaining(envs, result.removed)
        if not envs:
            click.echo(click.style("All virtual environments have been deleted.", fg="green"))
            return
        if not click.confirm("Do you want to delete more virtual environments?", default=False):
            return


def _interactive_select(envs: list[VirtualEnvironment]) -> list[VirtualEnvironment]:
    """Let the user pick which environments to delete."""
    click.echo("Select the virtualenvs to delete (numbers or ranges, comma-separated, or 'all'):\n")
    _print_environments(envs, numbered=True)
    click.echo()
    raw = click.prompt("Selection", default="", show_default=False)
    return [envs[i] for i in parse_selection(raw, len(envs))]


def parse_selection(raw: str, count: int) -> list[int]:
    """Parse ``1,3,5-7`` or ``all`` into sorted zero-based indexes below *count*.

    Out-of-range and malformed parts are ignored.
    """
    raw = raw.strip().lower()
    if raw == "all":
        return list(range(count))

    selected: set[int] = set()
    for part in raw.split(","):
        part = part.strip()
        if part.isdigit():
            bounds = (part, part)
        elif "-" in part:
            bounds = tuple(p.strip() for p in part.split("-", 1))
            if not all(p.isdigit() for p in bounds):
                continue
        else:
            continue
        first, last = int(bounds[0]) - 1, int(bounds[1]) - 1
        selected.update(i for i in range(first, last + 1) if 0 <= i < count)
    return sorted(selected)


# ── config ───────────────────────────────────────────────────────────────

@main.command()
@click.argument("key", required=False)
@click.argument("value", required=False)
def config(key: str | None, value: str | None) -> None:
    """Show or change settings (e.g. ``config scan.max_depth 5``)."""
    try:
        settings = Settings()
    except HomeDirectoryError as exc:
        raise click.ClickException(str(exc)) from exc

    if key is None:
        click.echo(json.dumps(settings.as_dict(), indent=2))
        return
    if value is None:
        click.echo(json.dumps(settings.get(key)))
        return

    settings.set(key, _parse_value(value))
    click.echo(f"{key} = {json.dumps(settings.get(key))} ({settings.path})")


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw
