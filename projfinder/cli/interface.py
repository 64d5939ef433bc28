# projfinder/cli/interface.py
import sys
import json
from pathlib import Path
from typing import Any, Dict, NoReturn, Tuple

import click
from click_option_group import optgroup
import structlog

from projfinder import __version__ as app_version
from projfinder.config.settings import DetectorKind, DirectorySpec, DiscoveryConfig
from projfinder.config.loader import build_config, load_and_merge_configs, save_search_path
from projfinder.logging_setup import configure_logging, level_for_verbosity
from projfinder.core.paths import canonicalize
from projfinder.core.persistence import ProjectListStore
from projfinder.core.pipeline import DiscoveryRun
from projfinder.core.registry import ProjectRegistry, Registration
from projfinder.exceptions import ProjfinderError

log = structlog.get_logger(__name__)

def _load_effective_config(ctx: click.Context) -> DiscoveryConfig:
    # config files first, then the selected profile, then group-level cli overrides.
    params: Dict[str, Any] = ctx.find_root().obj
    config = build_config(load_and_merge_configs(), params.get("config_profile"))
    if params.get("projects_file") is not None:
        config.projects_file = params["projects_file"]
    return config

def _fail(e: ProjfinderError) -> NoReturn:
    log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
    click.secho(f"Error: {e}", fg="red", err=True)
    sys.exit(1)

@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@optgroup.group("Configuration", help="Where settings and the project list come from.")
@optgroup.option("--config-profile", "config_profile", default=None, help="Apply a [profiles.NAME] table from the config file(s).")
@optgroup.option("--projects-file", "projects_file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Project list file to read and update.")
@optgroup.group("Logging", help="Diagnostic output on stderr.")
@optgroup.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@optgroup.option("--force-json-logs", "force_json_logs", is_flag=True, default=False, help="Render logs as JSON.")
@click.version_option(version=app_version, prog_name="projfinder", help="Show version and exit.")
@click.pass_context
def main_cli_group(ctx: click.Context, **cli_params: Any):
    """projfinder: discover project roots under your directory trees
    and keep a deduplicated list of them."""
    configure_logging(log_level_str=level_for_verbosity(cli_params.get("verbosity_level", 0)), force_json_logs=cli_params.get("force_json_logs", False))

    ctx.ensure_object(dict)
    ctx.obj.update(cli_params)
    log.debug("cli_command_invoked", params=cli_params, invoked_subcommand=ctx.invoked_subcommand)

@main_cli_group.command("discover")
@click.option("-d", "--dir", "dirs", nargs=2, multiple=True, metavar="DIR DEPTH",
              type=(click.Path(file_okay=False, path_type=Path), click.IntRange(min=0)),
              help="Directory to scan and how many levels to descend. Replaces the configured search path.")
@click.option("--ignore", "extra_ignored", multiple=True, metavar="NAME", help="Additional directory name to skip.")
@click.option("--ignore-pattern", "ignore_patterns", multiple=True, metavar="GLOB", help="Glob matched against directory names to skip.")
@click.option("--detector", "detectors", multiple=True, type=click.Choice([k.value for k in DetectorKind]), help="Root detector(s) to use, in order.")
@click.option("--dry-run", is_flag=True, default=False, help="Report what would be added without writing the project list.")
@click.option("--save", "save_dirs", is_flag=True, default=False, help="Also store the -d directories in ./.projfinder.toml.")
@click.pass_context
def discover_command(ctx: click.Context, dirs: Tuple[Tuple[Path, int], ...], extra_ignored: Tuple[str, ...],
                     ignore_patterns: Tuple[str, ...], detectors: Tuple[str, ...], dry_run: bool, save_dirs: bool):
    """Scan the search path for project roots and record new ones."""
    try:
        config = _load_effective_config(ctx)
        if dirs:
            config.search_path = [DirectorySpec(str(path), depth) for path, depth in dirs]
            if save_dirs:
                target = save_search_path(config.search_path)
                click.echo(f"Info: Search path saved to: {target}", err=True)
        elif save_dirs:
            click.echo("Info: --save has no effect without -d/--dir.", err=True)
        if extra_ignored:
            config.ignored_names = config.ignored_names + [n for n in extra_ignored if n not in config.ignored_names]
        if ignore_patterns:
            config.ignore_patterns = config.ignore_patterns + list(ignore_patterns)
        if detectors:
            config.detectors = [DetectorKind(d) for d in detectors]
        config.dry_run = dry_run

        if not config.search_path:
            click.secho("No directories to scan. Pass -d DIR DEPTH or set search_path in .projfinder.toml.", fg="yellow", err=True)

        run = DiscoveryRun.from_config(config, show_progress=True)
        counters = run.run(config.search_path)
    except ProjfinderError as e:
        _fail(e)

    click.secho("--- discovery summary ---", fg="cyan", err=True)
    click.echo(f"Project roots found: {counters.found}", err=True)
    suffix = " (dry run, not saved)" if dry_run else ""
    click.echo(f"New projects added: {counters.added}{suffix}", err=True)
    for project in run.registry.projects[:counters.added]:
        click.echo(str(project))

@main_cli_group.command("list")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the list as a JSON array.")
@click.pass_context
def list_command(ctx: click.Context, as_json: bool):
    """Print the known projects, newest first."""
    try:
        config = _load_effective_config(ctx)
        projects = ProjectRegistry.from_store(ProjectListStore(config.projects_file)).projects
    except ProjfinderError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([str(p) for p in projects], indent=2))
        return
    for project in projects:
        click.echo(str(project))

@main_cli_group.command("add")
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.pass_context
def add_command(ctx: click.Context, directory: Path):
    """Record DIRECTORY as a known project without running detection."""
    try:
        config = _load_effective_config(ctx)
        store = ProjectListStore(config.projects_file)
        registry = ProjectRegistry.from_store(store)
        outcome = registry.register(directory)
    except ProjfinderError as e:
        _fail(e)

    if outcome is Registration.ALREADY_KNOWN:
        click.echo(f"Already known: {canonicalize(directory)}")
    else:
        click.echo(f"Added: {registry.projects[0]}")
