"""
install-qt — CLI entrypoint.

Usage:
    python -m src.main --help
    python -m src.main install
    python -m src.main cache-key --input version=6.8.0
    python -m src.main plan --inputs-file qt.yml --json
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any

import click

from src import __version__
from src.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="install-qt")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """install-qt — install Qt on a CI runner and publish its location."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("IQTA_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        log_file=os.environ.get("IQTA_LOG_FILE"),
        log_file_level=os.environ.get("IQTA_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )


def inputs_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that needs resolved inputs."""

    @click.option(
        "--inputs-file",
        "-f",
        type=click.Path(exists=False, dir_okay=False, path_type=Path),
        default=None,
        help="YAML mapping of input names to values.",
    )
    @click.option(
        "--input",
        "-i",
        "overrides",
        multiple=True,
        metavar="NAME=VALUE",
        help="Set one input (repeatable). Overrides INPUT_* env vars and the file.",
    )
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return wrapper


def _fail(ci: Any, message: str) -> None:
    ci.set_failed(message)
    sys.exit(1)


@cli.command()
@inputs_options
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Cache store directory (default: $IQTA_CACHE_DIR or the runner tool cache).",
)
@click.option("--dry-run", is_flag=True, help="Print the commands but don't run them.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the result as JSON.")
def install(
    inputs_file: Path | None,
    overrides: tuple[str, ...],
    cache_dir: Path | None,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Install Qt, restore/save the cache and export the environment.

    Examples:

        INPUT_VERSION=6.8.0 install-qt install

        install-qt install -i version=5.15.2 -i modules=qtcharts --dry-run
    """
    from src.adapters.cache.store import LocalCacheStore
    from src.adapters.ci.github import GitHubActions
    from src.adapters.ci.memory import MemoryPlatform
    from src.adapters.shell.command import ShellCommandAdapter
    from src.core.config.loader import load_inputs
    from src.core.errors import InstallQtError
    from src.core.use_cases.install import run_install

    # With --json, stdout carries the JSON report and nothing else
    ci = MemoryPlatform() if dry_run else GitHubActions(err=as_json)

    try:
        inputs = load_inputs(inputs_file=inputs_file, overrides=overrides)
        result = run_install(
            inputs,
            adapter=ShellCommandAdapter(stdout_to_stderr=as_json),
            ci=ci,
            cache_store=LocalCacheStore(cache_dir),
            dry_run=dry_run,
        )
    except InstallQtError as e:
        _fail(ci, str(e))
        return
    except Exception as e:
        _fail(ci, f"unknown error: {e}")
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if dry_run:
        for action in result.commands:
            click.echo(action.command_line)
        for warning in ci.warnings:
            click.secho(f"⚠️  {warning}", fg="yellow", err=True)


@cli.command("cache-key")
@inputs_options
def cache_key(inputs_file: Path | None, overrides: tuple[str, ...]) -> None:
    """Print the cache key for the given inputs."""
    from src.core.config.loader import load_inputs
    from src.core.errors import ConfigError
    from src.core.services.cache_key import compute_cache_key, host_os_release

    try:
        inputs = load_inputs(inputs_file=inputs_file, overrides=overrides)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(compute_cache_key(inputs, host_os_release()))


@cli.command()
@inputs_options
@click.option(
    "--autodesktop/--no-autodesktop",
    default=True,
    help="Assume the installed aqt supports --autodesktop.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def plan(
    inputs_file: Path | None,
    overrides: tuple[str, ...],
    autodesktop: bool,
    as_json: bool,
) -> None:
    """Show the aqt commands an install would run, without running them."""
    from src.core.config.loader import load_inputs
    from src.core.errors import ConfigError
    from src.core.services.installer import build_plan

    warnings: list[str] = []
    try:
        inputs = load_inputs(inputs_file=inputs_file, overrides=overrides)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    actions = build_plan(inputs, autodesktop, warn=warnings.append)

    if as_json:
        click.echo(json.dumps(
            {
                "inputs": inputs.model_dump(mode="json"),
                "commands": [a.args for a in actions],
                "warnings": warnings,
            },
            indent=2,
        ))
        return

    if not actions:
        click.secho("Nothing to install.", fg="yellow")
    for action in actions:
        click.secho(f"• {action.name}", fg="cyan", bold=True)
        click.echo(f"  {action.command_line}")
    for warning in warnings:
        click.secho(f"⚠️  {warning}", fg="yellow")


@cli.command()
@click.argument("install_dir", type=click.Path(file_okay=False))
def locate(install_dir: str) -> None:
    """Print the Qt kit directory under INSTALL_DIR."""
    from src.core.errors import QtNotFoundError
    from src.core.services.qt_env import locate_qt_arch_dir

    try:
        click.echo(locate_qt_arch_dir(install_dir))
    except QtNotFoundError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
