"""goreload CLI - watch a Go module, rebuild and restart on change."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import click

from goreload import __version__
from goreload.config.loader import load_config
from goreload.config.models import GoReloadConfig, LoggingConfig
from goreload.core.console import status
from goreload.core.errors import GoReloadError
from goreload.core.logging import configure_logging
from goreload.daemon.lifecycle import bootstrap, resolve_root, run_daemon


def _overrides(
    run: str | None,
    debug: bool,
    excludes: str | None,
    build_cmd: str | None,
    relaunch_on_failure: bool | None,
) -> dict[str, Any]:
    """Collect only the flags actually given, so file and env values survive."""
    overrides: dict[str, Any] = {}
    if debug:
        overrides["debug"] = True
    if run is not None:
        overrides["run"] = {"command": run}
    if excludes is not None:
        overrides["watch"] = {"excludes": excludes}
    build: dict[str, Any] = {}
    if build_cmd is not None:
        build["command"] = build_cmd
    if relaunch_on_failure is not None:
        build["relaunch_on_failure"] = relaunch_on_failure
    if build:
        overrides["build"] = build
    return overrides


def _logging_config(config: GoReloadConfig) -> LoggingConfig:
    """Debug mode forces DEBUG on the root level and on every output."""
    if not config.debug:
        return config.logging
    return LoggingConfig(
        level="DEBUG",
        outputs=[output.model_copy(update={"level": "DEBUG"}) for output in config.logging.outputs],
    )


@click.command(epilog="cd workspace, run goreload, this will auto build code and run")
@click.version_option(version=__version__, prog_name="goreload")
@click.argument(
    "path", default=None, required=False, type=click.Path(file_okay=False, path_type=Path)
)
@click.option("-r", "--run", "run", default=None, help="Run program after auto build.")
@click.option("-d", "--debug", is_flag=True, help="Run in debug mode (verbose diagnostics).")
@click.option(
    "-e",
    "--exclude",
    "excludes",
    default=None,
    help='Directories not to monitor, can list multiple: -e "dir1 dir2 dir3". [default: .git]',
)
@click.option("--build-cmd", default=None, help="Shell command replacing the derived build command.")
@click.option(
    "--relaunch-on-failure/--no-relaunch-on-failure",
    default=None,
    help="Relaunch the run command even when the build fails. [default: no]",
)
@click.pass_context
def cli(
    ctx: click.Context,
    path: Path | None,
    run: str | None,
    debug: bool,
    excludes: str | None,
    build_cmd: str | None,
    relaunch_on_failure: bool | None,
) -> None:
    """Watch PATH (default: current directory), rebuild on every change to a
    source file and restart the program given with -r.
    """
    try:
        root = resolve_root(path)
        config = load_config(
            root, **_overrides(run, debug, excludes, build_cmd, relaunch_on_failure)
        )
        configure_logging(config=_logging_config(config))
        state = bootstrap(config, root)
    except GoReloadError as e:
        click.echo(str(e), err=True)
        ctx.exit(e.exit_code)

    status(f"watching {state.root}", style="success")
    ctx.exit(asyncio.run(run_daemon(state)))


if __name__ == "__main__":
    cli()
