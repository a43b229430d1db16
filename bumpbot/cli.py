"""
CLI interface for bumpbot.

Usage:
    bumpbot run owner/repo TOKEN       # bump, test, release or open a PR
    bumpbot check owner/repo TOKEN     # show what a run would do
    bumpbot next-patch v1.2.3          # print v1.2.4
    bumpbot init                       # write a default bumpbot.toml
"""

import json
import logging
import os
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Iterator, Optional

import typer
from typing_extensions import Annotated

from .config import CONFIG_FILENAME, BumpConfig, resolve_config, resolve_target, save_config
from .errors import BumpError
from .logging_config import configure_quiet_mode, configure_run_log, enable_debug_mode
from .pipeline import PublicationOrchestrator, build_orchestrator
from .release_client import ReleaseClient
from .semver import next_patch as _next_patch

# Configure quiet mode by default (progress only, no library output)
# Set BUMPBOT_VERBOSE=1 to enable debug mode via environment
if os.environ.get("BUMPBOT_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"bumpbot {version('bumpbot')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_config_override: Optional[Path] = None


def _config_callback(value: Optional[Path]):
    global _config_override
    _config_override = value


def _get_config_override() -> Optional[Path]:
    return _config_override


app = typer.Typer(
    name="bumpbot",
    help="Track an upstream runtime release and publish the bump.",
    no_args_is_help=True,
    rich_markup_mode=None,
)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
    config: Annotated[Optional[Path], typer.Option(
        "--config", "-c",
        envvar="BUMPBOT_CONFIG",
        help=f"Path to the config file (default: ./{CONFIG_FILENAME} if present)",
        callback=_config_callback,
        is_eager=True,
    )] = None,
):
    """Track an upstream runtime release and publish the bump."""


# -----------------------------------------------------------------------------
# Common Options
# -----------------------------------------------------------------------------

RepositoryArg = Annotated[
    Optional[str],
    typer.Argument(help="Target repository as owner/repo (credential source 'args')"),
]
TokenArg = Annotated[
    Optional[str],
    typer.Argument(help="Access token (credential source 'args')", show_default=False),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON"),
]
CredentialSourceOption = Annotated[
    Optional[str],
    typer.Option(
        "--credential-source",
        help="Where owner/repo and token come from: args or env",
    ),
]


def _fail(e: Exception) -> None:
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(1)


def _load_config(**overrides) -> BumpConfig:
    config = resolve_config(_get_config_override())
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return replace(config, **overrides) if overrides else config


@contextmanager
def _orchestrator(
    config: BumpConfig,
    repository: Optional[str],
    token: Optional[str],
) -> Iterator[PublicationOrchestrator]:
    target = resolve_target(config, repository, token)
    with ReleaseClient(config.api_url, target.token, timeout=config.http_timeout) as releases:
        yield build_orchestrator(config, target, releases=releases)


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.command()
def run(
    repository: RepositoryArg = None,
    token: TokenArg = None,
    output_json: JsonOption = False,
    credential_source: CredentialSourceOption = None,
    no_gate: Annotated[bool, typer.Option(
        "--no-gate",
        help="Skip the test gate and always open a pull request",
    )] = False,
    manifest_key: Annotated[Optional[str], typer.Option(
        "--manifest-key",
        help="Manifest key whose version is updated",
    )] = None,
    log_file: Annotated[Optional[Path], typer.Option(
        "--log-file",
        help="Also append progress to this file (rotated at 1MB)",
    )] = None,
):
    """Bump to the latest upstream version, then release or open a pull request."""
    handler = configure_run_log(log_file) if log_file else None
    try:
        config = _load_config(
            credential_source=credential_source,
            manifest_dependency_key=manifest_key,
            gate_on_tests=False if no_gate else None,
        )
        with _orchestrator(config, repository, token) as orchestrator:
            outcome = orchestrator.run()
    except BumpError as e:
        _fail(e)
    finally:
        if handler is not None:
            logging.getLogger("bumpbot").removeHandler(handler)
            handler.close()

    if output_json:
        typer.echo(json.dumps(outcome.to_dict()))
    else:
        typer.echo(outcome.describe())


@app.command()
def check(
    repository: RepositoryArg = None,
    token: TokenArg = None,
    output_json: JsonOption = False,
    credential_source: CredentialSourceOption = None,
):
    """Show current and latest versions and whether a bump is in flight."""
    try:
        config = _load_config(credential_source=credential_source)
        with _orchestrator(config, repository, token) as orchestrator:
            report = orchestrator.check()
    except BumpError as e:
        _fail(e)

    if output_json:
        typer.echo(json.dumps(report.to_dict()))
        return
    ctx = report.context
    typer.echo(f"current: {ctx.current_version}")
    typer.echo(f"latest:  {ctx.latest_version}")
    if not ctx.needs_update:
        typer.echo("Up to date.")
    elif report.in_flight:
        typer.echo(f"Update pending: {ctx.branch} already exists.")
    else:
        typer.echo(f"Update needed: would work on {ctx.branch}")


@app.command("next-patch")
def next_patch(
    tag: Annotated[str, typer.Argument(help="Version tag such as v1.2.3")],
):
    """Print the tag with its patch number incremented."""
    try:
        typer.echo(_next_patch(tag))
    except BumpError as e:
        _fail(e)


@app.command()
def init(
    path: Annotated[Path, typer.Argument(help="Config file to write")] = Path(CONFIG_FILENAME),
    force: Annotated[bool, typer.Option("--force", "-f", help="Overwrite an existing file")] = False,
):
    """Write a config file with the default settings."""
    if path.exists() and not force:
        typer.echo(f"Error: {path} already exists (use --force to overwrite)", err=True)
        raise typer.Exit(1)
    save_config(BumpConfig(), path)
    typer.echo(f"Wrote {path}")


# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        log_path = log_exception(e, context="bumpbot CLI")
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
