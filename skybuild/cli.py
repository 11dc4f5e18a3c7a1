"""skybuild command-line interface.

One sub-command per operation. Options given on the command line take
precedence over TARGET / ARTIFACT / VERSION and the SKYBUILD_* variables.
The process exits with 0 on success or the failing step's exit code.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import structlog
import typer
from pydantic import ValidationError

from skybuild.core.config import OrchestratorConfig, get_settings
from skybuild.core.logging import bind_operation, configure_structlog
from skybuild.operations import Orchestrator

app = typer.Typer(
    help="Build, test and release orchestrator for the sky workspace.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    ctx: typer.Context,
    target: Optional[str] = typer.Option(
        None, "--target", help="Target triple forwarded to the toolchain."
    ),
    artifact: Optional[str] = typer.Option(
        None, "--artifact", help="Artifact name used in the bundle file name."
    ),
    version: Optional[str] = typer.Option(
        None, "--version", help="Version used in the bundle file name."
    ),
    root: Optional[Path] = typer.Option(
        None, "--root", help="Workspace root (defaults to the current directory)."
    ),
    report: Optional[Path] = typer.Option(
        None, "--report", help="Write a JSON report of the operation to this path."
    ),
    debug: Optional[bool] = typer.Option(
        None, "--debug/--no-debug", help="Console logs (debug) or JSON logs."
    ),
) -> None:
    """Resolve configuration once for the invoked operation."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2)

    config = OrchestratorConfig.from_settings(settings).with_overrides(
        target=target,
        artifact=artifact,
        version=version,
        workspace_root=root,
        debug=debug,
    )
    configure_structlog(debug=config.debug)
    ctx.obj = {"config": config, "report": report}


def _execute(ctx: typer.Context, operation: str) -> None:
    config: OrchestratorConfig = ctx.obj["config"]
    report: Optional[Path] = ctx.obj["report"]
    bind_operation(operation)
    log = structlog.get_logger("skybuild")

    result = Orchestrator(config).run(operation)

    if report is not None:
        report.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        log.info("report_written", path=str(report))

    if result.is_success:
        log.info("operation_succeeded", artifacts=result.artifacts)
    else:
        log.error(
            "operation_failed",
            step=result.failed_step,
            kind=result.error_kind,
            error=result.error,
            exit_code=result.exit_code,
        )
    raise typer.Exit(code=result.exit_code)


@app.command()
def build(ctx: typer.Context) -> None:
    """Build all binaries (debug)."""
    _execute(ctx, "build")


@app.command()
def release(ctx: typer.Context) -> None:
    """Build all binaries (release)."""
    _execute(ctx, "release")


@app.command("release-bundle")
def release_bundle(ctx: typer.Context) -> None:
    """Build the bundle binaries (release)."""
    _execute(ctx, "release-bundle")


@app.command()
def bundle(ctx: typer.Context) -> None:
    """Build and package the release bundle archive."""
    _execute(ctx, "bundle")


@app.command()
def test(ctx: typer.Context) -> None:
    """Start the server and run the full test suite against it."""
    _execute(ctx, "test")


@app.command()
def clean(ctx: typer.Context) -> None:
    """Remove all build output."""
    _execute(ctx, "clean")


@app.command()
def deb(ctx: typer.Context) -> None:
    """Build a Debian package (release)."""
    _execute(ctx, "deb")
