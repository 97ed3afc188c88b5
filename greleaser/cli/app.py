from __future__ import annotations

from pathlib import Path

import typer

from greleaser import __version__
from greleaser.cli._helpers import exit_on_error, exit_with_code
from greleaser.cli.context import build_context
from greleaser.core.config import DEFAULT_ENV_FILE
from greleaser.core.errors import ErrorCode
from greleaser.core.result import Err
from greleaser.output.console import RichConsole
from greleaser.services.release.pipeline import USAGE_LINES, run_release, validate_version_args
from greleaser.services.release.publisher import GITHUB_API_URL

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)


@app.command()
def release(
    args: list[str] | None = typer.Argument(
        None,
        metavar="VERSION",
        help="Version tag to release, must start with 'v' (e.g. v1.0.0)",
        show_default=False,
    ),
    env_file: Path = typer.Option(
        Path(DEFAULT_ENV_FILE),
        "--env-file",
        help="KEY=VALUE file with GITHUB_TOKEN, BUILD_PATH, BUILD_COMMAND",
    ),
    api_url: str = typer.Option(
        GITHUB_API_URL, "--api-url", help="GitHub API root (GitHub Enterprise)"
    ),
    workspace: Path | None = typer.Option(
        None,
        "--workspace",
        help="Project checkout (defaults to the current directory)",
        show_default=False,
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Build, archive and show the changelog without publishing"
    ),
    show_version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Build the project, zip the build output and publish it as a GitHub release."""
    if show_version:
        typer.echo(__version__)
        exit_with_code(int(ErrorCode.OK))

    validated = validate_version_args(args or [])
    if isinstance(validated, Err):
        console = RichConsole()
        if validated.error.kind == "invalid_usage":
            for line in USAGE_LINES:
                console.print(line)
        else:
            console.error(validated.error.message)
        exit_with_code(int(ErrorCode.ERROR))

    ctx = build_context(workspace)
    result = run_release(
        validated.value,
        workspace_root=ctx.workspace_root,
        runner=ctx.runner,
        http=ctx.http,
        console=ctx.console,
        env_file=env_file,
        api_url=api_url,
        dry_run=dry_run,
    )
    exit_on_error(result, ctx.console)


def main() -> None:
    app()
