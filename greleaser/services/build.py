"""Run the project's build command."""

from __future__ import annotations

from pathlib import Path

from greleaser.core.result import Err, Ok, Result
from greleaser.output.console import ConsoleProtocol, Style
from greleaser.platform.process import CommandRunner
from greleaser.services.release.errors import ReleaseError, Stage


def split_command(command: str) -> list[str]:
    """Split on whitespace. Quoting is not interpreted."""
    return command.split()


def run_build(
    command: str,
    *,
    cwd: Path,
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    """Run ``command`` with inherited stdout/stderr and no timeout."""
    console.header("Building project...")

    argv = split_command(command)
    if not argv:
        return Err(
            ReleaseError(
                stage=Stage.build,
                kind="build_failed",
                message="BUILD_COMMAND is empty",
            )
        )

    console.print(f"$ {' '.join(argv)}", Style.DIM)
    result = runner.run_silent(argv, cwd)
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                stage=Stage.build,
                kind="build_failed",
                message=str(result.error),
            )
        )
    return Ok(None)
