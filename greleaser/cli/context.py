from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from greleaser.core.errors import ErrorCode
from greleaser.output.console import ConsoleProtocol, RichConsole
from greleaser.platform.process import CommandRunner, SubprocessRunner
from greleaser.services.release.http import HttpClient, RequestsHttpClient


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace_root: Path
    console: ConsoleProtocol
    runner: CommandRunner
    http: HttpClient


def build_context(workspace: Path | None = None) -> CLIContext:
    console = RichConsole()

    try:
        root = (workspace or Path.cwd()).expanduser().resolve()
    except OSError as e:
        console.error(f"invalid --workspace: {e}")
        raise typer.Exit(code=int(ErrorCode.ERROR))

    if not root.is_dir():
        console.error(f"--workspace '{root}' is not a directory")
        raise typer.Exit(code=int(ErrorCode.ERROR))

    return CLIContext(
        workspace_root=root,
        console=console,
        runner=SubprocessRunner(),
        http=RequestsHttpClient(),
    )
