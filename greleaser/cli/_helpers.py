"""Shared helpers for the CLI."""

from __future__ import annotations

from typing import NoReturn, TypeVar

import typer

from greleaser.core.errors import ErrorCode
from greleaser.core.result import Err, Result
from greleaser.output.console import ConsoleProtocol, Style
from greleaser.services.release.errors import ReleaseError

T = TypeVar("T")


def exit_on_error(
    result: Result[T, ReleaseError],
    console: ConsoleProtocol,
    error_code: ErrorCode = ErrorCode.ERROR,
) -> None:
    """Print the stage-prefixed error (and hint) and exit if result is Err."""
    if isinstance(result, Err):
        error = result.error
        console.error(error.render())
        if error.hint:
            console.print(f"hint: {error.hint}", Style.DIM)
        exit_with_code(int(error_code))


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
