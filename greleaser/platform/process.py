"""Subprocess execution with Result-based error handling.

Two flavours are provided:
- run: captures stdout (git queries)
- run_silent: lets the child inherit stdout/stderr (the build command)

Services do not call these directly; they take a CommandRunner so tests
can swap in MockCommandRunner and never spawn git or a build tool.

Usage:
    runner = SubprocessRunner()
    match runner.run(["git", "describe", "--tags"], cwd=Path(".")):
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from greleaser.core.result import Err, Ok, Result

__all__ = [
    "CommandRunner",
    "MockCommandRunner",
    "ProcessError",
    "SubprocessRunner",
    "run",
    "run_silent",
]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code of the process (-1 if it could not start).
        stdout: Standard output (may be empty).
        stderr: Standard error, or the OS error when launching failed.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if self.returncode == -1:
            return f"{cmd_str} could not be started: {self.stderr}"
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command, streaming its output to the terminal.

    Nothing is captured, so on failure only the exit code is known.

    Returns:
        Ok(None) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr="")
        )

    return Ok(None)


class CommandRunner(Protocol):
    """Narrow command execution interface used by git and the build runner."""

    def run(self, cmd: list[str], cwd: Path) -> Result[str, ProcessError]:
        """Run and capture stdout."""
        ...

    def run_silent(self, cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
        """Run with inherited stdout/stderr."""
        ...


class SubprocessRunner:
    """CommandRunner backed by real subprocesses."""

    def run(self, cmd: list[str], cwd: Path) -> Result[str, ProcessError]:
        return run(cmd, cwd)

    def run_silent(self, cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
        return run_silent(cmd, cwd)


def _empty_responses() -> dict[tuple[str, ...], Result[str, ProcessError]]:
    return {}


def _empty_calls() -> list[tuple[str, ...]]:
    return []


@dataclass
class MockCommandRunner:
    """CommandRunner returning canned results, for tests.

    Responses are keyed by the full command tuple. Unknown commands fail
    with exit code 127, like a missing binary would.

    Usage:
        runner = MockCommandRunner()
        runner.set(["git", "log", "--pretty=format:%s"], Ok("Initial"))
        runner.run(["git", "log", "--pretty=format:%s"], cwd=Path("."))
    """

    responses: dict[tuple[str, ...], Result[str, ProcessError]] = field(
        default_factory=_empty_responses
    )
    calls: list[tuple[str, ...]] = field(default_factory=_empty_calls)

    def set(self, cmd: list[str], response: Result[str, ProcessError]) -> None:
        self.responses[tuple(cmd)] = response

    def fail(self, cmd: list[str], *, returncode: int = 1, stderr: str = "") -> None:
        """Register a failing command."""
        self.set(
            cmd,
            Err(ProcessError(command=tuple(cmd), returncode=returncode, stdout="", stderr=stderr)),
        )

    def run(self, cmd: list[str], cwd: Path) -> Result[str, ProcessError]:
        key = tuple(cmd)
        self.calls.append(key)
        if key not in self.responses:
            return Err(
                ProcessError(command=key, returncode=127, stdout="", stderr="not mocked")
            )
        return self.responses[key]

    def run_silent(self, cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
        result = self.run(cmd, cwd)
        if isinstance(result, Err):
            return result
        return Ok(None)
