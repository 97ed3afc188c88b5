"""Git repository queries needed for a release.

Three read-only questions are asked of git:
- which remote the project lives at (owner/name on GitHub)
- what the most recent tag is
- which commit subjects were made since that tag

Usage:
    repo = Repository(Path("."))

    match resolve_identity(repo):
        case Ok(identity):
            print(identity.slug)
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from greleaser.core.result import Err, Ok, Result
from greleaser.platform.process import CommandRunner, ProcessError, SubprocessRunner

__all__ = [
    "GitError",
    "RepoIdentity",
    "Repository",
    "parse_remote_url",
    "resolve_identity",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
        detail: Raw stderr from git, if any
    """

    command: str
    message: str
    returncode: int = 1
    detail: str = ""


@dataclass(frozen=True, slots=True)
class RepoIdentity:
    """GitHub owner and repository name."""

    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


class Repository:
    """Read-only access to a local git checkout.

    Attributes:
        path: Path to the repository (any directory inside the work tree)
    """

    def __init__(self, path: Path, runner: CommandRunner | None = None) -> None:
        self.path = path
        self._runner: CommandRunner = runner or SubprocessRunner()

    def remote_url(self, remote: str = "origin") -> Result[str, GitError]:
        """Return the configured URL of a remote."""
        key = f"remote.{remote}.url"
        result = self._run(["config", "--get", key])
        if isinstance(result, Err):
            e = result.error
            return Err(
                GitError(
                    command=f"config --get {key}",
                    message="failed to get remote URL",
                    returncode=e.returncode,
                    detail=e.stderr.strip(),
                )
            )

        url = result.value.strip()
        if not url:
            return Err(GitError(command=f"config --get {key}", message="failed to get remote URL"))
        return Ok(url)

    def latest_tag(self) -> str | None:
        """Most recent tag reachable from HEAD.

        Returns None when there is no tag (first release) or git fails.
        """
        result = self._run(["describe", "--tags", "--abbrev=0"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def commit_subjects(self, since: str | None = None) -> Result[list[str], GitError]:
        """Subject lines of commits after ``since`` up to HEAD, newest first.

        With ``since=None`` the whole history is listed.
        """
        args = ["log"]
        if since is not None:
            args.append(f"{since}..HEAD")
        args.append("--pretty=format:%s")

        result = self._run(args)
        if isinstance(result, Err):
            e = result.error
            return Err(
                GitError(
                    command=" ".join(args),
                    message=e.stderr.strip() or "git log failed",
                    returncode=e.returncode,
                    detail=e.stderr.strip(),
                )
            )

        # One line per commit; an empty subject still counts as a commit.
        stdout = result.value.removesuffix("\n")
        if not stdout:
            return Ok([])
        return Ok(stdout.split("\n"))

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return self._runner.run(["git", "-C", str(self.path), *args], cwd=self.path)


def parse_remote_url(url: str) -> Result[RepoIdentity, GitError]:
    """Extract owner/name from a GitHub remote URL.

    Accepts the usual shapes:
        https://github.com/owner/repo.git
        git@github.com:owner/repo.git
        ssh://git@github.com/owner/repo
    """
    parts = url.strip().rstrip("/").split("/")
    if len(parts) < 2:
        return Err(GitError(command="parse remote", message=f"unrecognized remote URL: {url}"))

    name = parts[-1].removesuffix(".git")
    owner = parts[-2].split(":")[-1]
    if not owner or not name:
        return Err(GitError(command="parse remote", message=f"unrecognized remote URL: {url}"))

    return Ok(RepoIdentity(owner=owner, name=name))


def resolve_identity(repo: Repository) -> Result[RepoIdentity, GitError]:
    """Read the origin remote and parse it into a RepoIdentity."""
    url = repo.remote_url()
    if isinstance(url, Err):
        return url
    return parse_remote_url(url.value)
