"""Release orchestration.

Stages run strictly in order and the first failure ends the run:

    config -> identity -> build -> archive -> changelog -> publish

The archive path is fixed before the build starts and the file is removed
when the run ends, whatever the outcome.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from greleaser.core.config import DEFAULT_ENV_FILE, ConfigError, load_config
from greleaser.core.result import Err, Ok, Result
from greleaser.git.repository import GitError, RepoIdentity, Repository, resolve_identity
from greleaser.output.console import ConsoleProtocol
from greleaser.platform.process import CommandRunner
from greleaser.services.archive import ArchiveInfo, create_archive
from greleaser.services.build import run_build
from greleaser.services.changelog import generate_changelog
from greleaser.services.release.errors import ReleaseError, Stage
from greleaser.services.release.http import HttpClient
from greleaser.services.release.model import PublishedRelease
from greleaser.services.release.publisher import GITHUB_API_URL, ReleasePublisher

ARCHIVE_NAME = "release.zip"

USAGE_LINES = (
    "Usage: greleaser <version>",
    "Example: greleaser v1.0.0",
    "",
    f"Note: Create a {DEFAULT_ENV_FILE} file with your configuration:",
    "GITHUB_TOKEN=your-token-here",
    "BUILD_PATH=dist",
    "BUILD_COMMAND=npm run build",
)


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    version: str
    identity: RepoIdentity
    archive: ArchiveInfo
    changelog: str
    # None for a dry run.
    published: PublishedRelease | None


def validate_version_args(args: Sequence[str]) -> Result[str, ReleaseError]:
    """Exactly one argument, starting with ``v``."""
    if len(args) != 1:
        return Err(
            ReleaseError(
                stage=Stage.input,
                kind="invalid_usage",
                message=f"expected exactly one version argument, got {len(args)}",
            )
        )

    version = args[0]
    if not version.startswith("v"):
        return Err(
            ReleaseError(
                stage=Stage.input,
                kind="invalid_version",
                message="Version must start with 'v' (e.g., v1.0.0)",
                hint=version,
            )
        )
    return Ok(version)


def _config_error(e: ConfigError) -> ReleaseError:
    return ReleaseError(
        stage=Stage.config,
        kind="config_invalid",
        message=e.message,
        hint=str(e.path) if e.path is not None else None,
    )


def _identity_error(e: GitError) -> ReleaseError:
    return ReleaseError(
        stage=Stage.identity,
        kind="identity_failed",
        message=e.message,
        hint=e.detail or None,
    )


def _resolve(base: Path, path: Path) -> Path:
    return path if path.is_absolute() else base / path


def run_release(
    version: str,
    *,
    workspace_root: Path,
    runner: CommandRunner,
    http: HttpClient,
    console: ConsoleProtocol,
    env_file: Path = Path(DEFAULT_ENV_FILE),
    environ: Mapping[str, str] | None = None,
    api_url: str = GITHUB_API_URL,
    dry_run: bool = False,
) -> Result[ReleaseOutcome, ReleaseError]:
    """Build, archive and publish ``version``.

    Args:
        version: Tag to release, already validated.
        workspace_root: Project checkout; build cwd and archive location.
        runner: Runs git and the build command.
        http: Talks to the GitHub API.
        console: Progress and warnings.
        env_file: Configuration file, relative to ``workspace_root``.
        environ: Fallback for settings missing from ``env_file``.
        api_url: GitHub API root.
        dry_run: Stop after the changelog; nothing is sent to GitHub.
    """
    config = load_config(_resolve(workspace_root, env_file), environ=environ, console=console)
    if isinstance(config, Err):
        return config.map_err(_config_error)
    cfg = config.value

    repo = Repository(workspace_root, runner)
    identity = resolve_identity(repo)
    if isinstance(identity, Err):
        return identity.map_err(_identity_error)

    publisher = ReleasePublisher(
        token=cfg.github_token,
        identity=identity.value,
        http=http,
        console=console,
        api_url=api_url,
    )

    archive_path = workspace_root / ARCHIVE_NAME
    try:
        built = run_build(cfg.build_command, cwd=workspace_root, runner=runner, console=console)
        if isinstance(built, Err):
            return built

        archive = create_archive(
            _resolve(workspace_root, Path(cfg.build_path)), archive_path, console=console
        )
        if isinstance(archive, Err):
            return archive

        changelog = generate_changelog(repo)
        if isinstance(changelog, Err):
            return changelog

        if dry_run:
            console.header(f"Dry run: release {version} for {identity.value.slug}")
            console.print(changelog.value or "(no commits)")
            return Ok(
                ReleaseOutcome(
                    version=version,
                    identity=identity.value,
                    archive=archive.value,
                    changelog=changelog.value,
                    published=None,
                )
            )

        published = publisher.publish(
            version=version, archive=archive.value.path, changelog=changelog.value
        )
        if isinstance(published, Err):
            return published

        console.success(f"Successfully created release {version}")
        return Ok(
            ReleaseOutcome(
                version=version,
                identity=identity.value,
                archive=archive.value,
                changelog=changelog.value,
                published=published.value,
            )
        )
    finally:
        _remove_archive(archive_path, console)


def _remove_archive(path: Path, console: ConsoleProtocol) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        console.warning(f"failed to remove {path}: {e}")
