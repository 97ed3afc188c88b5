"""Changelog from git history since the previous tag."""

from __future__ import annotations

from greleaser.core.result import Err, Ok, Result
from greleaser.git.repository import Repository
from greleaser.services.release.errors import ReleaseError, Stage


def format_changelog(subjects: list[str]) -> str:
    return "\n".join(f"- {s}" for s in subjects)


def generate_changelog(repo: Repository) -> Result[str, ReleaseError]:
    """List commit subjects after the latest tag, or the whole history if untagged."""
    last_tag = repo.latest_tag()

    subjects = repo.commit_subjects(since=last_tag)
    if isinstance(subjects, Err):
        return Err(
            ReleaseError(
                stage=Stage.changelog,
                kind="changelog_failed",
                message=subjects.error.message,
                hint=f"git {subjects.error.command}",
            )
        )

    return Ok(format_changelog(subjects.value))
