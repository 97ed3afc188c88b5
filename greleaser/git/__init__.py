"""Git queries used by the release pipeline.

Usage:
    from greleaser.git import Repository, resolve_identity

    repo = Repository(Path("."))
    identity = resolve_identity(repo)
"""

from .repository import GitError, RepoIdentity, Repository, parse_remote_url, resolve_identity

__all__ = [
    "GitError",
    "RepoIdentity",
    "Repository",
    "parse_remote_url",
    "resolve_identity",
]
