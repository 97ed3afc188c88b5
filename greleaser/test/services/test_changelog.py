from __future__ import annotations

from pathlib import Path

from greleaser.core.result import Err, Ok
from greleaser.git.repository import Repository
from greleaser.platform.process import MockCommandRunner
from greleaser.services.changelog import format_changelog, generate_changelog
from greleaser.services.release.errors import Stage


def _git(repo: Path, *args: str) -> list[str]:
    return ["git", "-C", str(repo), *args]


def test_format_changelog() -> None:
    assert format_changelog(["Fix bug", "Add feature"]) == "- Fix bug\n- Add feature"
    assert format_changelog([]) == ""


def test_format_changelog_keeps_empty_subjects() -> None:
    assert format_changelog(["Fix", ""]) == "- Fix\n- "


def test_no_tag_uses_full_history(tmp_path: Path) -> None:
    runner = MockCommandRunner()
    runner.fail(_git(tmp_path, "describe", "--tags", "--abbrev=0"), returncode=128)
    runner.set(_git(tmp_path, "log", "--pretty=format:%s"), Ok("Second\nInitial"))

    result = generate_changelog(Repository(tmp_path, runner))

    assert result == Ok("- Second\n- Initial")


def test_tag_limits_to_commits_after_it(tmp_path: Path) -> None:
    runner = MockCommandRunner()
    runner.set(_git(tmp_path, "describe", "--tags", "--abbrev=0"), Ok("v1.0.0\n"))
    runner.set(_git(tmp_path, "log", "v1.0.0..HEAD", "--pretty=format:%s"), Ok("Fix bug"))

    result = generate_changelog(Repository(tmp_path, runner))

    assert result == Ok("- Fix bug")
    assert _git_log_full(tmp_path) not in runner.calls


def test_listing_failure_is_changelog_error(tmp_path: Path) -> None:
    runner = MockCommandRunner()
    runner.fail(_git(tmp_path, "describe", "--tags", "--abbrev=0"), returncode=128)
    runner.fail(_git(tmp_path, "log", "--pretty=format:%s"), returncode=128, stderr="fatal: bad")

    result = generate_changelog(Repository(tmp_path, runner))

    assert isinstance(result, Err)
    assert result.error.stage == Stage.changelog
    assert result.error.message == "fatal: bad"
    assert result.error.hint == "git log --pretty=format:%s"
    assert result.error.render() == "Failed to generate changelog: fatal: bad"


def _git_log_full(repo: Path) -> tuple[str, ...]:
    return tuple(_git(repo, "log", "--pretty=format:%s"))
