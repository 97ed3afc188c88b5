from __future__ import annotations

import json
import zipfile
from io import BytesIO
from pathlib import Path

import pytest

from greleaser.core.result import Err, Ok, Result
from greleaser.output.console import MockConsole
from greleaser.platform.process import MockCommandRunner
from greleaser.services.release.errors import ReleaseError, Stage
from greleaser.services.release.http import HttpError, HttpResponse, MockHttpClient
from greleaser.services.release.pipeline import (
    ARCHIVE_NAME,
    ReleaseOutcome,
    run_release,
    validate_version_args,
)

RELEASES_URL = "https://api.github.com/repos/acme/widget/releases"
UPLOAD_URL = "https://uploads.example/assets?name=release.zip"
CREATED = json.dumps({"id": 7, "upload_url": "https://uploads.example/assets{?name,label}"})


def _git(root: Path, *args: str) -> list[str]:
    return ["git", "-C", str(root), *args]


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    (tmp_path / ".release.env").write_text(
        "GITHUB_TOKEN=t\nBUILD_PATH=dist\nBUILD_COMMAND=make build\n", encoding="utf-8"
    )
    (tmp_path / "dist").mkdir()
    (tmp_path / "dist" / "a.txt").write_text("alpha", encoding="utf-8")
    return tmp_path


@pytest.fixture
def runner(workspace: Path) -> MockCommandRunner:
    r = MockCommandRunner()
    r.set(
        _git(workspace, "config", "--get", "remote.origin.url"),
        Ok("git@github.com:acme/widget.git\n"),
    )
    r.set(["make", "build"], Ok(""))
    r.fail(_git(workspace, "describe", "--tags", "--abbrev=0"), returncode=128)
    r.set(_git(workspace, "log", "--pretty=format:%s"), Ok("Initial"))
    return r


@pytest.fixture
def http() -> MockHttpClient:
    client = MockHttpClient()
    client.set_response(RELEASES_URL, HttpResponse(201, CREATED))
    client.set_response(UPLOAD_URL, HttpResponse(201, "{}"))
    return client


def _release(
    workspace: Path,
    runner: MockCommandRunner,
    http: MockHttpClient,
    console: MockConsole | None = None,
    **kwargs: object,
) -> Result[ReleaseOutcome, ReleaseError]:
    return run_release(
        "v1.0.0",
        workspace_root=workspace,
        runner=runner,
        http=http,
        console=console or MockConsole(),
        environ={},
        **kwargs,  # type: ignore[arg-type]
    )


class TestValidateVersionArgs:
    def test_valid(self) -> None:
        assert validate_version_args(["v1.0.0"]) == Ok("v1.0.0")

    def test_missing_prefix(self) -> None:
        result = validate_version_args(["1.0.0"])
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"
        assert result.error.message == "Version must start with 'v' (e.g., v1.0.0)"

    @pytest.mark.parametrize("args", [[], ["v1", "v2"]])
    def test_wrong_count(self, args: list[str]) -> None:
        result = validate_version_args(args)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_usage"
        assert result.error.stage == Stage.input


class TestRunRelease:
    def test_full_release(
        self, workspace: Path, runner: MockCommandRunner, http: MockHttpClient
    ) -> None:
        console = MockConsole()

        result = _release(workspace, runner, http, console)

        assert isinstance(result, Ok)
        assert result.value.identity.slug == "acme/widget"
        assert result.value.changelog == "- Initial"

        create, upload = http.calls
        assert create.url == RELEASES_URL
        assert create.payload == {
            "tag_name": "v1.0.0",
            "name": "Release v1.0.0",
            "body": "- Initial",
            "draft": False,
            "prerelease": False,
        }
        assert create.headers["Authorization"] == "Bearer t"

        assert upload.url == UPLOAD_URL
        assert upload.file_content is not None
        with zipfile.ZipFile(BytesIO(upload.file_content)) as zf:
            assert zf.namelist() == ["a.txt"]
            assert zf.read("a.txt") == b"alpha"

        assert not (workspace / ARCHIVE_NAME).exists()
        assert console.find("Successfully created release v1.0.0")

    def test_stages_run_in_order(
        self, workspace: Path, runner: MockCommandRunner, http: MockHttpClient
    ) -> None:
        _release(workspace, runner, http)

        assert runner.calls == [
            tuple(_git(workspace, "config", "--get", "remote.origin.url")),
            ("make", "build"),
            tuple(_git(workspace, "describe", "--tags", "--abbrev=0")),
            tuple(_git(workspace, "log", "--pretty=format:%s")),
        ]

    def test_environment_fallback(
        self, workspace: Path, runner: MockCommandRunner, http: MockHttpClient
    ) -> None:
        (workspace / ".release.env").unlink()
        console = MockConsole()

        result = run_release(
            "v1.0.0",
            workspace_root=workspace,
            runner=runner,
            http=http,
            console=console,
            environ={
                "GITHUB_TOKEN": "env-token",
                "BUILD_PATH": "dist",
                "BUILD_COMMAND": "make build",
            },
        )

        assert isinstance(result, Ok)
        assert console.has_warning()
        assert http.calls[0].headers["Authorization"] == "Bearer env-token"

    def test_missing_config_stops_before_anything_runs(
        self, workspace: Path, runner: MockCommandRunner, http: MockHttpClient
    ) -> None:
        (workspace / ".release.env").write_text("BUILD_PATH=dist\n", encoding="utf-8")

        result = _release(workspace, runner, http)

        assert isinstance(result, Err)
        assert result.error.stage == Stage.config
        assert result.error.message == (
            "missing required configuration: GITHUB_TOKEN, BUILD_COMMAND"
        )
        assert runner.calls == []
        assert http.calls == []

    def test_remote_failure(
        self, workspace: Path, runner: MockCommandRunner, http: MockHttpClient
    ) -> None:
        runner.fail(_git(workspace, "config", "--get", "remote.origin.url"))

        result = _release(workspace, runner, http)

        assert isinstance(result, Err)
        assert result.error.stage == Stage.identity
        assert result.error.render() == "Error resolving repository: failed to get remote URL"
        assert ("make", "build") not in runner.calls

    def test_build_failure(
        self, workspace: Path, runner: MockCommandRunner, http: MockHttpClient
    ) -> None:
        runner.fail(["make", "build"], returncode=2)

        result = _release(workspace, runner, http)

        assert isinstance(result, Err)
        assert result.error.stage == Stage.build
        assert http.calls == []
        assert not (workspace / ARCHIVE_NAME).exists()

    def test_missing_build_directory(
        self, workspace: Path, runner: MockCommandRunner, http: MockHttpClient
    ) -> None:
        (workspace / "dist" / "a.txt").unlink()
        (workspace / "dist").rmdir()

        result = _release(workspace, runner, http)

        assert isinstance(result, Err)
        assert result.error.stage == Stage.archive
        assert http.calls == []

    def test_changelog_failure(
        self, workspace: Path, runner: MockCommandRunner, http: MockHttpClient
    ) -> None:
        runner.fail(_git(workspace, "log", "--pretty=format:%s"), returncode=128)

        result = _release(workspace, runner, http)

        assert isinstance(result, Err)
        assert result.error.stage == Stage.changelog
        assert http.calls == []
        assert not (workspace / ARCHIVE_NAME).exists()

    def test_create_failure_removes_archive(
        self, workspace: Path, runner: MockCommandRunner, http: MockHttpClient
    ) -> None:
        http.set_response(RELEASES_URL, HttpResponse(422, '{"message": "Validation Failed"}'))

        result = _release(workspace, runner, http)

        assert isinstance(result, Err)
        assert result.error.kind == "create_failed"
        assert len(http.calls) == 1
        assert not (workspace / ARCHIVE_NAME).exists()

    def test_upload_failure_removes_archive(
        self, workspace: Path, runner: MockCommandRunner, http: MockHttpClient
    ) -> None:
        http.set_response(UPLOAD_URL, HttpError(url=UPLOAD_URL, message="connection reset"))

        result = _release(workspace, runner, http)

        assert isinstance(result, Err)
        assert result.error.stage == Stage.publish
        assert not (workspace / ARCHIVE_NAME).exists()

    def test_dry_run_sends_nothing(
        self, workspace: Path, runner: MockCommandRunner, http: MockHttpClient
    ) -> None:
        console = MockConsole()

        result = _release(workspace, runner, http, console, dry_run=True)

        assert isinstance(result, Ok)
        assert result.value.published is None
        assert result.value.archive.entries == ("a.txt",)
        assert http.calls == []
        assert console.find("- Initial")
        assert not (workspace / ARCHIVE_NAME).exists()

    def test_custom_env_file_and_api_url(
        self, workspace: Path, runner: MockCommandRunner
    ) -> None:
        (workspace / "ci.env").write_text(
            "GITHUB_TOKEN=ci\nBUILD_PATH=dist\nBUILD_COMMAND=make build\n", encoding="utf-8"
        )
        http = MockHttpClient()
        http.set_response(
            "https://ghe.example/api/v3/repos/acme/widget/releases", HttpResponse(201, CREATED)
        )
        http.set_response(UPLOAD_URL, HttpResponse(201, "{}"))

        result = _release(
            workspace,
            runner,
            http,
            env_file=Path("ci.env"),
            api_url="https://ghe.example/api/v3",
        )

        assert isinstance(result, Ok)
        assert http.calls[0].headers["Authorization"] == "Bearer ci"
