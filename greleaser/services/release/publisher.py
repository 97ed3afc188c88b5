"""Two-phase GitHub release publication.

Phase one creates the release record, phase two uploads the archive to
the upload URL returned by phase one. Each phase has its own failure
point and its own typed outcome (CreatedRelease, PublishedRelease). A
failed upload leaves the release record in place; nothing is rolled back.
"""

from __future__ import annotations

import json
from pathlib import Path
from urllib.parse import urlencode

from greleaser import __version__
from greleaser.core.result import Err, Ok, Result
from greleaser.core.structured import as_str_dict, get_int, get_str
from greleaser.git.repository import RepoIdentity
from greleaser.output.console import ConsoleProtocol
from greleaser.services.release.errors import ReleaseError, Stage
from greleaser.services.release.http import HttpClient
from greleaser.services.release.model import CreatedRelease, PublishedRelease, ReleaseRequest

GITHUB_API_URL = "https://api.github.com"
GITHUB_ACCEPT = "application/vnd.github.v3+json"

HTTP_CREATED = 201

ASSET_FIELD = "file"


def release_request(version: str, changelog: str) -> ReleaseRequest:
    return ReleaseRequest(tag_name=version, name=f"Release {version}", body=changelog)


def upload_target(upload_url_template: str, asset_name: str) -> str:
    """Turn ``https://x/assets{?name,label}`` into ``https://x/assets?name=<asset>``."""
    base = upload_url_template.split("{", 1)[0]
    return f"{base}?{urlencode({'name': asset_name})}"


class ReleasePublisher:
    """Creates a release for one repository and attaches an asset to it."""

    def __init__(
        self,
        *,
        token: str,
        identity: RepoIdentity,
        http: HttpClient,
        console: ConsoleProtocol,
        api_url: str = GITHUB_API_URL,
    ) -> None:
        self.identity = identity
        self._http = http
        self._console = console
        self._api_url = api_url.rstrip("/")
        self._base_headers = {
            "Authorization": f"Bearer {token}",
            "Accept": GITHUB_ACCEPT,
            "User-Agent": f"greleaser/{__version__}",
        }

    @property
    def releases_url(self) -> str:
        return f"{self._api_url}/repos/{self.identity.owner}/{self.identity.name}/releases"

    def headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        """Per-call headers merged under the base set; base headers always win."""
        merged = dict(extra or {})
        merged.update(self._base_headers)
        return merged

    def create_release(self, request: ReleaseRequest) -> Result[CreatedRelease, ReleaseError]:
        url = self.releases_url
        result = self._http.post_json(
            url,
            request.to_payload(),
            self.headers({"Content-Type": "application/json"}),
        )
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    stage=Stage.publish,
                    kind="network_failed",
                    message=f"failed to create release: {result.error.message}",
                    hint=url,
                )
            )

        resp = result.value
        if resp.status != HTTP_CREATED:
            return Err(
                ReleaseError(
                    stage=Stage.publish,
                    kind="create_failed",
                    message=f"failed to create release: {resp.text}",
                    hint=f"HTTP {resp.status}",
                )
            )

        try:
            obj = resp.json()
        except json.JSONDecodeError as e:
            return Err(
                ReleaseError(
                    stage=Stage.publish,
                    kind="invalid_response",
                    message=f"invalid create-release response: {e}",
                )
            )

        data = as_str_dict(obj)
        upload_url = get_str(data, "upload_url") if data is not None else None
        if data is None or upload_url is None:
            return Err(
                ReleaseError(
                    stage=Stage.publish,
                    kind="invalid_response",
                    message="invalid create-release response: missing upload_url",
                )
            )

        return Ok(
            CreatedRelease(
                tag_name=request.tag_name,
                upload_url=upload_url,
                html_url=get_str(data, "html_url"),
                release_id=get_int(data, "id"),
            )
        )

    def upload_asset(
        self, release: CreatedRelease, archive: Path
    ) -> Result[PublishedRelease, ReleaseError]:
        asset_name = archive.name
        url = upload_target(release.upload_url, asset_name)
        orphan_hint = f"release {release.tag_name} was created without its asset"

        result = self._http.post_file(url, archive, field_name=ASSET_FIELD, headers=self.headers())
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    stage=Stage.publish,
                    kind="network_failed",
                    message=f"failed to upload asset: {result.error.message}",
                    hint=orphan_hint,
                )
            )

        resp = result.value
        if resp.status != HTTP_CREATED:
            return Err(
                ReleaseError(
                    stage=Stage.publish,
                    kind="upload_failed",
                    message=f"failed to upload asset: {resp.text}",
                    hint=orphan_hint,
                )
            )

        asset_url: str | None = None
        try:
            data = as_str_dict(resp.json())
        except json.JSONDecodeError:
            data = None
        if data is not None:
            asset_url = get_str(data, "browser_download_url")

        return Ok(PublishedRelease(release=release, asset_name=asset_name, asset_url=asset_url))

    def publish(
        self, *, version: str, archive: Path, changelog: str
    ) -> Result[PublishedRelease, ReleaseError]:
        self._console.header(f"Creating GitHub release {version}...")
        created = self.create_release(release_request(version, changelog))
        if isinstance(created, Err):
            return created

        if created.value.html_url:
            self._console.info(f"release: {created.value.html_url}")

        self._console.header("Uploading release asset...")
        return self.upload_asset(created.value, archive)
