from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Body of the create-release call."""

    tag_name: str
    name: str
    body: str
    draft: bool = False
    prerelease: bool = False

    def to_payload(self) -> dict[str, object]:
        return {
            "tag_name": self.tag_name,
            "name": self.name,
            "body": self.body,
            "draft": self.draft,
            "prerelease": self.prerelease,
        }


@dataclass(frozen=True, slots=True)
class CreatedRelease:
    """Release record exists on GitHub; no asset uploaded yet."""

    tag_name: str
    upload_url: str  # template, e.g. https://uploads.github.com/.../assets{?name,label}
    html_url: str | None = None
    release_id: int | None = None


@dataclass(frozen=True, slots=True)
class PublishedRelease:
    """Release record plus its uploaded asset."""

    release: CreatedRelease
    asset_name: str
    asset_url: str | None = None

    @property
    def tag_name(self) -> str:
        return self.release.tag_name
