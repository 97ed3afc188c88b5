from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal


class Stage(StrEnum):
    """Step of the release sequence an error belongs to."""

    input = "input"
    config = "config"
    identity = "identity"
    build = "build"
    archive = "archive"
    changelog = "changelog"
    publish = "publish"

    @property
    def label(self) -> str:
        return _STAGE_LABELS[self]


_STAGE_LABELS: dict[Stage, str] = {
    Stage.input: "Invalid arguments",
    Stage.config: "Error loading config",
    Stage.identity: "Error resolving repository",
    Stage.build: "Build failed",
    Stage.archive: "Failed to create ZIP",
    Stage.changelog: "Failed to generate changelog",
    Stage.publish: "Failed to create release",
}


ReleaseErrorKind = Literal[
    "invalid_usage",
    "invalid_version",
    "config_invalid",
    "identity_failed",
    "build_failed",
    "archive_failed",
    "changelog_failed",
    "create_failed",
    "upload_failed",
    "invalid_response",
    "network_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    stage: Stage
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def render(self) -> str:
        """One-line diagnostic prefixed with the failing stage.

        A message that already opens with the stage label is not prefixed twice.
        """
        label = self.stage.label
        if self.message.lower().startswith(label.lower()):
            rest = self.message[len(label) :].lstrip(": ")
            return f"{label}: {rest}" if rest else label
        return f"{label}: {self.message}"
