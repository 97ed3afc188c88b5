"""Release configuration loading.

Settings come from a ``KEY=VALUE`` file (``.release.env`` by default) and
fall back to environment variables. The result is an immutable
ReleaseConfig that is passed explicitly to whatever needs it.

File format:
    # comments start with '#'
    GITHUB_TOKEN=ghp_xxx
    BUILD_PATH="dist"
    BUILD_COMMAND='npm run build'
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .result import Err, Ok, Result

if TYPE_CHECKING:
    from greleaser.output.console import ConsoleProtocol

__all__ = [
    "DEFAULT_ENV_FILE",
    "ENV_BUILD_COMMAND",
    "ENV_BUILD_PATH",
    "ENV_GITHUB_TOKEN",
    "REQUIRED_KEYS",
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "parse_env_text",
]

DEFAULT_ENV_FILE = ".release.env"

ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
ENV_BUILD_PATH = "BUILD_PATH"
ENV_BUILD_COMMAND = "BUILD_COMMAND"

# Order matters: missing keys are reported in this order.
REQUIRED_KEYS = (ENV_GITHUB_TOKEN, ENV_BUILD_PATH, ENV_BUILD_COMMAND)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the configuration cannot be read or is incomplete."""

    message: str
    path: Path | None = None
    missing: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Validated release settings.

    Attributes:
        github_token: Token used for the GitHub API.
        build_path: Directory produced by the build, archived as the asset.
        build_command: Command line that runs the build.
    """

    github_token: str
    build_path: str
    build_command: str

    def __repr__(self) -> str:
        # Keep the token out of tracebacks and debug output.
        return (
            f"ReleaseConfig(github_token='***', build_path={self.build_path!r}, "
            f"build_command={self.build_command!r})"
        )


def parse_env_text(text: str) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines.

    Blank lines, ``#`` comments and lines without ``=`` are skipped. Values
    are stripped and lose any surrounding single or double quotes. Later
    lines win over earlier ones.
    """
    values: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip().strip("\"'")
    return values


def _read_file(path: Path, console: ConsoleProtocol | None) -> Result[dict[str, str], ConfigError]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        if console is not None:
            console.warning(f"{path} not found")
        return Ok({})
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(message=f"failed to read {path}: {e}", path=path))
    return Ok(parse_env_text(text))


def load_config(
    path: Path = Path(DEFAULT_ENV_FILE),
    *,
    environ: Mapping[str, str] | None = None,
    console: ConsoleProtocol | None = None,
) -> Result[ReleaseConfig, ConfigError]:
    """Resolve the release configuration.

    A non-empty value from the file wins; otherwise the environment
    variable of the same name is used. Validation runs once both sources
    have been consulted, so a single error lists every missing key.

    Args:
        path: Configuration file. A missing file only produces a warning.
        environ: Environment mapping (defaults to ``os.environ``).
        console: Receives the missing-file warning.

    Returns:
        Ok(ReleaseConfig) or Err(ConfigError).
    """
    env = os.environ if environ is None else environ

    file_result = _read_file(path, console)
    if isinstance(file_result, Err):
        return file_result
    file_values = file_result.value

    resolved: dict[str, str] = {}
    for key in REQUIRED_KEYS:
        resolved[key] = file_values.get(key, "") or env.get(key, "").strip()

    missing = tuple(key for key in REQUIRED_KEYS if not resolved[key])
    if missing:
        return Err(
            ConfigError(
                message=f"missing required configuration: {', '.join(missing)}",
                path=path,
                missing=missing,
            )
        )

    return Ok(
        ReleaseConfig(
            github_token=resolved[ENV_GITHUB_TOKEN],
            build_path=resolved[ENV_BUILD_PATH],
            build_command=resolved[ENV_BUILD_COMMAND],
        )
    )
