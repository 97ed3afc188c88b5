"""Package the build output into a zip archive.

Entry names are paths relative to the build directory, always with
forward slashes. Only regular files are stored; directories are implied
by the entry names.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

from greleaser.core.result import Err, Ok, Result
from greleaser.output.console import ConsoleProtocol, Style
from greleaser.services.release.errors import ReleaseError, Stage


@dataclass(frozen=True, slots=True)
class ArchiveInfo:
    path: Path
    entries: tuple[str, ...]
    size: int


def _archive_error(message: str, hint: str | None = None) -> Err[ReleaseError]:
    return Err(ReleaseError(stage=Stage.archive, kind="archive_failed", message=message, hint=hint))


def _raise(e: OSError) -> None:
    raise e


def collect_files(source: Path) -> list[tuple[Path, str]]:
    """Regular files under ``source`` paired with their entry names, sorted by entry name.

    Raises:
        OSError: A directory cannot be listed, or an entry is neither a
            directory nor a regular file (dangling link, socket, fifo).
    """
    out: list[tuple[Path, str]] = []
    for dirpath, _dirnames, filenames in source.walk(on_error=_raise):
        for name in filenames:
            p = dirpath / name
            # is_file() follows links: a link to a regular file is archived as that file.
            if not p.is_file():
                raise OSError(f"{p} is not a regular file")
            out.append((p, p.relative_to(source).as_posix()))
    out.sort(key=lambda item: item[1])
    return out


def create_archive(
    source: Path,
    dest: Path,
    *,
    console: ConsoleProtocol,
) -> Result[ArchiveInfo, ReleaseError]:
    """Zip every regular file under ``source`` into ``dest``.

    On an I/O error the partially written archive is left on disk; the
    caller owns ``dest`` and removes it.
    """
    console.header(f"Creating ZIP archive from {source}...")

    if not source.exists():
        return _archive_error(f"build directory {source} not found")
    if not source.is_dir():
        return _archive_error(f"build path {source} is not a directory")

    try:
        files = collect_files(source)
    except OSError as e:
        return _archive_error(f"failed to read {source}: {e}")

    entries: list[str] = []
    try:
        # Build outputs can carry mtime=0; zip cannot represent dates before 1980.
        with ZipFile(dest, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
            for src, arc in files:
                zf.write(src, arcname=arc)
                entries.append(arc)
        size = dest.stat().st_size
    except OSError as e:
        return _archive_error(f"failed to write {dest}: {e}", hint=str(source))

    if not entries:
        console.warning(f"{source} contains no files; the archive is empty")
    console.print(f"{len(entries)} files, {size} bytes -> {dest.name}", Style.DIM)
    return Ok(ArchiveInfo(path=dest, entries=tuple(entries), size=size))
