"""Resolve where the projects section lives on disk.

Two candidate locations are consulted in fixed order: the primary sections
directory next to the install and a fallback under the runtime temp root.
Writes must land somewhere durable or fail loudly; reads never fail just
because nothing has been saved yet.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from sections_api.core.settings import Settings

LOGGER = logging.getLogger(__name__)

PRIMARY = "primary"
FALLBACK = "fallback"


class StorageUnavailable(Exception):
    """Neither the primary nor the fallback directory is writable."""


@dataclass(frozen=True)
class ProjectsArtifact:
    content: str
    path: Path
    location: str

    @property
    def size(self) -> int:
        return len(self.content.encode("utf-8"))


def ensure_directory(path: Path) -> Path:
    """Create ``path`` if missing and make sure the process can write to it."""

    path.mkdir(parents=True, exist_ok=True)
    if not os.access(path, os.W_OK):
        raise PermissionError(f"directory is not writable: {path}")
    return path


class StorageResolver:
    def __init__(self, primary_dir: Path, fallback_dir: Path, filename: str) -> None:
        self.primary_dir = Path(primary_dir)
        self.fallback_dir = Path(fallback_dir)
        self.primary_file = self.primary_dir / filename
        self.fallback_file = self.fallback_dir / filename

    @classmethod
    def from_settings(cls, cfg: Settings) -> "StorageResolver":
        return cls(cfg.primary_dir, cfg.fallback_dir, cfg.artifact_name)

    def location_of(self, path: Path) -> str:
        return PRIMARY if Path(path) == self.primary_file else FALLBACK

    def resolve_writable_path(self) -> Path:
        try:
            ensure_directory(self.primary_dir)
            return self.primary_file
        except OSError as exc:
            LOGGER.warning(
                "Primary sections directory is not writable; using fallback",
                extra={"primary": str(self.primary_dir), "reason": str(exc)},
            )

        try:
            ensure_directory(self.fallback_dir)
        except OSError as exc:
            raise StorageUnavailable(
                "no writable location for the projects section"
            ) from exc
        return self.fallback_file

    def resolve_readable_path(self) -> Path:
        # The fallback is returned even when it does not exist: the caller
        # treats a missing file as empty content.
        if self.primary_file.exists():
            return self.primary_file
        return self.fallback_file

    def read_artifact(self) -> ProjectsArtifact:
        path = self.resolve_readable_path()
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            content = ""
        except OSError:
            LOGGER.warning(
                "Could not read projects section; serving empty content",
                exc_info=True,
                extra={"path": str(path)},
            )
            content = ""
        return ProjectsArtifact(content=content, path=path, location=self.location_of(path))

    def write_artifact(self, content: str) -> ProjectsArtifact:
        path = self.resolve_writable_path()
        # No lock: concurrent writers race and the last one to finish wins.
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        LOGGER.info(
            "Projects section saved",
            extra={"location": self.location_of(path), "bytes": len(content.encode("utf-8"))},
        )
        return ProjectsArtifact(content=content, path=path, location=self.location_of(path))
