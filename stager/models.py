"""Core data models shared across stager components."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

_BUILDPACK_ARCHIVE = re.compile(r"^([0-9a-f]{32})\.zip$", re.IGNORECASE)


@dataclass(frozen=True)
class StagingRequest:
    """Immutable description of one staging run."""

    build_dir: Path
    cache_dir: Path
    cache_path: Path
    metadata_path: Path
    droplet_path: Path
    buildpacks_dir: Path
    app_name: str = ""
    app_zip: Optional[Path] = None
    app_dir: Optional[Path] = None
    buildpack_order: Tuple[str, ...] = ()
    skip_detect: bool = False
    builder_args: Tuple[str, ...] = ()

    @property
    def cache_tar_dir(self) -> Path:
        return self.cache_path.parent

    @property
    def metadata_dir(self) -> Path:
        return self.metadata_path.parent

    @property
    def droplet_dir(self) -> Path:
        return self.droplet_path.parent

    @property
    def buildpack_config(self) -> Path:
        return self.buildpacks_dir / "config.json"

    @property
    def has_explicit_order(self) -> bool:
        return "".join(self.buildpack_order) != ""


@dataclass(frozen=True)
class BuildpackEntry:
    """A buildpack archive in the registry, keyed by its checksum."""

    checksum: str
    archive: Path
    destination: Path

    @classmethod
    def from_filename(
        cls, filename: str, registry_dir: Path, buildpacks_dir: Path
    ) -> Optional["BuildpackEntry"]:
        """Return an entry for ``<checksum>.zip`` names, ``None`` otherwise."""
        match = _BUILDPACK_ARCHIVE.match(filename)
        if match is None:
            return None
        checksum = match.group(1).lower()
        return cls(
            checksum=checksum,
            archive=registry_dir / filename,
            destination=buildpacks_dir / checksum,
        )


@dataclass
class AppMetadata:
    name: str
    sha: str


@dataclass
class PackMetadata:
    """Build provenance recorded under ``pack_metadata``."""

    app: AppMetadata

    def to_dict(self) -> Dict[str, Any]:
        return {"app": {"name": self.app.name, "sha": self.app.sha}}


@dataclass
class StagingResult:
    """Outcome of a successful staging run."""

    app_version: str
    buildpack_order: Optional[str] = None
    unpacked_buildpacks: List[BuildpackEntry] = field(default_factory=list)
    skipped_buildpacks: List[BuildpackEntry] = field(default_factory=list)


__all__ = [
    "AppMetadata",
    "BuildpackEntry",
    "PackMetadata",
    "StagingRequest",
    "StagingResult",
]
