"""Buildpack provisioning from the shared registry and order resolution."""

from __future__ import annotations

import json
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .errors import ConfigParseError, ProvisionFailure
from .logging import get_logger
from .models import BuildpackEntry
from .system import Archiver


@dataclass
class ProvisionReport:
    """Which registry entries were unpacked, reused or skipped."""

    unpacked: List[BuildpackEntry] = field(default_factory=list)
    existing: List[BuildpackEntry] = field(default_factory=list)
    failed: List[BuildpackEntry] = field(default_factory=list)


class BuildpackProvisioner:
    """Unpacks ``<checksum>.zip`` archives into ``<buildpacks_dir>/<checksum>``."""

    def __init__(self, archiver: Archiver | None = None) -> None:
        self.archiver = archiver or Archiver()
        self.logger = get_logger("buildpacks")

    def entries(self, registry_dir: Path, buildpacks_dir: Path) -> List[BuildpackEntry]:
        """List validly named archives in the registry, sorted by filename."""
        try:
            names = sorted(child.name for child in registry_dir.iterdir())
        except FileNotFoundError:
            self.logger.debug("No buildpack registry at %s", registry_dir)
            return []
        except OSError as exc:
            raise ProvisionFailure(f"setup buildpacks {registry_dir}", exc) from exc

        found: List[BuildpackEntry] = []
        for name in names:
            entry = BuildpackEntry.from_filename(name, registry_dir, buildpacks_dir)
            if entry is None:
                self.logger.debug("Ignoring %s in buildpack registry", name)
                continue
            found.append(entry)
        return found

    def provision(self, registry_dir: Path, buildpacks_dir: Path) -> ProvisionReport:
        report = ProvisionReport()
        for entry in self.entries(registry_dir, buildpacks_dir):
            if _has_contents(entry.destination):
                report.existing.append(entry)
                continue
            try:
                self.archiver.unzip(entry.archive, entry.destination)
            except (OSError, subprocess.CalledProcessError) as exc:
                # Detection runs without this buildpack.
                shutil.rmtree(entry.destination, ignore_errors=True)
                self.logger.warning(
                    "Skipping buildpack %s: failed to unzip %s to %s: %s",
                    entry.checksum,
                    entry.archive,
                    entry.destination,
                    exc,
                )
                report.failed.append(entry)
                continue
            report.unpacked.append(entry)
        self.logger.info(
            "Buildpacks: %d unpacked, %d already present, %d skipped",
            len(report.unpacked),
            len(report.existing),
            len(report.failed),
        )
        return report


def _has_contents(directory: Path) -> bool:
    try:
        return any(directory.iterdir())
    except OSError:
        return False


def resolve_buildpack_order(config_path: Path, key: str = "name") -> str:
    """Return the comma-joined ``key`` values of the JSON list at ``config_path``."""
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigParseError(f"open {config_path}", exc) from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigParseError(f"decode {config_path}", exc) from exc

    if not isinstance(payload, list):
        raise ConfigParseError(f"decode {config_path}", "expected a JSON array")

    names: List[str] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict) or not isinstance(item.get(key), str):
            raise ConfigParseError(
                f"decode {config_path}", f"entry {index} has no string {key!r}"
            )
        names.append(item[key])
    return ",".join(names)


__all__ = ["BuildpackProvisioner", "ProvisionReport", "resolve_buildpack_order"]
