"""Archive extraction via the system ``unzip`` and ``tar`` tools."""

from __future__ import annotations

from pathlib import Path

from .runner import Runner, run_command


class Archiver:
    """Extracts zip and gzip-compressed tar archives into directories."""

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner = runner or run_command

    def unzip(self, archive: Path, destination: Path) -> None:
        destination.mkdir(parents=True, exist_ok=True)
        self._runner(["unzip", "-qq", str(archive), "-d", str(destination)])

    def untar(self, archive: Path, destination: Path) -> None:
        destination.mkdir(parents=True, exist_ok=True)
        self._runner(["tar", "-C", str(destination), "-xzf", str(archive)])


__all__ = ["Archiver"]
