"""Directory creation and ownership hand-off to the build account."""

from __future__ import annotations

import subprocess
from pathlib import Path

from .errors import ProvisionFailure
from .logging import get_logger
from .system import OwnershipSetter


class FilesystemProvisioner:
    """Creates directories and chowns them to the unprivileged account.

    Every path the builder reads or writes must pass through here before
    the builder starts.
    """

    def __init__(self, ownership: OwnershipSetter) -> None:
        self.ownership = ownership
        self.logger = get_logger("provision")

    @property
    def account(self) -> str:
        return self.ownership.account

    def prepare_destinations(self, *dirs: Path) -> None:
        """Create each directory and chown it, leaving contents alone."""
        for directory in dirs:
            self._make_dir(directory)
            self.logger.debug("chown %s to %s", directory, self.account)
            try:
                self.ownership.chown(directory)
            except (OSError, subprocess.CalledProcessError) as exc:
                raise ProvisionFailure(
                    f"chown {directory} to {self.account}:{self.account}", exc
                ) from exc

    def prepare_sources(self, *dirs: Path) -> None:
        """Create each directory and chown it together with everything inside."""
        for directory in dirs:
            self._make_dir(directory)
            self.logger.debug("chown -R %s to %s", directory, self.account)
            try:
                self.ownership.chown(directory, recursive=True)
            except (OSError, subprocess.CalledProcessError) as exc:
                raise ProvisionFailure(
                    f"recursively chown {directory} to {self.account}:{self.account}", exc
                ) from exc

    def prepare_metadata(self, path: Path) -> None:
        """Seed the metadata file with ``{}`` when it is missing or empty."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if not path.exists() or path.stat().st_size == 0:
                path.write_text("{}\n", encoding="utf-8")
        except OSError as exc:
            raise ProvisionFailure(f"initialize metadata file {path}", exc) from exc
        try:
            self.ownership.chown(path)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise ProvisionFailure(
                f"chown {path} to {self.account}:{self.account}", exc
            ) from exc

    def _make_dir(self, directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ProvisionFailure(f"make directory {directory}", exc) from exc


__all__ = ["FilesystemProvisioner"]
