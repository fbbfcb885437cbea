"""Resolving application source into the build directory."""

from __future__ import annotations

import hashlib
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from .appfiles import app_files_in_dir, copy_files
from .errors import CopyFailure, InvalidInput
from .logging import get_logger
from .models import StagingRequest
from .system import Archiver, RevisionResolver


def file_sha(path: Path) -> str:
    """Return the SHA-1 of the file's raw bytes, or ``""`` if unreadable."""
    digest = hashlib.sha1()
    try:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(1024 * 1024), b""):
                digest.update(chunk)
    except OSError:
        return ""
    return digest.hexdigest()


def same_dir(*dirs: Path) -> bool:
    """Return True when every path resolves to the same absolute location."""
    resolved = {os.path.abspath(d) for d in dirs}
    return len(resolved) <= 1


class ContentResolver:
    """Populates the build directory and fingerprints the application."""

    def __init__(
        self,
        archiver: Archiver | None = None,
        revisions: RevisionResolver | None = None,
    ) -> None:
        self.archiver = archiver or Archiver()
        self.revisions = revisions or RevisionResolver()
        self.logger = get_logger("content")

    def resolve(self, request: StagingRequest) -> str:
        """Copy the application into ``request.build_dir`` and return its version."""
        if request.app_zip is not None:
            version = file_sha(request.app_zip)
            self.logger.info("Extracting app archive %s", request.app_zip)
            try:
                self.copy_app_zip(request.app_zip, request.build_dir)
            except CopyFailure as exc:
                raise CopyFailure("extract app zip", exc) from exc
            return version

        if request.app_dir is not None:
            version = self.revisions.revision(request.app_dir)
            if same_dir(request.app_dir, request.build_dir):
                self.logger.debug("App directory is the build directory; nothing to copy")
                return version
            self.logger.info("Copying app directory %s", request.app_dir)
            try:
                self.copy_app_dir(request.app_dir, request.build_dir)
            except CopyFailure as exc:
                raise CopyFailure("copy app directory", exc) from exc
            return version

        raise InvalidInput("parse app directory")

    def copy_app_dir(self, src: Path, dst: Path) -> None:
        try:
            files = app_files_in_dir(src)
        except (OSError, UnicodeDecodeError) as exc:
            raise CopyFailure(f"analyze app in {src}", exc) from exc
        self.logger.debug("Copying %d entries from %s to %s", len(files), src, dst)
        try:
            copy_files(files, src, dst)
        except OSError as exc:
            raise CopyFailure(f"copy app from {src} to {dst}", exc) from exc

    def copy_app_zip(self, src: Path, dst: Path) -> None:
        try:
            tmp_dir = Path(tempfile.mkdtemp(prefix="pack"))
        except OSError as exc:
            raise CopyFailure("create temp dir", exc) from exc
        try:
            try:
                self.archiver.unzip(src, tmp_dir)
            except (OSError, subprocess.CalledProcessError) as exc:
                raise CopyFailure(f"unzip app from {src} to {tmp_dir}", exc) from exc
            self.copy_app_dir(tmp_dir, dst)
        finally:
            shutil.rmtree(tmp_dir, ignore_errors=True)


__all__ = ["ContentResolver", "file_sha", "same_dir"]
