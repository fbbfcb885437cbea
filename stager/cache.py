"""Restoring the persisted build-artifacts cache."""

from __future__ import annotations

import subprocess

from .errors import CacheCorrupt
from .logging import get_logger
from .models import StagingRequest
from .system import Archiver


class CacheSynchronizer:
    """Extracts the previous run's cache tarball into the cache directory."""

    def __init__(self, archiver: Archiver | None = None) -> None:
        self.archiver = archiver or Archiver()
        self.logger = get_logger("cache")

    def sync(self, request: StagingRequest) -> bool:
        """Return True if a cache archive was restored, False if none existed."""
        if not request.cache_path.exists():
            self.logger.debug("No build cache at %s", request.cache_path)
            return False
        self.logger.info("Restoring build cache from %s", request.cache_path)
        try:
            self.archiver.untar(request.cache_path, request.cache_dir)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise CacheCorrupt(
                f"extract cache {request.cache_path} to {request.cache_dir}", exc
            ) from exc
        return True


__all__ = ["CacheSynchronizer"]
