"""Version-control revision lookup for application directories."""

from __future__ import annotations

import subprocess
from pathlib import Path

from ..logging import get_logger
from .runner import Runner, run_command


class RevisionResolver:
    """Returns the checked-out git commit of a directory, if any."""

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner = runner or run_command
        self.logger = get_logger("revision")

    def revision(self, directory: Path) -> str:
        """Return ``HEAD`` for ``directory`` or an empty string when unknown."""
        try:
            output = self._runner(
                ["git", "-C", str(directory), "rev-parse", "HEAD"],
                capture_output=True,
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            self.logger.debug("No git revision for %s: %s", directory, exc)
            return ""
        return output.strip()


__all__ = ["RevisionResolver"]
