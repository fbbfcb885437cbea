"""Ownership changes for directories the unprivileged builder touches."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from .runner import Runner, run_command

STD_STREAMS: Sequence[str] = ("/dev/stdout", "/dev/stderr")


class OwnershipSetter:
    """Hands paths over to a fixed account with ``chown``."""

    def __init__(self, account: str, runner: Runner | None = None) -> None:
        self.account = account
        self._runner = runner or run_command

    def chown(self, path: Path, *, recursive: bool = False) -> None:
        args = ["chown"]
        if recursive:
            args.append("-R")
        args.extend([f"{self.account}:{self.account}", str(path)])
        self._runner(args)

    def chown_std_streams(self) -> None:
        """Give the account write access to our inherited stdout/stderr."""
        self._runner(["chown", self.account, *STD_STREAMS])


__all__ = ["OwnershipSetter", "STD_STREAMS"]
