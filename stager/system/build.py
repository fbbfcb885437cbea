"""Spawning the external builder under an explicit identity."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Callable, Mapping, Sequence

from .accounts import Account

Spawner = Callable[..., subprocess.CompletedProcess]


class BuildRunner:
    """Runs a child with inherited stdio as ``account``.

    The child never inherits the parent's identity: user, primary group and
    supplementary groups are always set explicitly.
    """

    def __init__(self, spawner: Spawner | None = None) -> None:
        self._spawner = spawner or subprocess.run

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
        account: Account,
    ) -> None:
        """Run ``argv`` to completion; raises ``CalledProcessError`` on non-zero exit."""
        self._spawner(
            [str(arg) for arg in argv],
            cwd=str(cwd),
            env=dict(env),
            stdin=sys.stdin,
            stdout=sys.stdout,
            stderr=sys.stderr,
            user=account.uid,
            group=account.gid,
            extra_groups=[],
            check=True,
        )


__all__ = ["BuildRunner", "Spawner"]
