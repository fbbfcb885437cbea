"""Subprocess helper shared by the tool wrappers."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, Mapping

Runner = Callable[..., str]


def run_command(
    args: Iterable[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    capture_output: bool = False,
) -> str:
    """Run ``args`` to completion, raising ``CalledProcessError`` on failure."""
    completed = subprocess.run(
        [str(arg) for arg in args],
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
        check=True,
        text=True,
        capture_output=capture_output,
    )
    if capture_output:
        return completed.stdout
    return ""


__all__ = ["Runner", "run_command"]
