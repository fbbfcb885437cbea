"""Application file selection and copying (.cfignore aware)."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

DEFAULT_IGNORES: Sequence[str] = (
    ".cfignore",
    "/manifest.yml",
    ".gitignore",
    ".git",
    ".hg",
    ".svn",
    "_darcs",
    ".DS_Store",
)

_IGNORE_FILENAME = ".cfignore"


@dataclass(frozen=True)
class AppFile:
    """A path relative to the application root that should be staged."""

    path: str
    is_dir: bool
    is_symlink: bool = False


@dataclass
class IgnoreRule:
    """Represents a single pattern from the default list or .cfignore."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return False

        for part in rel_path.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def build_ignore_rule(pattern: str) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern or pattern.startswith("#"):
        return None

    negate = pattern.startswith("!")
    if negate:
        pattern = pattern[1:]

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern.rstrip("/")

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern.lstrip("/")

    if not pattern:
        return None

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def load_ignore_rules(root: Path) -> List[IgnoreRule]:
    """Return the default rules followed by those in ``<root>/.cfignore``."""
    rules = [rule for rule in map(build_ignore_rule, DEFAULT_IGNORES) if rule]
    ignore_file = root / _IGNORE_FILENAME
    if ignore_file.is_file():
        for line in ignore_file.read_text(encoding="utf-8").splitlines():
            rule = build_ignore_rule(line)
            if rule is not None:
                rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _walk_error(exc: OSError) -> None:
    raise exc


def app_files_in_dir(root: Path) -> List[AppFile]:
    """List the files under ``root`` that belong in the build directory.

    Directories come before their contents. Symlinks are reported as
    entries of their own and never followed.
    """
    root = Path(root)
    if not root.is_dir():
        raise NotADirectoryError(f"Application path is not a directory: {root}")
    rules = load_ignore_rules(root)
    return list(_iter_app_files(root, rules))


def _iter_app_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[AppFile]:
    for dirpath, dirnames, filenames in os.walk(root, onerror=_walk_error):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept_dirs = []
        for name in sorted(dirnames):
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            is_link = (current_dir / name).is_symlink()
            if _should_ignore(rel_path, not is_link, rules):
                continue
            if is_link:
                yield AppFile(path=rel_path, is_dir=False, is_symlink=True)
                continue
            kept_dirs.append(name)
            yield AppFile(path=rel_path, is_dir=True)
        dirnames[:] = kept_dirs

        for filename in sorted(filenames):
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            is_link = (current_dir / filename).is_symlink()
            yield AppFile(path=rel_path, is_dir=False, is_symlink=is_link)


def copy_files(files: Sequence[AppFile], src: Path, dst: Path) -> None:
    """Copy ``files`` from ``src`` into ``dst``, overwriting existing entries."""
    dst.mkdir(parents=True, exist_ok=True)
    for entry in files:
        source = src / entry.path
        target = dst / entry.path
        if entry.is_dir:
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        if entry.is_symlink:
            if target.is_symlink() or target.exists():
                target.unlink()
            os.symlink(os.readlink(source), target)
            continue
        if target.is_symlink():
            target.unlink()
        shutil.copy2(source, target)


__all__ = [
    "AppFile",
    "DEFAULT_IGNORES",
    "IgnoreRule",
    "app_files_in_dir",
    "build_ignore_rule",
    "copy_files",
    "load_ignore_rules",
]
