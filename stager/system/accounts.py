"""Account lookup for the unprivileged build identity."""

from __future__ import annotations

import pwd
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class Account:
    name: str
    uid: int
    gid: int


class AccountResolver:
    """Resolves an account name to numeric ids via the password database."""

    def __init__(self, lookup: Callable[[str], pwd.struct_passwd] | None = None) -> None:
        self._lookup = lookup or pwd.getpwnam

    def lookup(self, name: str) -> Account:
        """Return the account for ``name``; raises ``KeyError`` when unknown."""
        entry = self._lookup(name)
        return Account(name=name, uid=int(entry.pw_uid), gid=int(entry.pw_gid))


__all__ = ["Account", "AccountResolver"]
