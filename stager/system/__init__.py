"""Narrow wrappers around the external tools a staging run shells out to."""

from .accounts import Account, AccountResolver
from .archive import Archiver
from .build import BuildRunner
from .ownership import OwnershipSetter
from .revision import RevisionResolver
from .runner import Runner, run_command

__all__ = [
    "Account",
    "AccountResolver",
    "Archiver",
    "BuildRunner",
    "OwnershipSetter",
    "RevisionResolver",
    "Runner",
    "run_command",
]
