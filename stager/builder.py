"""Running the external builder as the unprivileged account."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Callable, Dict, Mapping, Sequence

from .appenv import AppEnvironment
from .config import StagerConfig
from .errors import BuildFailed, EnvironmentFailure, ProvisionFailure, StagingError
from .logging import get_logger
from .models import StagingRequest
from .system import Account, AccountResolver, BuildRunner, OwnershipSetter

AppEnvFactory = Callable[[Mapping[str, str]], AppEnvironment]


class PrivilegedBuildInvoker:
    """Drops to the build account and runs the lifecycle builder."""

    def __init__(
        self,
        config: StagerConfig,
        ownership: OwnershipSetter,
        accounts: AccountResolver | None = None,
        runner: BuildRunner | None = None,
        app_env: AppEnvFactory | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config
        self.ownership = ownership
        self.accounts = accounts or AccountResolver()
        self.runner = runner or BuildRunner()
        self._app_env = app_env or (lambda env: AppEnvironment.from_environ(env, config))
        self._environ = environ
        self.logger = get_logger("builder")

    @property
    def builder_path(self) -> Path:
        return self.config.builder_path

    def resolve_account(self) -> Account:
        name = self.config.account
        try:
            account = self.accounts.lookup(name)
        except (KeyError, ValueError, OSError) as exc:
            raise ProvisionFailure(f"determine {name} UID/GID", exc) from exc
        self.logger.debug("Resolved %s to uid=%d gid=%d", name, account.uid, account.gid)
        return account

    def build_env(self) -> Dict[str, str]:
        """Merge the process environment with the app's staging variables."""
        base = dict(os.environ if self._environ is None else self._environ)
        try:
            staged = self._app_env(base).stage()
        except StagingError as exc:
            raise EnvironmentFailure("setup env", exc) from exc
        except (OSError, ValueError) as exc:
            raise EnvironmentFailure("build app env", exc) from exc
        base.update(staged)
        return base

    def command(self, request: StagingRequest, extra_args: Sequence[str] = ()) -> list[str]:
        return [str(self.builder_path), *request.builder_args, *extra_args]

    def invoke(self, request: StagingRequest, extra_args: Sequence[str] = ()) -> None:
        account = self.resolve_account()
        try:
            self.ownership.chown_std_streams()
        except (OSError, subprocess.CalledProcessError) as exc:
            raise ProvisionFailure("fix permissions of stdout and stderr", exc) from exc
        env = self.build_env()

        argv = self.command(request, extra_args)
        self.logger.info("Running %s as %s in %s", self.builder_path, account.name, request.build_dir)
        self.logger.debug("Builder argv: %s", argv)
        try:
            self.runner.run(argv, cwd=request.build_dir, env=env, account=account)
        except subprocess.CalledProcessError as exc:
            raise BuildFailed("build", exc, returncode=exc.returncode) from exc
        except OSError as exc:
            raise BuildFailed("build", exc) from exc


__all__ = ["AppEnvFactory", "PrivilegedBuildInvoker"]
