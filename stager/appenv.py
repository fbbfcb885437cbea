"""Staging environment variables presented to the builder."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .config import StagerConfig
from .errors import EnvironmentFailure

DEFAULT_MEMORY_MB = 1024
DEFAULT_DISK_MB = 1024
DEFAULT_FDS = 16384


@dataclass(frozen=True)
class AppEnvironment:
    """What the platform would tell a buildpack about the app being staged."""

    name: str
    stack: str
    home: Path
    user: str
    memory_mb: int = DEFAULT_MEMORY_MB
    disk_mb: int = DEFAULT_DISK_MB
    fds: int = DEFAULT_FDS
    services: str = "{}"
    uris: List[str] = field(default_factory=list)

    @classmethod
    def from_environ(
        cls, environ: Mapping[str, str], config: StagerConfig | None = None
    ) -> "AppEnvironment":
        config = config or StagerConfig()
        name = environ.get("PACK_APP_NAME", "") or "app"

        services = environ.get("VCAP_SERVICES", "") or "{}"
        try:
            json.loads(services)
        except json.JSONDecodeError as exc:
            raise EnvironmentFailure("parse VCAP_SERVICES", exc) from exc

        uris = [uri.strip() for uri in environ.get("PACK_APP_URIS", "").split(",")]
        return cls(
            name=name,
            stack=environ.get("CF_STACK", "") or config.default_stack,
            home=config.home_dir,
            user=config.account,
            memory_mb=_limit(environ, "PACK_APP_MEMORY", DEFAULT_MEMORY_MB),
            disk_mb=_limit(environ, "PACK_APP_DISK", DEFAULT_DISK_MB),
            fds=_limit(environ, "PACK_APP_FDS", DEFAULT_FDS),
            services=services,
            uris=[uri for uri in uris if uri],
        )

    @property
    def app_id(self) -> str:
        return str(uuid.uuid5(uuid.NAMESPACE_URL, f"pack:{self.name}"))

    def vcap_application(self) -> Dict[str, Any]:
        return {
            "application_id": self.app_id,
            "application_name": self.name,
            "application_uris": list(self.uris),
            "application_version": str(uuid.uuid5(uuid.NAMESPACE_URL, self.app_id)),
            "limits": {"disk": self.disk_mb, "fds": self.fds, "mem": self.memory_mb},
            "name": self.name,
            "space_id": str(uuid.uuid5(uuid.NAMESPACE_URL, "pack:space")),
            "space_name": "pack-space",
            "uris": list(self.uris),
            "version": str(uuid.uuid5(uuid.NAMESPACE_URL, self.app_id)),
        }

    def stage(self) -> Dict[str, str]:
        """Return the variables to layer over the parent environment."""
        return {
            "CF_STACK": self.stack,
            "HOME": str(self.home),
            "LANG": "en_US.UTF-8",
            "MEMORY_LIMIT": f"{self.memory_mb}m",
            "USER": self.user,
            "VCAP_APPLICATION": json.dumps(self.vcap_application(), sort_keys=True),
            "VCAP_SERVICES": self.services,
        }


def _limit(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key, "").strip()
    if not raw:
        return default
    if raw.lower().endswith(("m", "mb")):
        raw = raw.lower().rstrip("b").rstrip("m")
    try:
        value = int(raw)
    except ValueError as exc:
        raise EnvironmentFailure(f"parse {key}", exc) from exc
    if value <= 0:
        raise EnvironmentFailure(f"parse {key}", f"must be positive, got {value}")
    return value


__all__ = ["AppEnvironment"]
