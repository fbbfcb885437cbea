"""Deployment configuration for stager (stager.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("/etc/pack/stager.yml")
CONFIG_ENV_VAR = "PACK_STAGER_CONFIG"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class StagerConfig:
    """Conventions of the container image the stager runs in."""

    account: str = "vcap"
    registry_dir: Path = Path("/buildpacks")
    shared_tmp_dir: Path = Path("/home/vcap/tmp")
    builder_path: Path = Path("/lifecycle/builder")
    home_dir: Path = Path("/home/vcap")
    default_stack: str = "cflinuxfs3"


def resolve_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return the config location, honouring ``PACK_STAGER_CONFIG``."""
    env = os.environ if environ is None else environ
    override = env.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(config_path: Path | None = None) -> StagerConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    path = config_path if config_path is not None else resolve_config_path()
    if not path.exists():
        return StagerConfig()

    data = _read_config(path)
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")

    defaults = StagerConfig()
    return StagerConfig(
        account=_as_str(data.get("account")) or defaults.account,
        registry_dir=_as_path(data.get("registry_dir")) or defaults.registry_dir,
        shared_tmp_dir=_as_path(data.get("shared_tmp_dir")) or defaults.shared_tmp_dir,
        builder_path=_as_path(data.get("builder_path")) or defaults.builder_path,
        home_dir=_as_path(data.get("home_dir")) or defaults.home_dir,
        default_stack=_as_str(data.get("default_stack")) or defaults.default_stack,
    )


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        text = str(value).strip()
        return text or None
    return None


def _as_path(value: Any) -> Optional[Path]:
    text = _as_str(value)
    return Path(text) if text else None


def config_as_dict(config: StagerConfig) -> Dict[str, str]:
    """Return a printable view of the effective configuration."""
    return {
        "account": config.account,
        "registry_dir": str(config.registry_dir),
        "shared_tmp_dir": str(config.shared_tmp_dir),
        "builder_path": str(config.builder_path),
        "home_dir": str(config.home_dir),
        "default_stack": config.default_stack,
    }


__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "StagerConfig",
    "config_as_dict",
    "load_config",
    "resolve_config_path",
]
