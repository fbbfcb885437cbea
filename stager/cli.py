"""CLI entrypoint wrapping the lifecycle builder."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Mapping, NoReturn, Sequence

from .config import ConfigError, config_as_dict, load_config
from .errors import EXIT_INVALID_ARGS, StagingError
from .logging import configure_logging, get_logger
from .models import StagingRequest
from .orchestrator import Stager

_LOCAL_FLAGS = ("-v", "--verbose")

# Go's flag package accepts both -name and --name.
_PATH_FLAGS = (
    ("buildDir", "build_dir", "/tmp/app"),
    ("buildArtifactsCacheDir", "cache_dir", "/tmp/cache"),
    ("outputBuildArtifactsCache", "cache_path", "/tmp/output-cache"),
    ("outputMetadata", "metadata_path", "/tmp/result.json"),
    ("outputDroplet", "droplet_path", "/tmp/droplet"),
    ("buildpacksDir", "buildpacks_dir", "/tmp/buildpacks"),
)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_INVALID_ARGS, f"Error: failed to parse arguments: {message}\n")


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in {"1", "t", "true"}:
        return True
    if lowered in {"0", "f", "false"}:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value {value!r}")


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="stager",
        description=(
            "Stage an application for the lifecycle builder. Unrecognised "
            "arguments are passed through to the builder unchanged."
        ),
        allow_abbrev=False,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting (not forwarded).",
    )
    for flag, dest, default in _PATH_FLAGS:
        parser.add_argument(f"-{flag}", f"--{flag}", dest=dest, default=default)
    parser.add_argument(
        "-buildpackOrder",
        "--buildpackOrder",
        dest="buildpack_order",
        default="",
        help="Comma-separated buildpack names; detection order when empty.",
    )
    parser.add_argument(
        "-skipDetect",
        "--skipDetect",
        dest="skip_detect",
        nargs="?",
        const=True,
        default=False,
        type=_parse_bool,
    )
    return parser


def forwarded_args(argv: Sequence[str]) -> tuple[str, ...]:
    """Return the arguments meant for the builder."""
    return tuple(arg for arg in argv if arg not in _LOCAL_FLAGS)


def build_request(
    args: argparse.Namespace,
    builder_args: Sequence[str],
    environ: Mapping[str, str],
    cwd: Path | None,
) -> StagingRequest:
    app_zip = environ.get("PACK_APP_ZIP", "")
    app_dir = environ.get("PACK_APP_DIR", "")
    order = tuple(name.strip() for name in args.buildpack_order.split(",") if name.strip())
    return StagingRequest(
        app_name=environ.get("PACK_APP_NAME", ""),
        app_zip=Path(app_zip) if app_zip else None,
        app_dir=None if app_zip else (Path(app_dir) if app_dir else cwd),
        build_dir=Path(args.build_dir),
        cache_dir=Path(args.cache_dir),
        cache_path=Path(args.cache_path),
        metadata_path=Path(args.metadata_path),
        droplet_path=Path(args.droplet_path),
        buildpacks_dir=Path(args.buildpacks_dir),
        buildpack_order=order,
        skip_detect=bool(args.skip_detect),
        builder_args=tuple(builder_args),
    )


def _current_dir() -> Path | None:
    try:
        return Path.cwd()
    except OSError:
        return None


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for staging runs."""
    raw_args = list(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    args, unknown = parser.parse_known_args(raw_args)

    configure_logging(verbose=bool(args.verbose))
    logger = get_logger("cli")
    if unknown:
        logger.debug("Passing through builder arguments: %s", unknown)

    try:
        config = load_config()
    except ConfigError as exc:
        parser.exit(EXIT_INVALID_ARGS, f"Error: failed to load config: {exc}\n")
    logger.debug("Effective config: %s", config_as_dict(config))

    request = build_request(args, forwarded_args(raw_args), os.environ, _current_dir())

    try:
        Stager(config).stage(request)
    except StagingError as exc:
        logger.debug("Staging aborted", exc_info=True)
        parser.exit(exc.exit_code, f"Error: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
