"""Error taxonomy for staging runs and the exit codes they map to."""

from __future__ import annotations

EXIT_FAILED = 1
EXIT_INVALID_ARGS = 3
EXIT_INVALID_ENV = 4
EXIT_FAILED_BUILD = 7


class StagingError(RuntimeError):
    """Raised when a pipeline stage cannot complete.

    The message always reads ``failed to <action>`` followed by the
    underlying cause when one is known.
    """

    exit_code = EXIT_FAILED

    def __init__(self, action: str, cause: BaseException | str | None = None) -> None:
        self.action = action
        self.cause = cause
        message = f"failed to {action}"
        if cause is not None and str(cause):
            message = f"{message}: {cause}"
        super().__init__(message)


class InvalidInput(StagingError):
    """No usable application source was supplied."""

    exit_code = EXIT_INVALID_ARGS


class CopyFailure(StagingError):
    """Application files could not be enumerated, extracted or copied."""


class CacheCorrupt(StagingError):
    """The persisted build cache archive could not be extracted."""


class ProvisionFailure(StagingError):
    """A directory, ownership change or account lookup failed."""


class ConfigParseError(StagingError):
    """The buildpack configuration file is missing or malformed."""


class EnvironmentFailure(StagingError):
    """The staging environment for the builder could not be assembled."""

    exit_code = EXIT_INVALID_ENV


class BuildFailed(StagingError):
    """The external builder exited unsuccessfully."""

    exit_code = EXIT_FAILED_BUILD

    def __init__(
        self,
        action: str,
        cause: BaseException | str | None = None,
        *,
        returncode: int | None = None,
    ) -> None:
        super().__init__(action, cause)
        self.returncode = returncode


class MetadataWriteFailure(StagingError):
    """Build provenance could not be merged into the metadata file."""


__all__ = [
    "BuildFailed",
    "CacheCorrupt",
    "ConfigParseError",
    "CopyFailure",
    "EXIT_FAILED",
    "EXIT_FAILED_BUILD",
    "EXIT_INVALID_ARGS",
    "EXIT_INVALID_ENV",
    "EnvironmentFailure",
    "InvalidInput",
    "MetadataWriteFailure",
    "ProvisionFailure",
    "StagingError",
]
