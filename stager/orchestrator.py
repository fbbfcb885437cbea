"""Staging pipeline orchestration."""

from __future__ import annotations

from typing import List

from .buildpacks import BuildpackProvisioner, resolve_buildpack_order
from .builder import PrivilegedBuildInvoker
from .cache import CacheSynchronizer
from .config import StagerConfig
from .content import ContentResolver
from .errors import ConfigParseError
from .logging import get_logger
from .metadata import MetadataFinalizer
from .models import StagingRequest, StagingResult
from .provision import FilesystemProvisioner
from .system import Archiver, OwnershipSetter


class Stager:
    """Runs every staging stage in order, stopping at the first failure.

    Collaborators default to the real tool wrappers; tests pass fakes.
    """

    def __init__(
        self,
        config: StagerConfig | None = None,
        content: ContentResolver | None = None,
        cache: CacheSynchronizer | None = None,
        provisioner: FilesystemProvisioner | None = None,
        buildpacks: BuildpackProvisioner | None = None,
        invoker: PrivilegedBuildInvoker | None = None,
        finalizer: MetadataFinalizer | None = None,
        archiver: Archiver | None = None,
        ownership: OwnershipSetter | None = None,
    ) -> None:
        self.config = config or StagerConfig()
        archiver = archiver or Archiver()
        ownership = ownership or OwnershipSetter(self.config.account)
        self.content = content or ContentResolver(archiver=archiver)
        self.cache = cache or CacheSynchronizer(archiver=archiver)
        self.provisioner = provisioner or FilesystemProvisioner(ownership)
        self.buildpacks = buildpacks or BuildpackProvisioner(archiver=archiver)
        self.invoker = invoker or PrivilegedBuildInvoker(self.config, ownership)
        self.finalizer = finalizer or MetadataFinalizer()
        self.logger = get_logger("orchestrator")

    def stage(self, request: StagingRequest) -> StagingResult:
        """Produce the droplet inputs for ``request`` and record provenance."""
        self.logger.info("Staging %s into %s", request.app_name or "app", request.build_dir)

        version = self.content.resolve(request)
        self.logger.debug("App version: %r", version)

        self.cache.sync(request)

        self.provisioner.prepare_destinations(
            request.droplet_dir, request.metadata_dir, request.cache_tar_dir
        )
        self.provisioner.prepare_metadata(request.metadata_path)
        self.provisioner.prepare_sources(
            request.build_dir, request.cache_dir, self.config.shared_tmp_dir
        )

        report = self.buildpacks.provision(self.config.registry_dir, request.buildpacks_dir)

        extra_args: List[str] = []
        order = None
        if not request.has_explicit_order and not request.skip_detect:
            try:
                order = resolve_buildpack_order(request.buildpack_config)
            except ConfigParseError as exc:
                raise ConfigParseError("determine buildpack names", exc) from exc
            self.logger.info("Detecting with buildpacks: %s", order or "(none)")
            extra_args.extend(["-buildpackOrder", order])

        self.invoker.invoke(request, extra_args)
        self.finalizer.finalize(request, version)

        self.logger.info("Staging complete")
        return StagingResult(
            app_version=version,
            buildpack_order=order,
            unpacked_buildpacks=list(report.unpacked),
            skipped_buildpacks=list(report.failed),
        )


__all__ = ["Stager"]
