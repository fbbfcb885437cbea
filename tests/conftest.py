from __future__ import annotations

import logging
from pathlib import Path

import pytest

from stager.models import StagingRequest
from tests._fixtures.fakes import ExtractingArchiver, RecordingRunner


@pytest.fixture
def archiver() -> ExtractingArchiver:
    return ExtractingArchiver()


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def request_factory(tmp_path: Path):
    """Build a StagingRequest rooted under tmp_path with optional overrides."""

    def factory(**overrides) -> StagingRequest:
        fields = {
            "build_dir": tmp_path / "app",
            "cache_dir": tmp_path / "cache",
            "cache_path": tmp_path / "output-cache" / "cache.tgz",
            "metadata_path": tmp_path / "result" / "result.json",
            "droplet_path": tmp_path / "droplet" / "droplet.tgz",
            "buildpacks_dir": tmp_path / "buildpacks",
            "app_name": "myapp",
        }
        fields.update(overrides)
        return StagingRequest(**fields)

    return factory


@pytest.fixture(autouse=True)
def _reset_stager_logger():
    """Undo configure_logging so caplog keeps seeing stager records."""
    yield
    logger = logging.getLogger("stager")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
