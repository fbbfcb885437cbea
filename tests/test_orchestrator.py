"""Tests for stager.orchestrator."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from stager.builder import PrivilegedBuildInvoker
from stager.config import StagerConfig
from stager.content import ContentResolver
from stager.errors import BuildFailed, CacheCorrupt, ConfigParseError, InvalidInput
from stager.orchestrator import Stager
from stager.system import OwnershipSetter, RevisionResolver
from tests._fixtures.fakes import (
    ExtractingArchiver,
    FakeAccounts,
    RecordingBuildRunner,
    RecordingRunner,
    write_tgz,
    write_zip,
)

CHECKSUM = "0123456789abcdef0123456789abcdef"


class Harness:
    """Wires a Stager to fakes rooted under a temporary directory."""

    def __init__(self, tmp_path: Path, build_returncode: int = 0) -> None:
        self.config = StagerConfig(
            registry_dir=tmp_path / "registry",
            shared_tmp_dir=tmp_path / "home" / "tmp",
            builder_path=Path("/lifecycle/builder"),
        )
        self.chown = RecordingRunner()
        self.archiver = ExtractingArchiver()
        self.build_runner = RecordingBuildRunner(returncode=build_returncode)
        ownership = OwnershipSetter(self.config.account, runner=self.chown)
        invoker = PrivilegedBuildInvoker(
            self.config,
            ownership,
            accounts=FakeAccounts(),
            runner=self.build_runner,
            environ={"PATH": "/usr/bin"},
        )
        content = ContentResolver(
            archiver=self.archiver,
            revisions=RevisionResolver(runner=RecordingRunner(fail_on=["git"])),
        )
        self.stager = Stager(
            self.config,
            content=content,
            invoker=invoker,
            archiver=self.archiver,
            ownership=ownership,
        )

    def seed_registry(self, names) -> None:
        for name in names:
            write_zip(self.config.registry_dir / f"{CHECKSUM[:-1]}{name}.zip", {"bin/detect": name})


def _seed_app(root: Path) -> None:
    root.mkdir(parents=True, exist_ok=True)
    (root / "app.rb").write_text("puts 'hi'\n", encoding="utf-8")


def _write_buildpack_config(request, names) -> None:
    request.buildpacks_dir.mkdir(parents=True, exist_ok=True)
    request.buildpack_config.write_text(
        json.dumps([{"name": name} for name in names]), encoding="utf-8"
    )


def test_stage_runs_full_pipeline(tmp_path: Path, request_factory) -> None:
    harness = Harness(tmp_path)
    harness.seed_registry(["a", "b"])
    app_dir = tmp_path / "source"
    _seed_app(app_dir)
    request = request_factory(app_dir=app_dir, builder_args=("-buildDir", "x"))
    _write_buildpack_config(request, ["ruby", "node"])

    result = harness.stager.stage(request)

    assert (request.build_dir / "app.rb").exists()
    assert result.buildpack_order == "ruby,node"
    assert sorted(entry.checksum[-1] for entry in result.unpacked_buildpacks) == ["a", "b"]
    assert harness.build_runner.calls[0]["argv"] == [
        "/lifecycle/builder",
        "-buildDir",
        "x",
        "-buildpackOrder",
        "ruby,node",
    ]
    metadata = json.loads(request.metadata_path.read_text(encoding="utf-8"))
    assert metadata["pack_metadata"] == {"app": {"name": "myapp", "sha": result.app_version}}


def test_stage_chowns_every_path_before_build(tmp_path: Path, request_factory) -> None:
    harness = Harness(tmp_path)
    app_dir = tmp_path / "source"
    _seed_app(app_dir)
    request = request_factory(app_dir=app_dir, skip_detect=True)

    harness.stager.stage(request)

    assert harness.chown.calls == [
        ["chown", "vcap:vcap", str(request.droplet_dir)],
        ["chown", "vcap:vcap", str(request.metadata_dir)],
        ["chown", "vcap:vcap", str(request.cache_tar_dir)],
        ["chown", "vcap:vcap", str(request.metadata_path)],
        ["chown", "-R", "vcap:vcap", str(request.build_dir)],
        ["chown", "-R", "vcap:vcap", str(request.cache_dir)],
        ["chown", "-R", "vcap:vcap", str(harness.config.shared_tmp_dir)],
        ["chown", "vcap", "/dev/stdout", "/dev/stderr"],
    ]


def test_stage_with_archive_records_archive_digest(tmp_path: Path, request_factory) -> None:
    harness = Harness(tmp_path)
    archive = write_zip(tmp_path / "app.zip", {"index.js": "1"})
    request = request_factory(app_zip=archive, buildpack_order=("nodejs_buildpack",))

    result = harness.stager.stage(request)

    assert len(result.app_version) == 40
    assert (request.build_dir / "index.js").exists()
    assert "-buildpackOrder" not in harness.build_runner.calls[0]["argv"]
    metadata = json.loads(request.metadata_path.read_text(encoding="utf-8"))
    assert metadata["pack_metadata"]["app"]["sha"] == result.app_version


def test_stage_restores_cache(tmp_path: Path, request_factory) -> None:
    harness = Harness(tmp_path)
    app_dir = tmp_path / "source"
    _seed_app(app_dir)
    previous = tmp_path / "previous"
    previous.mkdir()
    (previous / "deps.txt").write_text("cached", encoding="utf-8")
    request = request_factory(app_dir=app_dir, skip_detect=True)
    write_tgz(request.cache_path, previous)

    harness.stager.stage(request)

    assert (request.cache_dir / "deps.txt").read_text(encoding="utf-8") == "cached"


def test_skip_detect_does_not_need_buildpack_config(tmp_path: Path, request_factory) -> None:
    harness = Harness(tmp_path)
    app_dir = tmp_path / "source"
    _seed_app(app_dir)

    result = harness.stager.stage(request_factory(app_dir=app_dir, skip_detect=True))

    assert result.buildpack_order is None
    assert "-buildpackOrder" not in harness.build_runner.calls[0]["argv"]


def test_missing_buildpack_config_stops_before_build(tmp_path: Path, request_factory) -> None:
    harness = Harness(tmp_path)
    app_dir = tmp_path / "source"
    _seed_app(app_dir)

    with pytest.raises(ConfigParseError) as excinfo:
        harness.stager.stage(request_factory(app_dir=app_dir))

    assert "determine buildpack names" in str(excinfo.value)
    assert harness.build_runner.calls == []


def test_failed_build_does_not_write_metadata(tmp_path: Path, request_factory) -> None:
    harness = Harness(tmp_path, build_returncode=1)
    app_dir = tmp_path / "source"
    _seed_app(app_dir)
    request = request_factory(app_dir=app_dir, skip_detect=True)

    with pytest.raises(BuildFailed):
        harness.stager.stage(request)

    assert "pack_metadata" not in json.loads(request.metadata_path.read_text(encoding="utf-8"))


def test_invalid_input_stops_everything(tmp_path: Path, request_factory) -> None:
    harness = Harness(tmp_path)
    request = request_factory()

    with pytest.raises(InvalidInput):
        harness.stager.stage(request)

    assert harness.chown.calls == []
    assert harness.build_runner.calls == []
    assert not request.metadata_path.exists()


def test_corrupt_cache_stops_before_provisioning(tmp_path: Path, request_factory) -> None:
    harness = Harness(tmp_path)
    app_dir = tmp_path / "source"
    _seed_app(app_dir)
    request = request_factory(app_dir=app_dir)
    request.cache_path.parent.mkdir(parents=True)
    request.cache_path.write_bytes(b"garbage")

    with pytest.raises(CacheCorrupt):
        harness.stager.stage(request)

    assert harness.chown.calls == []
    assert harness.build_runner.calls == []
