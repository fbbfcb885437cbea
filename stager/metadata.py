"""Merging build provenance into the staging metadata file."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from .errors import MetadataWriteFailure
from .logging import get_logger
from .models import AppMetadata, PackMetadata, StagingRequest

PACK_METADATA_KEY = "pack_metadata"


def set_json_key(path: Path, key: str, value: Any) -> None:
    """Set ``key`` in the JSON object stored at ``path``, keeping other keys.

    A missing or empty file counts as an empty object.
    """
    try:
        fd = os.open(path, os.O_CREAT | os.O_RDWR, 0o666)
    except OSError as exc:
        raise MetadataWriteFailure("open metadata", exc) from exc

    with os.fdopen(fd, "r+", encoding="utf-8") as handle:
        try:
            text = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise MetadataWriteFailure(f"read {path}", exc) from exc

        if text.strip():
            try:
                contents = json.loads(text)
            except json.JSONDecodeError as exc:
                raise MetadataWriteFailure(f"decode JSON at {path}", exc) from exc
            if not isinstance(contents, dict):
                raise MetadataWriteFailure(
                    f"decode JSON at {path}", "expected a JSON object"
                )
        else:
            contents = {}

        contents[key] = value
        try:
            encoded = json.dumps(contents) + "\n"
        except (TypeError, ValueError) as exc:
            raise MetadataWriteFailure(f"encode JSON to {path}", exc) from exc
        try:
            handle.seek(0)
            handle.truncate(0)
            handle.write(encoded)
        except OSError as exc:
            raise MetadataWriteFailure(f"write JSON to {path}", exc) from exc


class MetadataFinalizer:
    """Records which application content produced the droplet."""

    def __init__(self) -> None:
        self.logger = get_logger("metadata")

    def finalize(self, request: StagingRequest, version: str) -> None:
        metadata = PackMetadata(app=AppMetadata(name=request.app_name, sha=version))
        self.logger.info("Writing %s to %s", PACK_METADATA_KEY, request.metadata_path)
        try:
            set_json_key(request.metadata_path, PACK_METADATA_KEY, metadata.to_dict())
        except MetadataWriteFailure as exc:
            raise MetadataWriteFailure("write metadata", exc) from exc


__all__ = ["MetadataFinalizer", "PACK_METADATA_KEY", "set_json_key"]
