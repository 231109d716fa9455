"""Save and load a session: its snapshot history and the visible log feed.

An archive is plain JSON, gzip compressed on disk::

    {"schema_version": 1, "history": [{"state": {...}, "log_count": 3}, ...],
     "logs": ["..."], "cover_image": null}
"""

from __future__ import annotations

import gzip
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .cards import CardDefinition
from .errors import ArchiveFormatError, SimModelError
from .history import Snapshot
from .state import DuelState

if TYPE_CHECKING:
    from .engine import Engine

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
SUPPORTED_SCHEMA_VERSIONS = (SCHEMA_VERSION,)


def build_archive(engine: "Engine", cover_image: str | None = None) -> dict[str, Any]:
    """The live state is pushed first so the archive ends on the current board."""
    engine.push_history()
    return {
        "schema_version": SCHEMA_VERSION,
        "history": [
            {"state": snap.state.to_dict(), "log_count": snap.log_count} for snap in engine.history.snapshots
        ],
        "logs": list(engine.state.logs),
        "cover_image": cover_image,
    }


def save_archive(engine: "Engine", path: str | Path, cover_image: str | None = None) -> Path:
    path = Path(path)
    archive = build_archive(engine, cover_image=cover_image)
    with gzip.open(path, "wt", encoding="utf-8") as handle:
        json.dump(archive, handle)
    logger.info("Archive saved to %s (%d snapshots)", path, len(archive["history"]))
    return path


def load_archive_file(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    try:
        with gzip.open(path, "rt", encoding="utf-8") as handle:
            archive = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise ArchiveFormatError(f"Could not read archive {path}: {exc}") from exc
    validate_archive(archive)
    logger.info("Archive read from %s", path)
    return archive


def validate_archive(archive: Any) -> None:
    if not isinstance(archive, dict):
        raise ArchiveFormatError("Archive must be a JSON object.")
    version = archive.get("schema_version", SCHEMA_VERSION)
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ArchiveFormatError(f"Unsupported archive schema version: {version!r}")
    if not isinstance(archive.get("history", []), list):
        raise ArchiveFormatError("Archive history must be a list.")
    if not isinstance(archive.get("logs", []), list):
        raise ArchiveFormatError("Archive logs must be a list.")


def snapshots_from_archive(archive: dict[str, Any], definitions: dict[str, CardDefinition]) -> list[Snapshot]:
    validate_archive(archive)
    snapshots: list[Snapshot] = []
    for position, frame in enumerate(archive.get("history") or []):
        if not isinstance(frame, dict) or "state" not in frame:
            logger.warning("Archive frame %d has no state; skipped", position)
            continue
        if "log_count" not in frame:
            logger.warning("Archive frame %d has no log_count; assuming 0", position)
        try:
            state = DuelState.from_dict(frame["state"], definitions)
        except SimModelError as exc:
            raise ArchiveFormatError(f"Archive frame {position}: {exc}") from exc
        snapshots.append(Snapshot(state=state, log_count=int(frame.get("log_count", 0))))
    return snapshots
