"""Snapshot a rendered report before the next render replaces it."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from .exceptions import ReplicationError
from .replication import copy_tree

logger = logging.getLogger(__name__)

SNAPSHOT_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def artifact_creation_time(path: Path | str) -> datetime:
    """Return the local creation time of *path*.

    Uses ``st_birthtime`` where the platform reports it and falls back to
    ``st_ctime`` (creation time on Windows, inode change time elsewhere).
    """

    try:
        stat = os.stat(path)
    except OSError as exc:
        raise ReplicationError(
            f"Failed to stat artifact directory {path}: {exc}",
            path=str(path),
            original_error=exc,
        ) from exc
    created = getattr(stat, "st_birthtime", None)
    if created is None:
        created = stat.st_ctime
    return datetime.fromtimestamp(created)


def snapshot_name(artifact_dir: Path | str, created: datetime) -> str:
    """``allure-report`` created 2024-01-01 10:00 -> ``allure-report-2024-01-01_10-00-00``."""
    return f"{Path(artifact_dir).name}-{created.strftime(SNAPSHOT_TIMESTAMP_FORMAT)}"


def archive_artifact(
    artifact_dir: Path | str, archive_root: Optional[Path | str] = None
) -> Optional[Path]:
    """Copy *artifact_dir* into a snapshot named after its creation time.

    The snapshot is placed under *archive_root* when given, otherwise next to
    *artifact_dir*. Naming by creation time rather than the current time means
    archiving the same artifact twice collides instead of duplicating.

    Returns:
        The snapshot path, or ``None`` when there is no artifact yet.

    Raises:
        ReplicationError: If the snapshot already exists or copying fails.
    """

    artifact_dir = Path(artifact_dir)
    if not artifact_dir.is_dir():
        logger.info("No previous report at %s; nothing to archive", artifact_dir)
        return None

    created = artifact_creation_time(artifact_dir)
    root = Path(archive_root) if archive_root is not None else artifact_dir.parent
    destination = root / snapshot_name(artifact_dir, created)

    copy_tree(artifact_dir, destination)
    logger.info("Archived previous report %s to %s", artifact_dir, destination)
    return destination


__all__ = [
    "SNAPSHOT_TIMESTAMP_FORMAT",
    "archive_artifact",
    "artifact_creation_time",
    "snapshot_name",
]
