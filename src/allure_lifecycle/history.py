"""Carry trend history from a previous report into the results directory.

Allure builds its trend graphs from ``<results>/history``; the files there
must be in place before the renderer runs.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from .exceptions import HistoryEmptyError, ReplicationError
from .replication import copy_file

logger = logging.getLogger(__name__)

HISTORY_DIRNAME = "history"


@dataclass(frozen=True)
class HistorySet:
    """History files found directly under a history directory."""

    source: Path
    files: Tuple[Path, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.files)

    def __bool__(self) -> bool:
        return bool(self.files)


def discover_history(history_dir: Path | str) -> HistorySet:
    """Return the flat, name-sorted history files in *history_dir*."""

    history_dir = Path(history_dir)
    try:
        files = tuple(
            sorted(
                (path for path in history_dir.iterdir() if path.is_file()),
                key=lambda path: path.name,
            )
        )
    except OSError as exc:
        raise ReplicationError(
            f"Failed to read history directory {history_dir}: {exc}",
            path=str(history_dir),
            original_error=exc,
        ) from exc
    return HistorySet(source=history_dir, files=files)


def merge_history_into(
    previous_history_dir: Path | str, results_dir: Path | str
) -> HistorySet:
    """Replace ``results_dir/history`` with the files of a previous report.

    Args:
        previous_history_dir: The ``history`` directory of the previous report.
        results_dir: The renderer's input directory.

    Returns:
        The merged :class:`HistorySet`; empty when there was no previous
        report, in which case nothing on disk is touched.

    Raises:
        HistoryEmptyError: If *previous_history_dir* exists but holds no files.
        ReplicationError: On any filesystem fault.
    """

    previous_history_dir = Path(previous_history_dir)
    target = Path(results_dir) / HISTORY_DIRNAME

    if not previous_history_dir.is_dir():
        logger.info(
            "No previous history at %s; skipping history merge", previous_history_dir
        )
        return HistorySet(source=previous_history_dir)

    history = discover_history(previous_history_dir)
    if not history:
        raise HistoryEmptyError(str(previous_history_dir))

    try:
        if target.exists():
            shutil.rmtree(target)
        target.mkdir(parents=True)
    except OSError as exc:
        raise ReplicationError(
            f"Failed to reset results history directory {target}: {exc}",
            path=str(target),
            original_error=exc,
        ) from exc

    for path in history.files:
        copy_file(path, target / path.name)

    logger.info(
        "Merged %d history file(s) from %s into %s",
        len(history),
        previous_history_dir,
        target,
    )
    return history


__all__ = ["HISTORY_DIRNAME", "HistorySet", "discover_history", "merge_history_into"]
