"""Conflict-free recursive directory copies.

A copy is planned in full before anything is written: the source tree is
walked once, destination conflicts are checked, and only then are directories
created and files copied. A refused copy therefore never leaves a partially
written destination behind.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from .exceptions import ReplicationError

logger = logging.getLogger(__name__)


@dataclass
class CopyPlan:
    """Directories to create and (source, destination) file pairs to copy."""

    source: Path
    destination: Path
    directories: List[Path] = field(default_factory=list)
    files: List[Tuple[Path, Path]] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.files)


def _scan(src_dir: Path) -> List[os.DirEntry]:
    try:
        with os.scandir(src_dir) as it:
            return sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        raise ReplicationError(
            f"Failed to list directory {src_dir}: {exc}",
            path=str(src_dir),
            original_error=exc,
        ) from exc


def _walk(
    src_dir: Path,
    dst_dir: Path,
    ancestors: Tuple[str, ...],
    plan: CopyPlan,
) -> None:
    for entry in _scan(src_dir):
        src = Path(entry.path)
        dst = dst_dir / entry.name
        if entry.is_dir():
            real = os.path.realpath(entry.path)
            if real in ancestors:
                raise ReplicationError(
                    f"Symbolic link cycle detected at {src} (points to {real})",
                    path=str(src),
                    hints=["Remove the looping link from the source tree"],
                )
            plan.directories.append(dst)
            _walk(src, dst, ancestors + (real,), plan)
        elif entry.is_file():
            plan.files.append((src, dst))
        elif entry.is_symlink():
            raise ReplicationError(
                f"Broken symbolic link in source tree: {src}",
                path=str(src),
            )
        else:
            # Sockets, FIFOs and devices have no meaningful copy.
            logger.debug("Skipping non-regular file %s", src)


def plan_copy(
    source: Path | str, destination: Path | str, *, overwrite: bool = False
) -> CopyPlan:
    """Walk *source* and check every destination path without writing.

    Raises:
        ReplicationError: If the source is missing, contains a symlink cycle,
            or (without *overwrite*) any destination file already exists.
            A destination directory standing where a file would go is
            rejected even with *overwrite*.
    """

    source = Path(source)
    destination = Path(destination)
    if not source.is_dir():
        raise ReplicationError(
            f"Source directory does not exist: {source}", path=str(source)
        )

    plan = CopyPlan(source=source, destination=destination)
    plan.directories.append(destination)
    _walk(source, destination, (os.path.realpath(source),), plan)

    for directory in plan.directories:
        if directory.exists() and not directory.is_dir():
            raise ReplicationError(
                f"Destination path exists and is not a directory: {directory}",
                path=str(directory),
            )

    for _, dst in plan.files:
        if dst.is_dir():
            raise ReplicationError(
                f"Destination path exists and is a directory: {dst}",
                path=str(dst),
            )

    if not overwrite:
        conflicts = [dst for _, dst in plan.files if dst.exists() or dst.is_symlink()]
        if conflicts:
            raise ReplicationError(
                f"Destination file already exists: {conflicts[0]}",
                path=str(conflicts[0]),
                context={"conflicts": len(conflicts)},
                hints=["Pass overwrite=True to replace existing files"],
            )
    return plan


def copy_file(
    source: Path | str, destination: Path | str, *, overwrite: bool = False
) -> Path:
    """Copy a single file, refusing to replace an existing one by default."""

    source = Path(source)
    destination = Path(destination)
    if destination.is_dir():
        raise ReplicationError(
            f"Destination path exists and is a directory: {destination}",
            path=str(destination),
        )
    if not overwrite and (destination.exists() or destination.is_symlink()):
        raise ReplicationError(
            f"Destination file already exists: {destination}",
            path=str(destination),
        )
    try:
        shutil.copy2(source, destination)
    except OSError as exc:
        raise ReplicationError(
            f"Failed to copy {source} to {destination}: {exc}",
            path=str(source),
            original_error=exc,
        ) from exc
    logger.debug("Copied %s -> %s", source, destination)
    return destination


def copy_tree(
    source: Path | str, destination: Path | str, *, overwrite: bool = False
) -> CopyPlan:
    """Recursively mirror *source* into *destination*.

    Every directory is created, empty ones included, and every regular file is
    copied to the same relative location. Nothing already present in
    *destination* is deleted.

    Returns:
        The executed :class:`CopyPlan`.
    """

    plan = plan_copy(source, destination, overwrite=overwrite)
    for directory in plan.directories:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ReplicationError(
                f"Failed to create directory {directory}: {exc}",
                path=str(directory),
                original_error=exc,
            ) from exc
    for src, dst in plan.files:
        copy_file(src, dst, overwrite=True)

    logger.info(
        "Copied %d file(s) in %d director(ies) from %s to %s",
        plan.file_count,
        len(plan.directories),
        plan.source,
        plan.destination,
    )
    return plan


__all__ = ["CopyPlan", "plan_copy", "copy_file", "copy_tree"]
