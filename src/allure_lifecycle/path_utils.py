"""Path helpers for report output and results directories."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .summary import SUMMARY_RELATIVE_PATH

ARTIFACT_DIRNAME = "allure-report"


def _iter_candidate_roots(start: Path) -> list[Path]:
    """Return candidate repo roots walking up from *start*."""

    if not start.is_absolute():
        start = start.resolve()
    candidates = [start]
    candidates.extend(start.parents)
    return candidates


def find_repo_root(start: Optional[Path] = None) -> Path:
    """Best-effort detection of the repository root.

    Walks upward from *start* (default: current working directory) until a
    directory containing a ``.git`` entry is found. Falls back to *start* if
    no explicit marker is detected.
    """

    start_path = start or Path.cwd()
    for candidate in _iter_candidate_roots(start_path):
        if (candidate / ".git").exists():
            return candidate
    return start_path


def resolve_directory(raw: str | Path, base: Optional[Path] = None) -> Path:
    """Expand ``~`` and anchor relative paths at *base* (default: repo root)."""

    path = Path(raw).expanduser()
    if path.is_absolute():
        return path
    root = base if base is not None else find_repo_root()
    return (root / path).resolve()


def artifact_dir_for(output_dir: Path | str) -> Path:
    """Directory the renderer writes into for a given output directory."""
    return Path(output_dir) / ARTIFACT_DIRNAME


def summary_path_for(artifact_dir: Path | str) -> Path:
    return Path(artifact_dir) / SUMMARY_RELATIVE_PATH
