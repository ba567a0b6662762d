"""Read and patch the rendered report's ``widgets/summary.json``.

The document is validated against :class:`SummaryDocument`, but the write
goes through the raw decoded object so key order and any fields the model
does not declare survive the rewrite unchanged.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ReplicationError, SummaryParseError

logger = logging.getLogger(__name__)

SUMMARY_RELATIVE_PATH = Path("widgets") / "summary.json"


class Statistic(BaseModel):
    """Aggregate test counts shown on the report overview."""

    model_config = ConfigDict(extra="allow")

    failed: int = 0
    broken: int = 0
    skipped: int = 0
    passed: int = 0
    unknown: int = 0
    total: int = 0


class SummaryDocument(BaseModel):
    """Shape of Allure's summary widget document."""

    model_config = ConfigDict(extra="allow")

    reportName: Optional[str] = Field(default=None, description="Display title")
    testRuns: Optional[List[Any]] = Field(default=None)
    statistic: Optional[Statistic] = Field(default=None)
    time: Optional[Any] = Field(default=None)


def _read_raw(summary_path: Path, title: Optional[str]) -> Dict[str, Any]:
    if not summary_path.is_file():
        raise SummaryParseError(
            f"Summary document not found: {summary_path}",
            path=str(summary_path),
            title=title,
        )
    try:
        raw = json.loads(summary_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SummaryParseError(
            f"Failed to decode summary document {summary_path}: {exc}",
            path=str(summary_path),
            title=title,
        ) from exc
    if not isinstance(raw, dict):
        raise SummaryParseError(
            f"Expected mapping at root of summary document {summary_path}, "
            f"got {type(raw).__name__}",
            path=str(summary_path),
            title=title,
        )
    try:
        SummaryDocument.model_validate(raw)
    except ValidationError as exc:
        raise SummaryParseError(
            f"Invalid summary document at {summary_path}",
            path=str(summary_path),
            title=title,
            validation_errors=[
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ],
        ) from exc
    return raw


def load_summary(summary_path: Path | str) -> SummaryDocument:
    """Load and validate a summary document."""

    summary_path = Path(summary_path)
    return SummaryDocument.model_validate(_read_raw(summary_path, None))


def set_report_title(summary_path: Path | str, title: str) -> SummaryDocument:
    """Set ``reportName`` to *title* and rewrite the document in place.

    Raises:
        SummaryParseError: If the file is absent or not a summary document.
        ReplicationError: If the rewrite fails.
    """

    summary_path = Path(summary_path)
    raw = _read_raw(summary_path, title)
    raw["reportName"] = title

    try:
        summary_path.write_text(json.dumps(raw, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:
        raise ReplicationError(
            f"Failed to write summary document {summary_path}: {exc}",
            path=str(summary_path),
            original_error=exc,
            context={"title": title},
        ) from exc

    logger.info("Set report title to %r in %s", title, summary_path)
    return SummaryDocument.model_validate(raw)


__all__ = [
    "SUMMARY_RELATIVE_PATH",
    "Statistic",
    "SummaryDocument",
    "load_summary",
    "set_report_title",
]
