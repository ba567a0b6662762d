"""Lifecycle management for Allure report artifacts.

This package provides:
- History merging so trend graphs survive between renders
- Timestamped snapshots of the previous report
- Environment and title metadata for the rendered report
- A single orchestration call around the external ``allure generate`` run
"""

from __future__ import annotations

from .archive import archive_artifact
from .environment import emit_environment
from .exceptions import (
    HistoryEmptyError,
    LifecycleError,
    RenderError,
    RendererNotFoundError,
    ReplicationError,
    RequestConfigError,
    SummaryParseError,
)
from .history import HistorySet, merge_history_into
from .lifecycle import LifecycleManager, LifecycleResult, LifecycleState, generate_report
from .renderer import AllureRenderer, RenderResult
from .replication import copy_file, copy_tree
from .request import RenderRequest, load_request
from .summary import SummaryDocument, set_report_title

__all__ = [
    "AllureRenderer",
    "HistoryEmptyError",
    "HistorySet",
    "LifecycleError",
    "LifecycleManager",
    "LifecycleResult",
    "LifecycleState",
    "RenderError",
    "RenderRequest",
    "RenderResult",
    "RendererNotFoundError",
    "ReplicationError",
    "RequestConfigError",
    "SummaryDocument",
    "SummaryParseError",
    "archive_artifact",
    "copy_file",
    "copy_tree",
    "emit_environment",
    "generate_report",
    "load_request",
    "merge_history_into",
    "set_report_title",
]
