"""Report generation sequenced around a single renderer run.

``generate_report`` walks a fixed state machine::

    IDLE -> HISTORY_MERGED -> ARCHIVED -> ENVIRONMENT_EMITTED
         -> RENDERED -> TITLE_PATCHED -> DONE

Optional steps that the request disables are skipped. The first failing step
aborts the run and its exception propagates unchanged; side effects of steps
that already completed stay on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .archive import archive_artifact
from .environment import emit_environment
from .history import HistorySet, merge_history_into
from .renderer import AllureRenderer, RenderResult
from .request import RenderRequest
from .summary import set_report_title

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    IDLE = "idle"
    HISTORY_MERGED = "history_merged"
    ARCHIVED = "archived"
    ENVIRONMENT_EMITTED = "environment_emitted"
    RENDERED = "rendered"
    TITLE_PATCHED = "title_patched"
    DONE = "done"


@dataclass
class LifecycleResult:
    """What a completed run produced."""

    artifact_dir: Path
    render: RenderResult
    snapshot_dir: Optional[Path] = None
    history: Optional[HistorySet] = None
    environment_file: Optional[Path] = None
    states: List[LifecycleState] = field(default_factory=list)


class LifecycleManager:
    """Runs one report generation at a time.

    The manager holds no locks: callers must not point two concurrent runs at
    the same results or output directory.
    """

    def __init__(self, renderer: Optional[AllureRenderer] = None) -> None:
        self._renderer = renderer
        self.state = LifecycleState.IDLE
        self.states: List[LifecycleState] = [LifecycleState.IDLE]

    @property
    def renderer(self) -> AllureRenderer:
        if self._renderer is None:
            self._renderer = AllureRenderer.detect()
        return self._renderer

    def _advance(self, state: LifecycleState) -> None:
        logger.info("Lifecycle state %s -> %s", self.state.value, state.value)
        self.state = state
        self.states.append(state)

    def generate_report(self, request: RenderRequest) -> LifecycleResult:
        """Merge history, archive, emit environment, render, patch title.

        Raises:
            HistoryEmptyError: Previous history directory present but empty.
            ReplicationError: Any filesystem fault.
            RenderError: Renderer missing or exited non-zero.
            SummaryParseError: Rendered summary missing or malformed.
        """

        self.state = LifecycleState.IDLE
        self.states = [LifecycleState.IDLE]
        # Resolve the renderer before any step touches the disk.
        renderer = self.renderer
        artifact_dir = request.artifact_dir
        history: Optional[HistorySet] = None
        snapshot_dir: Optional[Path] = None
        environment_file: Optional[Path] = None

        if request.keep_history:
            history = merge_history_into(
                request.previous_history_dir, request.results_directory
            )
            self._advance(LifecycleState.HISTORY_MERGED)

        if request.keep_artifact_snapshots:
            snapshot_dir = archive_artifact(artifact_dir, request.archive_directory)
            self._advance(LifecycleState.ARCHIVED)

        if request.environment_parameters:
            environment_file = emit_environment(
                request.environment_parameters,
                request.results_directory,
                fmt=request.environment_format,
            )
            self._advance(LifecycleState.ENVIRONMENT_EMITTED)

        render = renderer.generate(request.results_directory, artifact_dir)
        self._advance(LifecycleState.RENDERED)

        if request.report_title is not None:
            set_report_title(request.summary_path, request.report_title)
            self._advance(LifecycleState.TITLE_PATCHED)

        self._advance(LifecycleState.DONE)
        return LifecycleResult(
            artifact_dir=artifact_dir,
            render=render,
            snapshot_dir=snapshot_dir,
            history=history,
            environment_file=environment_file,
            states=list(self.states),
        )


def generate_report(
    request: RenderRequest, *, renderer: Optional[AllureRenderer] = None
) -> LifecycleResult:
    """Run the full lifecycle for *request* with a fresh manager."""
    return LifecycleManager(renderer=renderer).generate_report(request)


__all__ = ["LifecycleManager", "LifecycleResult", "LifecycleState", "generate_report"]
