"""Render requests: the immutable input of one report generation, loadable from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import RequestConfigError
from .history import HISTORY_DIRNAME
from .path_utils import artifact_dir_for, resolve_directory, summary_path_for

PATH_FIELDS = (
    "output_directory",
    "results_directory",
    "archive_directory",
    "history_source",
)


class RenderRequest(BaseModel):
    """Everything one report generation needs, fixed before it starts.

    Attributes:
        output_directory: Parent of the rendered ``allure-report`` directory.
        results_directory: Raw results the renderer reads.
        keep_history: Merge the previous report's trend history first.
        keep_artifact_snapshots: Archive the previous report before rendering.
        archive_directory: Where snapshots go; defaults to ``output_directory``.
        history_source: Previous report to take history from; defaults to the
            current report directory.
        report_title: Display title patched into the rendered summary.
        environment_parameters: Pairs for the report's Environment panel.
        environment_format: ``xml`` or ``properties``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    output_directory: Path = Field(..., description="Report output directory")
    results_directory: Path = Field(..., description="Renderer input directory")
    keep_history: bool = Field(True)
    keep_artifact_snapshots: bool = Field(False)
    archive_directory: Optional[Path] = Field(default=None)
    history_source: Optional[Path] = Field(default=None)
    report_title: Optional[str] = Field(default=None)
    environment_parameters: Optional[Dict[str, str]] = Field(default=None)
    environment_format: Literal["xml", "properties"] = Field("xml")

    @field_validator("environment_parameters", mode="before")
    @classmethod
    def _stringify_parameters(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {
                str(key): "" if item is None else str(item)
                for key, item in value.items()
            }
        return value

    @property
    def artifact_dir(self) -> Path:
        return artifact_dir_for(self.output_directory)

    @property
    def summary_path(self) -> Path:
        return summary_path_for(self.artifact_dir)

    @property
    def previous_history_dir(self) -> Path:
        source = self.history_source or self.artifact_dir
        return source / HISTORY_DIRNAME

    def with_title(self, title: Optional[str]) -> "RenderRequest":
        """Return a copy with a different report title."""
        return self.model_validate({**self.model_dump(), "report_title": title})

    def with_environment(
        self, parameters: Optional[Mapping[str, Any]]
    ) -> "RenderRequest":
        """Return a copy with different environment parameters."""
        return self.model_validate(
            {**self.model_dump(), "environment_parameters": parameters}
        )


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise RequestConfigError(f"Request file not found: {path}", path=str(path))
    raw = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise RequestConfigError(
            f"Failed to parse request file {path}: {exc}", path=str(path)
        ) from exc
    if not isinstance(data, dict):
        raise RequestConfigError(
            f"Expected mapping at root of request file {path}, got {type(data)!r}",
            path=str(path),
        )
    return data


def build_request(
    data: Mapping[str, Any], *, base_dir: Optional[Path] = None, source: str = "<args>"
) -> RenderRequest:
    """Validate *data* into a request, anchoring relative paths at *base_dir*."""

    payload = {key: value for key, value in data.items() if value is not None}
    for key in PATH_FIELDS:
        if key in payload:
            payload[key] = resolve_directory(payload[key], base=base_dir)
    try:
        return RenderRequest(**payload)
    except ValidationError as exc:
        raise RequestConfigError(
            f"Invalid render request from {source}: {exc}", path=source
        ) from exc


def load_request(
    path: Path | str, overrides: Optional[Mapping[str, Any]] = None
) -> RenderRequest:
    """Load a render request from YAML.

    Relative paths inside the file resolve against the file's directory.
    Non-``None`` *overrides* replace values from the file.
    """

    request_path = Path(path).expanduser().resolve()
    data = _load_yaml_file(request_path)
    base_dir = request_path.parent
    data = {key: value for key, value in data.items() if value is not None}
    for key in PATH_FIELDS:
        if key in data:
            data[key] = resolve_directory(data[key], base=base_dir)
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    return build_request(data, source=str(request_path))


__all__ = ["RenderRequest", "build_request", "load_request"]
