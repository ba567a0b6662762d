"""Write the environment parameters the renderer shows in its Environment panel."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Literal, Mapping

from .exceptions import ReplicationError

logger = logging.getLogger(__name__)

EnvironmentFormat = Literal["xml", "properties"]

ENVIRONMENT_FILENAMES = {
    "xml": "environment.xml",
    "properties": "environment.properties",
}


def _render_xml(parameters: Mapping[str, str]) -> str:
    root = ET.Element("environment")
    for key, value in parameters.items():
        parameter = ET.SubElement(root, "parameter")
        ET.SubElement(parameter, "key").text = str(key)
        ET.SubElement(parameter, "value").text = str(value)
    ET.indent(root)
    body = ET.tostring(root, encoding="unicode")
    return '<?xml version="1.0" encoding="utf-8"?>\n' + body + "\n"


def _escape_property(text: str, *, is_key: bool) -> str:
    escaped = (
        text.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    if is_key:
        for char in (" ", "=", ":"):
            escaped = escaped.replace(char, "\\" + char)
    return escaped


def _render_properties(parameters: Mapping[str, str]) -> str:
    lines = [
        f"{_escape_property(str(key), is_key=True)}="
        f"{_escape_property(str(value), is_key=False)}"
        for key, value in parameters.items()
    ]
    return "\n".join(lines) + "\n" if lines else ""


def emit_environment(
    parameters: Mapping[str, str],
    results_dir: Path | str,
    *,
    fmt: EnvironmentFormat = "xml",
) -> Path:
    """Serialize *parameters* into the results directory.

    One entry is written per pair, in the mapping's iteration order. Any
    existing environment file of the same format is overwritten.

    Returns:
        Path of the written file.
    """

    if fmt not in ENVIRONMENT_FILENAMES:
        raise ValueError(f"Unsupported environment format {fmt!r}")

    path = Path(results_dir) / ENVIRONMENT_FILENAMES[fmt]
    body = _render_xml(parameters) if fmt == "xml" else _render_properties(parameters)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
    except OSError as exc:
        raise ReplicationError(
            f"Failed to write environment file {path}: {exc}",
            path=str(path),
            original_error=exc,
        ) from exc

    logger.info("Wrote %d environment parameter(s) to %s", len(parameters), path)
    return path


__all__ = ["ENVIRONMENT_FILENAMES", "EnvironmentFormat", "emit_environment"]
