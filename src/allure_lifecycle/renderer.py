"""External ``allure generate`` invocation.

The renderer is an opaque process: it gets an argument list, runs to
completion with its output captured, and only its exit code is interpreted.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .exceptions import RenderError, RendererNotFoundError

logger = logging.getLogger(__name__)

ALLURE_BIN_ENV = "ALLURE_BIN"
DEFAULT_BINARY = "allure"


@dataclass
class RenderResult:
    """Outcome of a successful renderer run."""

    command: List[str]
    returncode: int
    stdout: str
    stderr: str
    output_dir: Path


class AllureRenderer:
    """Thin wrapper around the Allure command line.

    The resolved binary and its version are cached on the class after the
    first successful :meth:`detect`.
    """

    _cached_bin_path: Optional[str] = None
    _cached_version: Optional[str] = None

    def __init__(self, bin_path: Optional[str] = None) -> None:
        self._bin_path = bin_path

    @classmethod
    def detect(cls) -> "AllureRenderer":
        """Locate the allure binary via ``ALLURE_BIN`` or ``PATH``.

        Raises:
            RendererNotFoundError: If no usable binary is found.
        """

        if cls._cached_bin_path:
            return cls(cls._cached_bin_path)

        env_bin = os.environ.get(ALLURE_BIN_ENV)
        if env_bin:
            if not os.path.isfile(env_bin):
                raise RendererNotFoundError(
                    f"{ALLURE_BIN_ENV} path does not exist: {env_bin}",
                    hints=[f"Point {ALLURE_BIN_ENV} at the allure executable"],
                )
            if not os.access(env_bin, os.X_OK):
                raise RendererNotFoundError(
                    f"{ALLURE_BIN_ENV} path is not executable: {env_bin}",
                )
            bin_path = env_bin
        else:
            found = shutil.which(DEFAULT_BINARY)
            if not found:
                raise RendererNotFoundError(
                    "Allure not found on PATH",
                    hints=[
                        "Install the Allure command line tool",
                        f"Or set {ALLURE_BIN_ENV} to the allure executable",
                    ],
                )
            bin_path = found

        cls._cached_bin_path = bin_path
        cls._cached_version = cls._read_version(bin_path)
        logger.info(
            "Using allure binary %s (version %s)", bin_path, cls._cached_version
        )
        return cls(bin_path)

    @staticmethod
    def _read_version(bin_path: str) -> Optional[str]:
        try:
            completed = subprocess.run(
                [bin_path, "--version"],
                capture_output=True,
                text=True,
                check=False,
                timeout=60,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Could not determine allure version: %s", exc)
            return None
        version = (completed.stdout or "").strip()
        return version or None

    @property
    def bin_path(self) -> str:
        return self._bin_path or self._cached_bin_path or DEFAULT_BINARY

    @property
    def version(self) -> Optional[str]:
        return self._cached_version

    def build_command(self, results_dir: Path | str, output_dir: Path | str) -> List[str]:
        return [
            self.bin_path,
            "generate",
            "-o",
            str(output_dir),
            "--clean",
            str(results_dir),
        ]

    def generate(self, results_dir: Path | str, output_dir: Path | str) -> RenderResult:
        """Render *results_dir* into *output_dir*, replacing its contents.

        Blocks until the renderer exits.

        Raises:
            RendererNotFoundError: If the binary cannot be launched.
            RenderError: If the renderer exits with a non-zero code.
        """

        command = self.build_command(results_dir, output_dir)
        logger.info("Running renderer: %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,
                stdin=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise RendererNotFoundError(
                f"Failed to launch renderer {self.bin_path}: {exc}",
                command=command,
            ) from exc

        stdout = completed.stdout or ""
        stderr = completed.stderr or ""
        if stdout:
            logger.debug("Renderer stdout:\n%s", stdout)
        if stderr:
            logger.debug("Renderer stderr:\n%s", stderr)

        if completed.returncode != 0:
            raise RenderError(
                f"Renderer exited with code {completed.returncode}",
                command=command,
                returncode=completed.returncode,
                stdout=stdout,
                stderr=stderr,
                context={
                    "results_dir": str(results_dir),
                    "output_dir": str(output_dir),
                },
            )

        return RenderResult(
            command=command,
            returncode=completed.returncode,
            stdout=stdout,
            stderr=stderr,
            output_dir=Path(output_dir),
        )


__all__ = ["ALLURE_BIN_ENV", "AllureRenderer", "RenderResult"]
