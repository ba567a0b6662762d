from __future__ import annotations

from pathlib import Path

import pytest

from allure_lifecycle.renderer import AllureRenderer
from tests.helpers.fake_renderer import FakeRenderer


@pytest.fixture(autouse=True)
def reset_allure_cache():
    """Reset AllureRenderer's cached binary so detection tests stay isolated."""
    AllureRenderer._cached_bin_path = None
    AllureRenderer._cached_version = None
    yield
    AllureRenderer._cached_bin_path = None
    AllureRenderer._cached_version = None


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def workspace(tmp_path: Path) -> dict:
    """Output and results directories for one report."""
    output_dir = tmp_path / "out"
    results_dir = tmp_path / "allure-results"
    output_dir.mkdir()
    results_dir.mkdir()
    (results_dir / "0001-result.json").write_text("{}", encoding="utf-8")
    return {"output_dir": output_dir, "results_dir": results_dir}
