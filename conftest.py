"""Pytest configuration keeping live allure tests opt-in."""

from __future__ import annotations

import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--allure",
        action="store_true",
        default=False,
        help="run tests that invoke a real allure binary",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "requires_allure: test launches the real allure command line "
        "and is skipped unless --allure is passed",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if config.getoption("--allure"):
        return
    skip_live = pytest.mark.skip(
        reason="requires --allure to run against a real allure binary"
    )
    for item in items:
        if "requires_allure" in item.keywords:
            item.add_marker(skip_live)
