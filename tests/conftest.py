from __future__ import annotations

import os

import pytest


def pytest_report_header(config: pytest.Config) -> list[str]:
    headers: list[str] = []
    addopts: str = os.environ.get("PYTEST_ADDOPTS", "")
    if addopts:
        headers.append(f"PYTEST_ADDOPTS: {addopts}")
    return headers


PYTEST_PLUGINS_PACKAGE = f"{__package__}.pytest_plugins"


pytest_plugins = [
    f"{PYTEST_PLUGINS_PACKAGE}.auto_markers",
]
