"""Shared fixtures: a copy of the sample configuration directory per test."""

from __future__ import annotations

import shutil
from datetime import datetime, timezone
from pathlib import Path

import pytest

FIXTURE_CONFIG_DIR = Path(__file__).resolve().parent / "fixtures" / "config"


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Copy the sample config directory so generated files land in tmp_path."""
    target = tmp_path / "config"
    shutil.copytree(FIXTURE_CONFIG_DIR, target)
    return target


@pytest.fixture
def generated_at() -> datetime:
    return datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep generator variables from the calling shell out of the tests."""
    for name in ("APIDOCS_CONFIG_DIR", "APIDOCS_BUILD_OPS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
