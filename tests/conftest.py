"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from rtmp_exporter.config.settings import StatsConfig

TESTDATA = Path(__file__).parent / "testdata"


@pytest.fixture
def stats_path() -> Path:
    return TESTDATA / "stats.xml"


@pytest.fixture
def stats_bytes(stats_path: Path) -> bytes:
    return stats_path.read_bytes()


@pytest.fixture
def file_stats_config(stats_path: Path) -> StatsConfig:
    return StatsConfig(file=str(stats_path))
