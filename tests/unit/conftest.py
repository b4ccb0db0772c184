"""Shared fixtures for unit tests."""

from __future__ import annotations

import logging
from typing import Any, Callable
from unittest.mock import Mock

import pytest

from src.core.settings import BuildInfoSettings, FixedSettings, ObservabilitySettings, Settings


def build_settings(
    *,
    source: str = "file",
    base_dir: str = ".",
    base_url: str | None = None,
    filename: str = "__buildInfo.txt",
    timeout: float | None = None,
    fixed_id: str = "EDITOR",
    fixed_bundle_version: str = "",
    distribution: str | None = None,
    include_start_time: bool = False,
) -> Settings:
    return Settings(
        build_info=BuildInfoSettings(
            source=source,
            filename=filename,
            base_dir=base_dir,
            base_url=base_url,
            timeout=timeout,
        ),
        fixed=FixedSettings(
            id=fixed_id,
            bundle_version=fixed_bundle_version,
            distribution=distribution,
            include_start_time=include_start_time,
        ),
        observability=ObservabilitySettings(log_level="INFO"),
    )


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    return build_settings


@pytest.fixture
def mock_logger() -> Any:
    return Mock(spec=logging.Logger)
