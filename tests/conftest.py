from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from app.config import AppSettings, ImporterSettings, LayoutSettings, RelationshipMapSettings


def _clear_tfd_env() -> None:
    for key in list(os.environ):
        if key.startswith("TFD_"):
            os.environ.pop(key, None)


_clear_tfd_env()


@pytest.fixture(autouse=True)
def clear_tfd_env() -> Generator[None, None, None]:
    _clear_tfd_env()
    yield
    _clear_tfd_env()


@pytest.fixture
def app_settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        title="Test Diagrams",
        output_dir=tmp_path / "diagrams",
        layout=LayoutSettings(),
        importer=ImporterSettings(),
        relationship_map=RelationshipMapSettings(),
    )


@pytest.fixture
def app_settings_factory(app_settings: AppSettings) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return app_settings.model_copy(update=overrides)

    return _factory
