"""Shared fixtures for flowdeps tests: plain files under tmp_path, no services."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from flowdeps.core.config import FrontendSettings
from flowdeps.frontend.manifest_store import ManifestStore
from flowdeps.frontend.reconciler import ReconciliationEngine


@pytest.fixture
def store():
    return ManifestStore()


@pytest.fixture
def engine():
    return ReconciliationEngine()


@pytest.fixture
def settings(tmp_path: Path):
    return FrontendSettings(npm_folder=tmp_path)


@pytest.fixture
def write_json():
    def _write(path: Path, doc: dict) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(doc, indent=2) + "\n", encoding="utf-8")
        return path

    return _write
