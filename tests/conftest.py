"""Shared pytest fixtures for the TestMe test suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure src/ is on the path so all service imports resolve.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


@pytest.fixture
def tmp_db(tmp_path, monkeypatch):
    """Temporary SQLite file shared by every storage module.

    Monkeypatches DB_PATH so tests never touch data/app.db.
    """
    db_file = tmp_path / "test_app.db"

    import services.credential_store as cred_mod
    import utils.metrics as metrics_mod

    monkeypatch.setattr(cred_mod, "DB_PATH", db_file)
    monkeypatch.setattr(metrics_mod, "DB_PATH", db_file)
    return db_file

