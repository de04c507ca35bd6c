"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Every test runs with:
    - no BACKUPCTL_* variables inherited from the developer's shell
    - HOME pointing at an empty temporary directory, so ~/.backupctl.yaml
      and ~/.backupctl/ca.pem never leak in from the real home directory
"""

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from backupctl.core.config import DEFAULTS
from backupctl.core.config_schema import Settings


# =============================================================================
# Environment Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at an empty directory and drop BACKUPCTL_* variables."""
    for key in list(os.environ):
        if key.upper().startswith("BACKUPCTL_"):
            monkeypatch.delenv(key)

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """
    Build Settings from the compiled-in defaults plus overrides.

    Usage:
        def test_backup(make_settings):
            settings = make_settings(backup_type="hot", storage_name="s3")
    """

    def factory(**overrides: Any) -> Settings:
        return Settings(**{**DEFAULTS, **overrides})

    return factory


@pytest.fixture
def settings(make_settings: Callable[..., Settings]) -> Settings:
    """Default settings."""
    return make_settings()
