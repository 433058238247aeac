from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep settings writes out of the real user config directory."""
    config_dir = tmp_path_factory.mktemp("config")
    monkeypatch.setenv("RMD_CONFIG_DIR", str(config_dir))
    return config_dir
