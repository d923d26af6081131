import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the settings file at a temp dir so tests never touch the real one."""
    from recordnow.app import config

    path = tmp_path / "recordnow_config.json"
    monkeypatch.setattr(config, "GLOBAL_CONFIG", path)
    return path
